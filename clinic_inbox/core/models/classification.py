"""
Intent classification result model.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, field_validator

from ..enums import Intent, Confidence, ClassifierSource


class ClassificationResult(BaseModel):
    """Intent of a patient message, as returned by a classifier."""

    model_config = ConfigDict(extra="ignore")

    intent: Intent
    confidence: Confidence = Confidence.LOW
    suggested_reply: Optional[str] = None
    needs_human: bool = True
    summary: str = ""
    new_date: Optional[str] = None
    new_time: Optional[str] = None
    source: ClassifierSource = ClassifierSource.AI

    @field_validator("intent", "confidence", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("new_date", "new_time", "suggested_reply", mode="before")
    @classmethod
    def _null_strings(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in {"", "null", "none"}:
            return None
        return value

    @property
    def is_confident_confirm(self) -> bool:
        return self.intent == Intent.CONFIRM and self.confidence == Confidence.HIGH

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
