"""
Staff directory models.
"""

from typing import List
from pydantic import BaseModel, ConfigDict

from ..enums import StaffRole, StaffStatus


class StaffMember(BaseModel):
    """Clinic staff member (read-only from the webhook's point of view)."""

    model_config = ConfigDict(extra="ignore")

    full_name: str
    role: StaffRole = StaffRole.RECEPTION
    status: StaffStatus = StaffStatus.ACTIVE

    @property
    def first_name(self) -> str:
        parts = self.full_name.split()
        return parts[0] if parts else ""

    @property
    def can_book(self) -> bool:
        return self.status == StaffStatus.ACTIVE and self.role in StaffRole.booking_capable()


def directory_names(staff: List[StaffMember]) -> List[str]:
    """Full names of booking-capable staff, in directory order."""
    return [member.full_name for member in staff if member.can_book]
