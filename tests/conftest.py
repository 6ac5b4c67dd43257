"""
Pytest configuration and fixtures.
"""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import Mock, AsyncMock

import pytest
import pytest_asyncio

from clinic_inbox.config import Settings
from clinic_inbox.core.enums import StaffRole, StaffStatus
from clinic_inbox.core.models import InboundMessage, StaffMember
from clinic_inbox.services.external import WhatsAppGateway
from clinic_inbox.services.inbound import InboundMessageService
from clinic_inbox.services.intent import IntentClassifier
from clinic_inbox.services.store import Datastore

# 12:00 in Dubai on Sunday 10 March 2030
FIXED_NOW = datetime(2030, 3, 10, 8, 0, tzinfo=timezone.utc)
TODAY = date(2030, 3, 10)

STAFF_PHONE = "971555000111"
PATIENT_PHONE = "0501234567"

DIRECTORY = ["Sara Ahmed", "Fatima Khan", "Ali Hassan"]


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


def booking_text(
    name: str = "Aisha Khan",
    phone: str = PATIENT_PHONE,
    when: str = "15th March 2030",
    time: str = "3pm",
    service: str = "Hydrafacial",
    booked_by: str = "Booked by Sara",
) -> str:
    lines = ["*Appointment Confirmation*", f"Name : {name}", f"Phone : {phone}"]
    if when:
        lines.append(f"Date : {when}")
    if time:
        lines.append(f"Time : {time}")
    if service:
        lines.append(f"Service : {service}")
    if booked_by:
        lines.append(booked_by)
    return "\n".join(lines)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway database and a fake WATI account."""
    return Settings(
        database_path=str(tmp_path / "clinic.db"),
        wati_api_url="https://live-server.wati.test/1234",
        wati_api_key="secret",
        openai_api_key=None,
        timezone="Asia/Dubai",
        country_code="971",
    )


@pytest_asyncio.fixture
async def store(settings):
    """Initialized datastore seeded with the staff directory."""
    datastore = Datastore(settings=settings)
    await datastore.init_schema()
    await datastore.add_staff(StaffMember(full_name="Sara Ahmed", role=StaffRole.RECEPTION))
    await datastore.add_staff(StaffMember(full_name="Noor Saleh", role=StaffRole.NURSE))
    await datastore.add_staff(StaffMember(full_name="Fatima Khan", role=StaffRole.RECEPTION))
    await datastore.add_staff(
        StaffMember(full_name="Mariam Yousef", role=StaffRole.RECEPTION, status=StaffStatus.INACTIVE)
    )
    await datastore.add_staff(StaffMember(full_name="Ali Hassan", role=StaffRole.ADMIN))
    return datastore


@pytest.fixture
def gateway():
    """Mock WhatsApp gateway that accepts every message."""
    mock = Mock(spec=WhatsAppGateway)
    mock.send_message = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def classifier():
    """Intent classifier running on keywords only."""
    return IntentClassifier(ai_classifier=None)


@pytest.fixture
def service(store, gateway, classifier, settings, clock):
    return InboundMessageService(
        store=store,
        gateway=gateway,
        classifier=classifier,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def make_message(clock):
    def _make(text: str, phone: str = STAFF_PHONE, sender_name: str = "Reception") -> InboundMessage:
        return InboundMessage(phone=phone, text=text, sender_name=sender_name, received_at=clock())

    return _make
