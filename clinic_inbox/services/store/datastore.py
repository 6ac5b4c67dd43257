"""
SQLite-backed datastore.

Every operation opens a short-lived connection and runs in a worker thread
through ``asyncio.to_thread`` so the event loop never blocks on disk I/O.
There is no in-process lock: SQLite's own locking (bounded by the connect
timeout) serializes concurrent writers across requests and processes.
"""

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from ...config import Settings, get_settings
from ...core.enums import (
    AppointmentStatus,
    ConfirmationStatus,
    FollowupStatus,
    MessageDirection,
    MessageTag,
)
from ...core.exceptions import DatastoreError
from ...core.models import Appointment, MessageLogEntry, PendingRequest, StaffMember
from ...logging import get_logger
from .schema import SCHEMA, APPOINTMENT_COLUMNS, PENDING_REQUEST_COLUMNS

logger = get_logger("clinic.store")

T = TypeVar("T")

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def to_timestamp(value: datetime) -> str:
    """Fixed-width UTC timestamp; sorts lexicographically in time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_timestamp(value)
    if isinstance(value, bool):
        return int(value)
    return value


def _placeholders(values: Sequence[Any]) -> str:
    return ", ".join("?" for _ in values)


def _row_to_message(row: sqlite3.Row) -> MessageLogEntry:
    data = dict(row)
    data["text"] = data.pop("message_text")
    data["awaiting_fields"] = json.loads(data.get("awaiting_fields") or "[]")
    return MessageLogEntry(**data)


def _row_to_pending(row: sqlite3.Row) -> PendingRequest:
    data = dict(row)
    data["classifier_output"] = json.loads(data.get("classifier_output") or "{}")
    return PendingRequest(**data)


class Datastore:
    """Appointments, message log, staff directory and pending requests."""

    def __init__(self, path: Optional[str] = None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.path = path or settings.database_path
        self.timeout = settings.database_timeout

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _execute(self, work: Callable[[sqlite3.Connection], T]) -> T:
        conn = None
        try:
            conn = self._connect()
            with conn:
                return work(conn)
        except sqlite3.Error as e:
            logger.error({"event": "datastore_error", "error": str(e)})
            raise DatastoreError(str(e)) from e
        finally:
            if conn is not None:
                conn.close()

    async def _run(self, work: Callable[[sqlite3.Connection], T]) -> T:
        return await asyncio.to_thread(self._execute, work)

    async def init_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        await self._run(lambda conn: conn.executescript(SCHEMA))

    # Staff and patients

    async def add_staff(self, member: StaffMember) -> None:
        def _write(conn: sqlite3.Connection) -> None:
            conn.execute(
                "INSERT INTO staff (full_name, role, status) VALUES (?, ?, ?)",
                (member.full_name, member.role.value, member.status.value),
            )

        await self._run(_write)

    async def get_booking_staff(self) -> List[StaffMember]:
        """Active booking-capable staff in directory order."""
        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                "SELECT full_name, role, status FROM staff ORDER BY id"
            ).fetchall()

        rows = await self._run(_fetch)
        members = [StaffMember(**dict(row)) for row in rows]
        return [member for member in members if member.can_book]

    async def add_patient(self, phone: str, full_name: Optional[str] = None) -> None:
        def _write(conn: sqlite3.Connection) -> None:
            conn.execute(
                "INSERT OR REPLACE INTO patients (phone_number, full_name) VALUES (?, ?)",
                (phone, full_name),
            )

        await self._run(_write)

    async def patient_exists(self, phone_variants: Sequence[str]) -> bool:
        if not phone_variants:
            return False

        def _fetch(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute(
                f"SELECT 1 FROM patients WHERE phone_number IN ({_placeholders(phone_variants)}) LIMIT 1",
                tuple(phone_variants),
            ).fetchone()

        return await self._run(_fetch) is not None

    # Appointments

    async def _select_appointment(self, where: str, params: Sequence[Any], order: str) -> Optional[Appointment]:
        def _fetch(conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
            return conn.execute(
                f"SELECT * FROM appointments WHERE {where} ORDER BY {order} LIMIT 1",
                tuple(params),
            ).fetchone()

        row = await self._run(_fetch)
        return Appointment(**dict(row)) if row else None

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return await self._select_appointment("id = ?", (appointment_id,), "created_at DESC")

    async def list_appointments(self, phone_variants: Sequence[str]) -> List[Appointment]:
        """All appointments for a phone, oldest first."""
        if not phone_variants:
            return []

        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                f"SELECT * FROM appointments WHERE phone IN ({_placeholders(phone_variants)}) "
                "ORDER BY created_at ASC",
                tuple(phone_variants),
            ).fetchall()

        return [Appointment(**dict(row)) for row in await self._run(_fetch)]

    async def find_recent_duplicate(
        self,
        patient_name: str,
        appointment_date: Optional[str],
        appointment_time: Optional[str],
        phone_variants: Sequence[str],
        since: datetime,
    ) -> Optional[Appointment]:
        """
        Same patient, date and time created at or after ``since``.

        Without phone variants only appointments stored without a phone match.
        """
        where = "lower(patient_name) = lower(?) AND appointment_date IS ? AND appointment_time IS ? "
        params: List[Any] = [patient_name.strip(), appointment_date, appointment_time]
        if phone_variants:
            where += f"AND phone IN ({_placeholders(phone_variants)}) "
            params.extend(phone_variants)
        else:
            where += "AND (phone IS NULL OR phone = '') "
        where += "AND created_at >= ?"
        params.append(to_timestamp(since))
        return await self._select_appointment(where, params, "created_at DESC")

    async def find_active_appointment(
        self,
        phone_variants: Sequence[str],
        today: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[Appointment]:
        """Upcoming or checked-in appointment dated today or later."""
        if not phone_variants:
            return None
        statuses = [status.value for status in AppointmentStatus.active()]
        where = (
            f"phone IN ({_placeholders(phone_variants)}) AND status IN ({_placeholders(statuses)}) "
            "AND appointment_date >= ?"
        )
        params = [*phone_variants, *statuses, today]
        if exclude_id:
            where += " AND id != ?"
            params.append(exclude_id)
        return await self._select_appointment(where, params, "appointment_date ASC, appointment_time ASC")

    async def find_upcoming_appointment(self, phone_variants: Sequence[str], today: str) -> Optional[Appointment]:
        """Nearest non-cancelled appointment dated today or later."""
        if not phone_variants:
            return None
        where = (
            f"phone IN ({_placeholders(phone_variants)}) AND status != ? AND appointment_date >= ?"
        )
        params = [*phone_variants, AppointmentStatus.CANCELLED.value, today]
        return await self._select_appointment(where, params, "appointment_date ASC, appointment_time ASC")

    @staticmethod
    def _insert_appointment_sync(conn: sqlite3.Connection, appointment: Appointment) -> None:
        data = appointment.model_dump()
        conn.execute(
            f"INSERT INTO appointments ({', '.join(APPOINTMENT_COLUMNS)}) "
            f"VALUES ({_placeholders(APPOINTMENT_COLUMNS)})",
            tuple(_to_db(data[column]) for column in APPOINTMENT_COLUMNS),
        )

    async def insert_appointment(self, appointment: Appointment) -> Appointment:
        await self._run(lambda conn: self._insert_appointment_sync(conn, appointment))
        logger.info({"event": "appointment_created", "appointment_id": appointment.id})
        return appointment

    async def update_appointment(self, appointment_id: str, changes: Dict[str, Any]) -> Optional[Appointment]:
        """Partial update; returns the stored appointment afterwards."""
        rejected = (set(changes) - set(APPOINTMENT_COLUMNS)) | ({"id"} & set(changes))
        if rejected:
            raise DatastoreError(f"Cannot update appointment columns: {sorted(rejected)}")
        if changes:
            values = {column: _to_db(value) for column, value in changes.items()}
            values["updated_at"] = to_timestamp(datetime.now(timezone.utc))

            def _write(conn: sqlite3.Connection) -> None:
                assignments = ", ".join(f"{column} = ?" for column in values)
                conn.execute(
                    f"UPDATE appointments SET {assignments} WHERE id = ?",
                    (*values.values(), appointment_id),
                )

            await self._run(_write)
        return await self.get_appointment(appointment_id)

    async def replace_appointment(self, old_id: str, replacement: Appointment) -> Appointment:
        """Cancel ``old_id`` and insert ``replacement`` in one transaction."""
        now = to_timestamp(datetime.now(timezone.utc))

        def _write(conn: sqlite3.Connection) -> None:
            conn.execute(
                "UPDATE appointments SET status = ?, confirmation_status = ?, updated_at = ? WHERE id = ?",
                (AppointmentStatus.CANCELLED.value, ConfirmationStatus.CANCELLED.value, now, old_id),
            )
            self._insert_appointment_sync(conn, replacement)

        await self._run(_write)
        logger.info(
            {"event": "appointment_replaced", "old_id": old_id, "appointment_id": replacement.id}
        )
        return replacement

    async def stop_followups(
        self,
        phone_variants: Optional[Sequence[str]] = None,
        appointment_id: Optional[str] = None,
    ) -> int:
        """Stop active no-show follow-up sequences; returns how many stopped."""
        if appointment_id:
            scope, params = "id = ?", [appointment_id]
        elif phone_variants:
            scope, params = f"phone IN ({_placeholders(phone_variants)})", list(phone_variants)
        else:
            return 0

        def _write(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                f"UPDATE appointments SET followup_status = ?, updated_at = ? "
                f"WHERE status = ? AND followup_status = ? AND {scope}",
                (
                    FollowupStatus.STOPPED.value,
                    to_timestamp(datetime.now(timezone.utc)),
                    AppointmentStatus.NO_SHOW.value,
                    FollowupStatus.ACTIVE.value,
                    *params,
                ),
            )
            return cursor.rowcount

        return await self._run(_write)

    # Message log

    async def append_message(self, entry: MessageLogEntry) -> MessageLogEntry:
        """Append to the message log; returns the entry with its id."""
        def _write(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                "INSERT INTO whatsapp_messages (phone, patient_name, direction, message_text, "
                "linked_appointment_id, classified_intent, confidence, tag, awaiting_fields, "
                "reply_to_id, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    entry.phone,
                    entry.patient_name,
                    entry.direction.value,
                    entry.text,
                    entry.linked_appointment_id,
                    _to_db(entry.classified_intent),
                    _to_db(entry.confidence),
                    _to_db(entry.tag),
                    json.dumps([f.value for f in entry.awaiting_fields]),
                    entry.reply_to_id,
                    to_timestamp(entry.created_at),
                ),
            )
            return cursor.lastrowid

        entry_id = await self._run(_write)
        return entry.model_copy(update={"id": entry_id})

    async def _select_messages(self, where: str, params: Sequence[Any], limit: Optional[int] = None) -> List[MessageLogEntry]:
        sql = f"SELECT * FROM whatsapp_messages WHERE {where} ORDER BY created_at DESC, id DESC"
        if limit:
            sql += f" LIMIT {int(limit)}"

        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(sql, tuple(params)).fetchall()

        return [_row_to_message(row) for row in await self._run(_fetch)]

    async def get_message(self, message_id: int) -> Optional[MessageLogEntry]:
        found = await self._select_messages("id = ?", (message_id,), limit=1)
        return found[0] if found else None

    async def last_outbound(self, phone_variants: Sequence[str]) -> Optional[MessageLogEntry]:
        """Most recent outbound message to any of the phone variants."""
        if not phone_variants:
            return None
        found = await self._select_messages(
            f"phone IN ({_placeholders(phone_variants)}) AND direction = ?",
            (*phone_variants, MessageDirection.OUTBOUND.value),
            limit=1,
        )
        return found[0] if found else None

    async def find_recent_inbound(
        self,
        phone_variants: Sequence[str],
        tag: MessageTag,
        text: str,
        since: datetime,
    ) -> Optional[MessageLogEntry]:
        """Tagged inbound message with identical text received at or after ``since``."""
        if not phone_variants:
            return None
        found = await self._select_messages(
            f"phone IN ({_placeholders(phone_variants)}) AND direction = ? AND tag = ? "
            "AND message_text = ? AND created_at >= ?",
            (*phone_variants, MessageDirection.INBOUND.value, tag.value, text, to_timestamp(since)),
            limit=1,
        )
        return found[0] if found else None

    async def list_messages(self, phone_variants: Sequence[str]) -> List[MessageLogEntry]:
        """Conversation for a phone, newest first."""
        if not phone_variants:
            return []
        return await self._select_messages(
            f"phone IN ({_placeholders(phone_variants)})", tuple(phone_variants)
        )

    # Pending requests

    async def insert_pending_request(self, request: PendingRequest) -> PendingRequest:
        data = request.model_dump()
        data["classifier_output"] = json.dumps(request.classifier_output, default=str)

        def _write(conn: sqlite3.Connection) -> None:
            conn.execute(
                f"INSERT INTO pending_requests ({', '.join(PENDING_REQUEST_COLUMNS)}) "
                f"VALUES ({_placeholders(PENDING_REQUEST_COLUMNS)})",
                tuple(_to_db(data[column]) for column in PENDING_REQUEST_COLUMNS),
            )

        await self._run(_write)
        logger.info(
            {
                "event": "pending_request_created",
                "request_id": request.id,
                "request_type": request.request_type.value,
            }
        )
        return request

    async def list_pending_requests(self, phone_variants: Optional[Sequence[str]] = None) -> List[PendingRequest]:
        where, params = "1 = 1", []
        if phone_variants:
            where, params = f"phone IN ({_placeholders(phone_variants)})", list(phone_variants)

        def _fetch(conn: sqlite3.Connection) -> List[sqlite3.Row]:
            return conn.execute(
                f"SELECT * FROM pending_requests WHERE {where} ORDER BY created_at ASC",
                tuple(params),
            ).fetchall()

        return [_row_to_pending(row) for row in await self._run(_fetch)]
