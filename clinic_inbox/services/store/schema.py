"""
SQLite schema for the clinic inbox datastore.
"""

SCHEMA = """
CREATE TABLE IF NOT EXISTS staff (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    full_name TEXT NOT NULL,
    role TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'active'
);

CREATE TABLE IF NOT EXISTS patients (
    phone_number TEXT PRIMARY KEY,
    full_name TEXT
);

CREATE TABLE IF NOT EXISTS appointments (
    id TEXT PRIMARY KEY,
    patient_name TEXT NOT NULL,
    phone TEXT NOT NULL,
    appointment_date TEXT,
    appointment_time TEXT,
    service TEXT NOT NULL,
    booked_by TEXT,
    status TEXT NOT NULL,
    confirmation_status TEXT NOT NULL,
    special_instructions TEXT,
    followup_status TEXT,
    no_show_count INTEGER NOT NULL DEFAULT 0,
    is_new_patient INTEGER NOT NULL DEFAULT 0,
    last_reply TEXT,
    confirmed_at TEXT,
    rescheduled_from TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_appointments_phone ON appointments (phone);

CREATE TABLE IF NOT EXISTS whatsapp_messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    phone TEXT NOT NULL,
    patient_name TEXT,
    direction TEXT NOT NULL,
    message_text TEXT NOT NULL,
    linked_appointment_id TEXT,
    classified_intent TEXT,
    confidence TEXT,
    tag TEXT,
    awaiting_fields TEXT NOT NULL DEFAULT '[]',
    reply_to_id INTEGER,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_messages_phone ON whatsapp_messages (phone, created_at);

CREATE TABLE IF NOT EXISTS pending_requests (
    id TEXT PRIMARY KEY,
    appointment_id TEXT,
    phone TEXT NOT NULL,
    patient_name TEXT NOT NULL,
    request_type TEXT NOT NULL,
    original_message TEXT NOT NULL,
    classifier_output TEXT NOT NULL DEFAULT '{}',
    confidence TEXT,
    suggested_reply TEXT,
    needs_human_review INTEGER NOT NULL DEFAULT 1,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TEXT NOT NULL
);
"""

APPOINTMENT_COLUMNS = (
    "id",
    "patient_name",
    "phone",
    "appointment_date",
    "appointment_time",
    "service",
    "booked_by",
    "status",
    "confirmation_status",
    "special_instructions",
    "followup_status",
    "no_show_count",
    "is_new_patient",
    "last_reply",
    "confirmed_at",
    "rescheduled_from",
    "created_at",
    "updated_at",
)

PENDING_REQUEST_COLUMNS = (
    "id",
    "appointment_id",
    "phone",
    "patient_name",
    "request_type",
    "original_message",
    "classifier_output",
    "confidence",
    "suggested_reply",
    "needs_human_review",
    "status",
    "created_at",
)
