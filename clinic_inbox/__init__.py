"""
Clinic Inbox: WhatsApp inbound webhook for a clinic front desk.

Classifies patient replies about existing appointments, parses staff booking
messages into appointments, resolves answers to earlier correction requests
and arbitrates conflicting bookings for the same phone number.
"""

__version__ = "1.0.0"
