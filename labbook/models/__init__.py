"""
Database models for the lab booking core.

- User: identity store with role and email preferences
- Instrument / MaintenanceRecord: instrument inventory
- Booking / Comment: reservations and their discussion thread
- EmailTemplate: notification templates editable by administrators
"""

from .booking import Booking, from_legacy_status, parse_legacy_status, to_legacy_status
from .comment import Comment
from .email_template import EmailTemplate
from .instrument import Instrument, MaintenanceRecord
from .user import User

__all__ = [
    "Booking",
    "Comment",
    "EmailTemplate",
    "Instrument",
    "MaintenanceRecord",
    "User",
    "from_legacy_status",
    "parse_legacy_status",
    "to_legacy_status",
]
