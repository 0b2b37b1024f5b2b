"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .guest import *

__all__ = [
    "ErrorResponse",
    "SuccessResponse",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "GuestCreate",
    "GuestUpdate",
    "GuestResponse",
    "BulkGuestRequest",
    "BulkSummary",
    "BulkGuestResult",
]
