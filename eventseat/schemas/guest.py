"""
Guest-related Pydantic schemas
"""

from typing import Any, List, Optional, Union
from pydantic import BaseModel, Field

class GuestCreate(BaseModel):
    """Schema for adding a single guest"""
    name: Optional[str] = None
    table_number: Optional[Union[int, float, str]] = Field(default=None, alias="tableNumber")
    seat_number: Optional[Union[str, int]] = Field(default=None, alias="seatNumber")

    class Config:
        populate_by_name = True

class GuestUpdate(BaseModel):
    """Schema for updating a guest"""
    name: Optional[str] = None
    table_number: Optional[Union[int, float, str]] = Field(default=None, alias="tableNumber")
    seat_number: Optional[Union[str, int]] = Field(default=None, alias="seatNumber")

    class Config:
        populate_by_name = True

class GuestResponse(BaseModel):
    """Guest response schema"""
    id: str
    name: str
    table_number: int = Field(alias="tableNumber")
    seat_number: Optional[str] = Field(default=None, alias="seatNumber")

    class Config:
        populate_by_name = True

class BulkGuestRequest(BaseModel):
    """Bulk add request; ``guests`` is checked to be a list by the handler"""
    guests: Any = None

class BulkSummary(BaseModel):
    total: int
    added: int
    errors: int

class BulkGuestResult(BaseModel):
    """Outcome of a bulk add or spreadsheet import"""
    added: List[GuestResponse]
    errors: List[str]
    summary: BulkSummary
