"""
Event-related Pydantic schemas
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from .guest import GuestResponse

class EventCreate(BaseModel):
    """Schema for creating an event

    Fields are optional so that missing values reach the handler and are
    reported as a 400 with the standard error body.
    """
    name: Optional[str] = None
    date: Optional[str] = None
    theme_color: Optional[str] = Field(default=None, alias="themeColor")
    logo: Optional[str] = None

    class Config:
        populate_by_name = True

class EventUpdate(BaseModel):
    """Schema for updating an event"""
    name: Optional[str] = None
    date: Optional[str] = None
    theme_color: Optional[str] = Field(default=None, alias="themeColor")
    logo: Optional[str] = None

    class Config:
        populate_by_name = True

class EventResponse(BaseModel):
    """An event with its guest list"""
    id: str
    name: str
    date: str
    theme_color: Optional[str] = Field(default=None, alias="themeColor")
    logo: Optional[str] = None
    guests: List[GuestResponse] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")

    class Config:
        populate_by_name = True
