"""
Guest model
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from eventseat.core.db import Base

class Guest(Base):
    __tablename__ = "guests"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False)
    event_pk = Column(Integer, ForeignKey("events.pk"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    table_number = Column(Integer, nullable=False)
    seat_number = Column(String(50), nullable=True)

    # Relationships
    event = relationship("Event", back_populates="guests")

    # Guest ids are only unique within their event
    __table_args__ = (UniqueConstraint("event_pk", "id", name="uq_guest_event_id"),)
