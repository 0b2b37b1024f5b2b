"""
Event model
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from eventseat.core.db import Base

class Event(Base):
    __tablename__ = "events"

    # Surrogate key keeps insertion order; ``id`` is the public identifier
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    date = Column(String(64), nullable=False)
    theme_color = Column(String(32), nullable=True)
    logo = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    guests = relationship(
        "Guest",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="Guest.pk",
    )
