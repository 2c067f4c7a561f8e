from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, func, Enum, Index, CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
import uuid
from sqlalchemy.orm import relationship
from campushub.db.session import Base
import enum

class EventCategory(str, enum.Enum):
    """Event category/tag enum."""
    academic = "academic"
    social = "social"
    sports = "sports"
    arts = "arts"
    career = "career"
    technology = "technology"
    workshop = "workshop"
    volunteering = "volunteering"
    other = "other"

class Event(Base):
    __tablename__ = "events"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    capacity = Column(Integer, nullable=False, default=100)
    # Number of 'going' RSVPs; written only through the RSVP service.
    attending = Column(Integer, nullable=False, default=0, server_default="0")
    category = Column(Enum(EventCategory), nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    creator = relationship("User")
    rsvps = relationship("RSVP", back_populates="event", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_event_capacity_positive"),
        CheckConstraint("attending >= 0", name="ck_event_attending_non_negative"),
        Index('idx_event_date', 'starts_at'),
        Index('idx_event_organizer', 'created_by'),
        Index('idx_event_category', 'category'),
    )
