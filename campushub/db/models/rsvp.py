from sqlalchemy import Column, DateTime, ForeignKey, func, Enum, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
import uuid
from sqlalchemy.orm import relationship
from campushub.db.session import Base
import enum

class RSVPStatusEnum(str, enum.Enum):
    going = "going"
    maybe = "maybe"
    not_going = "not_going"

class RSVP(Base):
    __tablename__ = "rsvps"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(Enum(RSVPStatusEnum), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User")
    event = relationship("Event", back_populates="rsvps")

    # One row per (event, user); upserts conflict on this constraint
    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_rsvp_event_user'),
        Index('idx_rsvp_user', 'user_id'),
        Index('idx_rsvp_event_status', 'event_id', 'status'),
    )
