from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from enum import Enum
from campushub.db.models.rsvp import RSVPStatusEnum
from campushub.db.models.user import RoleEnum

class UserOut(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    role: RoleEnum

    class Config:
        from_attributes = True

class EventCategory(str, Enum):
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

class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    starts_at: Optional[datetime] = None
    capacity: int = Field(100, gt=0)
    category: Optional[EventCategory] = None

class RSVPCounts(BaseModel):
    going: int = 0
    maybe: int = 0
    not_going: int = 0

class EventOut(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    location: Optional[str]
    starts_at: Optional[datetime]
    capacity: int
    attending: int
    category: Optional[EventCategory]
    created_by: UUID
    created_at: Optional[datetime] = None
    available_spots: Optional[int] = None
    rsvp_counts: Optional[RSVPCounts] = None

    class Config:
        from_attributes = True

class ReconcileOut(BaseModel):
    """Result of recomputing an event's attending counter."""
    event_id: UUID
    before: int
    after: int
    drifted: bool

class RSVPCreate(BaseModel):
    event_id: UUID
    # Validated by the RSVP service so unknown values surface as 400, not 422
    status: str = "going"

class RSVPOut(BaseModel):
    id: UUID
    event_id: UUID
    user_id: UUID
    status: RSVPStatusEnum
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class RSVPStatusOut(BaseModel):
    status: Optional[RSVPStatusEnum] = None

class AttendeeOut(RSVPOut):
    """An RSVP row with the attendee's display name."""
    full_name: Optional[str] = None

class RSVPListOut(BaseModel):
    rsvps: List[AttendeeOut]
    counts: RSVPCounts
