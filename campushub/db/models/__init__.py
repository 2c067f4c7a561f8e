"""ORM models: users, campus events and their RSVPs."""
from campushub.db.models.user import User, RoleEnum
from campushub.db.models.event import Event, EventCategory
from campushub.db.models.rsvp import RSVP, RSVPStatusEnum

__all__ = ["User", "RoleEnum", "Event", "EventCategory", "RSVP", "RSVPStatusEnum"]
