from sqlalchemy.ext.asyncio import AsyncSession
from campushub.schemas import EventCreate
from campushub.db import repositories as repo
from campushub.db.models import Event, RoleEnum, RSVPStatusEnum
from campushub.core.exceptions import NotFound, PermissionDenied
from campushub.core.logging import logger
from typing import Tuple


def _event_to_dict(ev: Event, counts: dict) -> dict:
    return {
        'id': ev.id,
        'title': ev.title,
        'description': ev.description,
        'location': ev.location,
        'starts_at': ev.starts_at,
        'capacity': ev.capacity,
        'attending': ev.attending,
        'category': ev.category.value if ev.category else None,
        'created_by': ev.created_by,
        'created_at': ev.created_at,
        'available_spots': max(0, ev.capacity - ev.attending),
        'rsvp_counts': {status.value: n for status, n in counts.items()},
    }


class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_event(self, payload: EventCreate, user_id) -> dict:
        event = await repo.create_event(self.session, payload, user_id)
        logger.info(f"Event {event.id} created by {user_id} (capacity {event.capacity})")
        return _event_to_dict(event, {status: 0 for status in RSVPStatusEnum})

    async def get_event(self, event_id) -> dict:
        """Event detail with its attending counter and per-status RSVP counts."""
        event = await repo.get_event(self.session, event_id)
        if event is None:
            raise NotFound("Event not found")
        counts = await repo.count_rsvps_by_status(self.session, event_id)
        return _event_to_dict(event, counts)

    async def delete_event(self, event_id, user) -> None:
        """
        Delete an event and, through the cascade, all of its RSVPs.

        Only the event's creator or an admin may delete it.
        """
        event = await repo.get_event(self.session, event_id)
        if event is None:
            raise NotFound("Event not found")
        if event.created_by != user.id and user.role != RoleEnum.admin:
            raise PermissionDenied("Only the event creator or an admin can delete this event")

        try:
            await repo.delete_event(self.session, event_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info(f"Event {event_id} deleted by {user.id}")

    async def reconcile_attending(self, event_id) -> Tuple[int, int]:
        """
        Recompute an event's attending counter from its 'going' RSVPs.

        The event row stays locked while counting, so no RSVP write can
        slip in between the count and the repair.

        Returns:
            Tuple of (counter before, counter after)
        """
        try:
            event = await repo.get_event(self.session, event_id, for_update=True)
            if event is None:
                raise NotFound("Event not found")
            before = event.attending
            counts = await repo.count_rsvps_by_status(self.session, event_id)
            after = counts[RSVPStatusEnum.going]
            if before != after:
                logger.warning(f"Attending counter drift on event {event_id}: cached {before}, actual {after}")
                await repo.reset_event_attending_count(self.session, event_id, after)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return before, after
