"""
Repository layer for database operations.

Async functions over User, Event and RSVP rows. Apart from ``create_event``
none of them commit: the services own the transaction so that an RSVP row
change and its attending-count delta land together or not at all.
"""
from sqlalchemy import select, update, delete, func, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from campushub.db.models.user import User
from campushub.db.models.event import Event
from campushub.db.models.rsvp import RSVP, RSVPStatusEnum
from campushub.schemas import EventCreate
from typing import Optional, List, Dict


async def set_lock_timeout(db: AsyncSession, timeout_ms: int) -> None:
    """
    Bound how long the current transaction waits on row locks.

    ``SET LOCAL`` only lasts until the enclosing transaction ends.
    """
    await db.execute(text(f"SET LOCAL lock_timeout = '{int(timeout_ms)}ms'"))


async def get_user(db: AsyncSession, user_id) -> Optional[User]:
    """
    Retrieve user by ID.

    Args:
        db: Database session
        user_id: User's UUID

    Returns:
        User object if found, None otherwise
    """
    q = select(User).where(User.id == user_id)
    res = await db.execute(q)
    return res.scalars().first()


async def create_event(db: AsyncSession, payload: EventCreate, creator_id) -> Event:
    """
    Create a new event with an empty attending counter.

    Args:
        db: Database session
        payload: Event creation data
        creator_id: UUID of user creating the event

    Returns:
        Created Event object
    """
    ev = Event(**payload.model_dump(), created_by=creator_id, attending=0)
    db.add(ev)
    await db.commit()
    await db.refresh(ev)
    return ev


async def get_event(db: AsyncSession, event_id, for_update: bool = False) -> Optional[Event]:
    """
    Retrieve an event, always reloading its columns from the database.

    Args:
        db: Database session
        event_id: Event's UUID
        for_update: Lock the row until the transaction ends

    Returns:
        Event object if found, None otherwise
    """
    q = select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
    if for_update:
        q = q.with_for_update()
    res = await db.execute(q)
    return res.scalars().first()


async def delete_event(db: AsyncSession, event_id) -> bool:
    """Delete an event; its RSVPs go with it through ON DELETE CASCADE."""
    stmt = (
        delete(Event)
        .where(Event.id == event_id)
        .returning(Event.id)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    return res.scalar_one_or_none() is not None


async def update_event_attending_count(db: AsyncSession, event_id, delta: int) -> Optional[int]:
    """
    Atomically shift an event's attending counter by ``delta``.

    The increment is a single ``attending = attending + delta`` statement so
    concurrent callers never lose each other's deltas. A positive delta
    only applies while the result stays within capacity.

    Returns:
        The new counter value, or None if no row matched (missing event or
        capacity reached)
    """
    stmt = update(Event).where(Event.id == event_id)
    if delta > 0:
        stmt = stmt.where(Event.attending + delta <= Event.capacity)
    stmt = (
        stmt.values(attending=Event.attending + delta)
        .returning(Event.attending)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


async def reset_event_attending_count(db: AsyncSession, event_id, value: int) -> None:
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .values(attending=value)
        .execution_options(synchronize_session=False)
    )
    await db.execute(stmt)


async def get_rsvp(db: AsyncSession, event_id, user_id, for_update: bool = False) -> Optional[RSVP]:
    """
    Get a user's RSVP for a specific event.

    Args:
        db: Database session
        event_id: Event's UUID
        user_id: User's UUID
        for_update: Lock the row so its status cannot change underneath us

    Returns:
        RSVP object if found, None otherwise
    """
    q = (
        select(RSVP)
        .where(RSVP.event_id == event_id, RSVP.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        q = q.with_for_update()
    res = await db.execute(q)
    return res.scalars().first()


async def insert_rsvp_row(db: AsyncSession, event_id, user_id, status: RSVPStatusEnum) -> Optional[RSVP]:
    """
    Insert an RSVP unless one already exists for (event_id, user_id).

    Returns:
        The new row, or None when a concurrent transaction inserted first
    """
    stmt = (
        pg_insert(RSVP)
        .values(event_id=event_id, user_id=user_id, status=status)
        .on_conflict_do_nothing(constraint="uq_rsvp_event_user")
        .returning(RSVP)
    )
    res = await db.execute(stmt)
    return res.scalars().first()


async def upsert_rsvp_row(db: AsyncSession, event_id, user_id, status: RSVPStatusEnum) -> RSVP:
    """
    Insert-or-update the RSVP keyed by (event_id, user_id) in one statement.

    Returns:
        The persisted row
    """
    stmt = pg_insert(RSVP).values(event_id=event_id, user_id=user_id, status=status)
    stmt = (
        stmt.on_conflict_do_update(
            constraint="uq_rsvp_event_user",
            set_={"status": stmt.excluded.status, "updated_at": func.now()},
        )
        .returning(RSVP)
        .execution_options(populate_existing=True)
    )
    res = await db.execute(stmt)
    return res.scalars().one()


async def delete_rsvp_row(db: AsyncSession, event_id, user_id) -> Optional[RSVPStatusEnum]:
    """
    Delete the RSVP for (event_id, user_id).

    Returns:
        The status the deleted row had, or None if there was no row
    """
    stmt = (
        delete(RSVP)
        .where(RSVP.event_id == event_id, RSVP.user_id == user_id)
        .returning(RSVP.status)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


RSVP_ORDERINGS = {
    "updated_at": RSVP.updated_at.asc(),
    "-updated_at": RSVP.updated_at.desc(),
    "created_at": RSVP.created_at.asc(),
    "-created_at": RSVP.created_at.desc(),
}


async def list_rsvps(
    db: AsyncSession,
    event_id,
    status: Optional[RSVPStatusEnum] = None,
    order: str = "updated_at",
) -> List[RSVP]:
    """
    List RSVPs for an event with each attendee's ``user`` loaded.

    Args:
        db: Database session
        event_id: Event's UUID
        status: Only return RSVPs with this status
        order: Key of ``RSVP_ORDERINGS``; a leading ``-`` means newest first.
            Ties are broken by user id so the order is stable.
    """
    q = (
        select(RSVP)
        .where(RSVP.event_id == event_id)
        .options(selectinload(RSVP.user))
    )
    if status is not None:
        q = q.where(RSVP.status == status)
    q = q.order_by(RSVP_ORDERINGS[order], RSVP.user_id.asc()).execution_options(populate_existing=True)
    res = await db.execute(q)
    return list(res.scalars().all())


async def count_rsvps_by_status(db: AsyncSession, event_id) -> Dict[RSVPStatusEnum, int]:
    """Aggregate RSVP rows per status; every status is present, zero if unused."""
    q = (
        select(RSVP.status, func.count(RSVP.id))
        .where(RSVP.event_id == event_id)
        .group_by(RSVP.status)
    )
    res = await db.execute(q)
    counts = {status: 0 for status in RSVPStatusEnum}
    for status, count in res.all():
        counts[status] = count
    return counts
