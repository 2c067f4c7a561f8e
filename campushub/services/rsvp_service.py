"""
RSVP service: the only code path that mutates RSVP rows.

Each write runs as one transaction that changes the (event, user) row and
shifts the event's ``attending`` counter by the matching delta, so that

    event.attending == count(rsvps where event_id = event.id and status = 'going')

holds after every commit.

Concurrency:
  - An existing row is read ``FOR UPDATE``; concurrent status changes for
    the same pair queue behind it and always see the status they replace.
  - A first RSVP uses insert-if-absent on the (event_id, user_id) unique
    constraint. If another transaction inserted first we get no row back,
    roll back and retry; the retry finds the winner's row.
  - The counter moves only through ``attending = attending + delta``.
  - ``lock_timeout`` bounds every wait; a timeout becomes ConflictRetryable.
"""
import asyncio
from typing import Dict, List, Optional, Union

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campushub.core.config import settings
from campushub.core.exceptions import (
    CapacityExceeded,
    ConflictRetryable,
    InvalidArgument,
    NotFound,
)
from campushub.core.logging import logger
from campushub.db import repositories as repo
from campushub.db.models.rsvp import RSVP, RSVPStatusEnum

# lock_not_available, serialization_failure, deadlock_detected, query_canceled
RETRYABLE_SQLSTATES = {"55P03", "40001", "40P01", "57014"}
UNIQUE_VIOLATION = "23505"


def parse_status(value: Union[str, RSVPStatusEnum]) -> RSVPStatusEnum:
    """Coerce a wire value into an RSVP status, rejecting anything else."""
    if isinstance(value, RSVPStatusEnum):
        return value
    try:
        return RSVPStatusEnum(value)
    except ValueError:
        allowed = ", ".join(s.value for s in RSVPStatusEnum)
        raise InvalidArgument(f"Invalid RSVP status {value!r}; expected one of: {allowed}")


def attendance_delta(previous: Optional[RSVPStatusEnum], new: Optional[RSVPStatusEnum]) -> int:
    """Change in the 'going' count when a pair moves from ``previous`` to ``new``."""
    going = RSVPStatusEnum.going
    return int(new == going) - int(previous == going)


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_contention_error(exc: DBAPIError) -> bool:
    """True for lock timeouts, serialization failures and duplicate-key races."""
    code = _sqlstate(exc)
    if code in RETRYABLE_SQLSTATES:
        return True
    return isinstance(exc, IntegrityError) and code == UNIQUE_VIOLATION


class RSVPService:
    """
    Per-(event, user) attendance status and the derived attending count.

    Args:
        session: SQLAlchemy async session; the service commits or rolls back
            every write it performs
        max_retries: Attempts for contended writes (defaults to settings)
        backoff_seconds: First retry delay, doubled on each further attempt
    """

    def __init__(
        self,
        session: AsyncSession,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
    ):
        self.session = session
        self.max_retries = max(1, max_retries if max_retries is not None else settings.RSVP_MAX_RETRIES)
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.RSVP_RETRY_BACKOFF_SECONDS
        )

    async def upsert_rsvp(self, event_id, user_id, status: Union[str, RSVPStatusEnum]) -> RSVP:
        """
        Create or change a user's RSVP and keep the attending count in sync.

        Repeating a call with the same arguments is a no-op, so callers may
        retry freely.

        Raises:
            InvalidArgument: status is not going, maybe or not_going
            NotFound: event or user does not exist
            CapacityExceeded: a move into 'going' would exceed capacity
            ConflictRetryable: contention persisted through every retry
        """
        new_status = parse_status(status)

        async def attempt() -> RSVP:
            return await self._apply_upsert(event_id, user_id, new_status)

        return await self._with_retries(attempt, event_id, user_id)

    async def withdraw_rsvp(self, event_id, user_id) -> bool:
        """
        Remove a user's RSVP; withdrawing a 'going' RSVP frees a spot.

        Returns:
            True if a row was deleted, False if the user had no RSVP

        Raises:
            NotFound: event does not exist
        """
        async def attempt() -> bool:
            return await self._apply_withdraw(event_id, user_id)

        return await self._with_retries(attempt, event_id, user_id)

    async def get_user_status(self, event_id, user_id) -> Optional[RSVPStatusEnum]:
        """Current status for the pair, or None if the user never RSVP'd."""
        await self._require_event(event_id)
        rsvp = await repo.get_rsvp(self.session, event_id, user_id)
        return rsvp.status if rsvp else None

    async def list_attendees(
        self,
        event_id,
        status: Optional[Union[str, RSVPStatusEnum]] = None,
        order: str = "updated_at",
    ) -> List[RSVP]:
        """
        RSVPs for an event, each with its ``user`` loaded.

        By default the oldest status change comes first. ``order`` may be
        ``updated_at``, ``created_at``, or either with a leading ``-`` for
        newest first.

        Raises:
            InvalidArgument: unknown status filter or order
            NotFound: event does not exist
        """
        status_filter = parse_status(status) if status is not None else None
        if order not in repo.RSVP_ORDERINGS:
            allowed = ", ".join(repo.RSVP_ORDERINGS)
            raise InvalidArgument(f"Invalid order {order!r}; expected one of: {allowed}")
        await self._require_event(event_id)
        return await repo.list_rsvps(self.session, event_id, status_filter, order)

    async def count_by_status(self, event_id) -> Dict[RSVPStatusEnum, int]:
        """
        Count RSVP rows per status straight from the table.

        The ``going`` entry must always equal the event's cached
        ``attending`` value.
        """
        await self._require_event(event_id)
        return await repo.count_rsvps_by_status(self.session, event_id)

    async def _require_event(self, event_id):
        event = await repo.get_event(self.session, event_id)
        if event is None:
            raise NotFound("Event not found")
        return event

    async def _with_retries(self, operation, event_id, user_id):
        delay = self.backoff_seconds
        for attempt in range(1, self.max_retries + 1):
            try:
                return await operation()
            except ConflictRetryable:
                if attempt == self.max_retries:
                    logger.error(
                        f"RSVP write for event {event_id} user {user_id} still contended "
                        f"after {attempt} attempts"
                    )
                    raise
                logger.info(
                    f"RSVP write for event {event_id} user {user_id} contended "
                    f"(attempt {attempt}/{self.max_retries}), retrying in {delay:.3f}s"
                )
                await asyncio.sleep(delay)
                delay *= 2

    async def _apply_upsert(self, event_id, user_id, new_status: RSVPStatusEnum) -> RSVP:
        db = self.session
        try:
            await repo.set_lock_timeout(db, settings.RSVP_LOCK_TIMEOUT_MS)

            event = await self._require_event(event_id)
            if await repo.get_user(db, user_id) is None:
                raise NotFound("User not found")

            existing = await repo.get_rsvp(db, event_id, user_id, for_update=True)
            if existing is not None and existing.status == new_status:
                await db.commit()
                return existing

            previous = existing.status if existing is not None else None
            if existing is None:
                rsvp = await repo.insert_rsvp_row(db, event_id, user_id, new_status)
                if rsvp is None:
                    raise ConflictRetryable("A concurrent RSVP for this user and event was recorded first")
            else:
                rsvp = await repo.upsert_rsvp_row(db, event_id, user_id, new_status)

            delta = attendance_delta(previous, new_status)
            if delta:
                attending = await repo.update_event_attending_count(db, event_id, delta)
                if attending is None:
                    # Only an increment can be refused for capacity
                    if delta < 0:
                        raise NotFound("Event not found")
                    logger.warning(
                        f"RSVP rejected: event {event_id} is at capacity ({event.capacity})"
                    )
                    raise CapacityExceeded(event_id, event.capacity)

            await db.commit()
        except DBAPIError as e:
            await db.rollback()
            if is_contention_error(e):
                raise ConflictRetryable(f"RSVP update contended: {_sqlstate(e)}") from e
            raise
        except Exception:
            await db.rollback()
            raise

        logger.debug(
            f"RSVP event={event_id} user={user_id}: "
            f"{previous.value if previous else 'absent'} -> {new_status.value} (delta {delta:+d})"
        )
        return rsvp

    async def _apply_withdraw(self, event_id, user_id) -> bool:
        db = self.session
        try:
            await repo.set_lock_timeout(db, settings.RSVP_LOCK_TIMEOUT_MS)
            await self._require_event(event_id)

            previous = await repo.delete_rsvp_row(db, event_id, user_id)
            if previous is not None:
                delta = attendance_delta(previous, None)
                if delta and await repo.update_event_attending_count(db, event_id, delta) is None:
                    raise NotFound("Event not found")
            await db.commit()
        except DBAPIError as e:
            await db.rollback()
            if is_contention_error(e):
                raise ConflictRetryable(f"RSVP withdrawal contended: {_sqlstate(e)}") from e
            raise
        except Exception:
            await db.rollback()
            raise

        if previous is None:
            return False
        logger.debug(f"RSVP event={event_id} user={user_id}: {previous.value} -> absent")
        return True
