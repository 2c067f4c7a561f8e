from fastapi import APIRouter, Depends, Query, Request, Response, status
from campushub.schemas import AttendeeOut, RSVPCreate, RSVPOut, RSVPCounts, RSVPListOut, RSVPStatusOut
from campushub.db.session import get_session
from campushub.services.rsvp_service import RSVPService
from campushub.auth import get_current_user
from campushub.core.config import settings
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Optional
from uuid import UUID

router = APIRouter(prefix="/rsvps", tags=["rsvps"])
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

def get_rsvp_service(session: AsyncSession = Depends(get_session)) -> RSVPService:
    return RSVPService(session)

def _counts_out(counts: dict) -> RSVPCounts:
    return RSVPCounts(**{status.value: n for status, n in counts.items()})

def _attendee_out(rsvp) -> AttendeeOut:
    return AttendeeOut(
        **RSVPOut.model_validate(rsvp).model_dump(),
        full_name=rsvp.user.full_name if rsvp.user else None,
    )

@router.post("/", response_model=RSVPOut)
@limiter.limit(settings.RSVP_RATE_LIMIT)
async def upsert_rsvp_endpoint(
    request: Request,
    payload: RSVPCreate,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """
    Create or update the current user's RSVP for an event.

    Sending the same status again is a no-op. A 503 means the write hit
    contention on every retry and is safe to repeat.
    """
    user_id = user.id
    return await rsvp_service.upsert_rsvp(payload.event_id, user_id, payload.status)

@router.get("/event/{event_id}", response_model=RSVPListOut)
async def list_event_rsvps(
    event_id: UUID,
    status_filter: Optional[str] = Query(None, alias="status", description="going, maybe or not_going"),
    order: str = Query("updated_at", description="updated_at or created_at; prefix with - for newest first"),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """
    List an event's RSVPs with attendee names and per-status counts.

    Oldest status change first unless ``order`` says otherwise.
    """
    rsvps = await rsvp_service.list_attendees(event_id, status_filter, order)
    counts = await rsvp_service.count_by_status(event_id)
    return RSVPListOut(
        rsvps=[_attendee_out(r) for r in rsvps],
        counts=_counts_out(counts),
    )

@router.get("/event/{event_id}/counts", response_model=RSVPCounts)
async def get_event_rsvp_counts(
    event_id: UUID,
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    return _counts_out(await rsvp_service.count_by_status(event_id))

@router.get("/event/{event_id}/user", response_model=RSVPStatusOut)
async def get_my_rsvp(
    event_id: UUID,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """The current user's status for the event; ``null`` if they never RSVP'd."""
    return RSVPStatusOut(status=await rsvp_service.get_user_status(event_id, user.id))

@router.delete("/event/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_my_rsvp(
    event_id: UUID,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    user_id = user.id
    await rsvp_service.withdraw_rsvp(event_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
