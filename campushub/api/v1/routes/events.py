from fastapi import APIRouter, Depends, Response, status
from campushub.schemas import EventCreate, EventOut, ReconcileOut
from campushub.db.session import get_session
from campushub.services.event_service import EventService
from campushub.auth import get_current_user, role_required
from campushub.db.models.user import RoleEnum
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

router = APIRouter(prefix="/events", tags=["events"])

def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)

@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    payload: EventCreate,
    user=Depends(role_required(RoleEnum.organizer)),
    event_service: EventService = Depends(get_event_service)
):
    return await event_service.create_event(payload, user.id)

@router.get("/{event_id}", response_model=EventOut)
async def get_event_detail(
    event_id: UUID,
    event_service: EventService = Depends(get_event_service)
):
    """Event detail including ``attending``, ``available_spots`` and ``rsvp_counts``."""
    return await event_service.get_event(event_id)

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_endpoint(
    event_id: UUID,
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    await event_service.delete_event(event_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{event_id}/reconcile", response_model=ReconcileOut)
async def reconcile_event_attending(
    event_id: UUID,
    user=Depends(role_required(RoleEnum.admin)),
    event_service: EventService = Depends(get_event_service)
):
    """
    Recompute the cached attending counter from the event's 'going' RSVPs.

    Admin only. Reports whether the counter had drifted.
    """
    before, after = await event_service.reconcile_attending(event_id)
    return ReconcileOut(event_id=event_id, before=before, after=after, drifted=before != after)
