from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from eventdesk.dependencies import get_current_user, require_user
from eventdesk.errors import NotFound
from eventdesk.models import Event, User
from eventdesk.schemas import EventCreate, EventUpdate
from eventdesk.services import event_service
from eventdesk.services.activity_service import event_activity, log_activity

router = APIRouter(prefix="/api/events", tags=["events"])

@router.post("", status_code=201)
async def create_event(payload: EventCreate, user: User = Depends(require_user)):
    event = await event_service.create_event(payload, user)
    return {"success": True, "event": event_service.event_to_public(event)}

@router.get("/mine")
async def my_events(user: User = Depends(require_user)):
    events = await Event.find(Event.organizer == user.id).sort("start_date").to_list()
    groups = event_service.categorize_events(events)
    return {
        name: [event_service.event_to_public(e) for e in group]
        for name, group in groups.items()
    }

@router.get("/{id}")
async def get_event(id: str, user: Optional[User] = Depends(get_current_user)):
    event = await event_service.resolve_event(id)
    if not event_service.is_publicly_visible(event) and not event_service.can_manage(event, user):
        raise NotFound("Event not found")
    return {"event": event_service.event_to_public(event)}

@router.patch("/{id}")
async def update_event(request: Request, id: str, payload: EventUpdate, user: User = Depends(require_user)):
    event = await event_service.resolve_event(id)
    event_service.ensure_can_manage(event, user)
    event = await event_service.update_event(event, payload)
    await log_activity(request, "event_update", "Updated event details", user, event)
    return {"success": True, "event": event_service.event_to_public(event)}

@router.get("/{id}/activity")
async def get_activity(
    id: str,
    user: User = Depends(require_user),
    page: int = Query(1, ge=1),
    level: Optional[str] = Query(None),
):
    event = await event_service.resolve_event(id)
    event_service.ensure_can_manage(event, user)
    return await event_activity(event, page, level)
