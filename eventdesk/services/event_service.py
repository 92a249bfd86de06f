import logging
from datetime import datetime, time
from typing import Iterable, List, Optional

from beanie import PydanticObjectId
from pydantic import ValidationError

from eventdesk.errors import BadRequest, Forbidden, NotFound, Unauthorized, validation_message
from eventdesk.models import Event, EventSettings, User, PUBLIC_EVENT_STATUSES
from eventdesk.schemas import EventCreate, EventUpdate
from eventdesk.utils.helpers import as_naive_utc, is_object_id, isoformat, slugify, utcnow

logger = logging.getLogger(__name__)

# Roles allowed to act on events they do not organize
MANAGER_ROLES = {"super-admin"}
REVIEWER_ROLES = {"admin", "super-admin"}


async def resolve_event(identifier: str) -> Event:
    """Look an event up by document id first, then by slug."""
    event = None
    if is_object_id(identifier):
        event = await Event.get(PydanticObjectId(identifier))
    if event is None and identifier:
        event = await Event.find_one(Event.slug == identifier.lower())
    if event is None:
        raise NotFound("Event not found")
    return event


def can_manage(event: Event, user: Optional[User], roles: Iterable[str] = MANAGER_ROLES) -> bool:
    if user is None:
        return False
    return event.organizer == user.id or user.role in roles


def ensure_can_manage(event: Event, user: Optional[User], roles: Iterable[str] = MANAGER_ROLES) -> None:
    if user is None:
        raise Unauthorized("Unauthorized")
    if not can_manage(event, user, roles):
        raise Forbidden("Forbidden: You don't have permission to access this event")


def is_publicly_visible(event: Event) -> bool:
    return event.status in PUBLIC_EVENT_STATUSES


async def unique_slug(title: str) -> str:
    base = slugify(title)
    slug = base
    suffix = 2
    while await Event.find_one(Event.slug == slug):
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


async def create_event(payload: EventCreate, organizer: User) -> Event:
    values = payload.model_dump(exclude={"settings"})
    try:
        event = Event(
            **values,
            slug=await unique_slug(payload.title),
            organizer=organizer.id,
            event_settings=EventSettings(**payload.settings.model_dump()),
        )
    except ValidationError as e:
        raise BadRequest(validation_message(e))
    await event.insert()
    logger.info("Created event %s (%s) for organizer %s", event.id, event.slug, organizer.id)
    return event


async def update_event(event: Event, payload: EventUpdate) -> Event:
    changes = payload.model_dump(exclude_unset=True, exclude={"settings"})
    if payload.settings is not None:
        changes["event_settings"] = payload.settings.model_dump()

    merged = {**event.model_dump(), **changes}
    try:
        # re-validate the whole document so cross-field rules still hold
        Event.model_validate(merged)
    except ValidationError as e:
        raise BadRequest(validation_message(e))

    for key, value in changes.items():
        if key == "event_settings":
            value = EventSettings(**value)
        setattr(event, key, value)
    event.updated_at = utcnow()
    await event.save()
    return event


def event_window(event: Event):
    """Return the (start, end) datetimes an event occupies."""
    start = as_naive_utc(event.start_date)
    if event.start_time:
        hours, minutes = (int(p) for p in event.start_time.split(":"))
        start = datetime.combine(start.date(), time(hours, minutes))

    end_day = as_naive_utc(event.end_date) or start
    if event.end_time:
        hours, minutes = (int(p) for p in event.end_time.split(":"))
        end = datetime.combine(end_day.date(), time(hours, minutes))
    else:
        end = datetime.combine(end_day.date(), time.max)
    return start, end


def has_started(event: Event, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    if event.start_time:
        return now >= event_window(event)[0]
    # without a start time registration stays open until the day is over
    return now > datetime.combine(as_naive_utc(event.start_date).date(), time.max)


def categorize_events(events: List[Event], now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    groups = {"upcoming": [], "running": [], "past": []}
    for event in events:
        start, end = event_window(event)
        if now < start:
            groups["upcoming"].append(event)
        elif now <= end:
            groups["running"].append(event)
        else:
            groups["past"].append(event)
    return groups


def event_to_public(event: Event) -> dict:
    return {
        "id": str(event.id),
        "title": event.title,
        "slug": event.slug,
        "description": event.description,
        "startDate": isoformat(event.start_date),
        "endDate": isoformat(event.end_date),
        "startTime": event.start_time,
        "endTime": event.end_time,
        "location": event.location,
        "category": event.category,
        "tags": event.tags,
        "image": event.image,
        "capacity": event.capacity,
        "price": event.price,
        "type": event.event_type,
        "visibility": event.visibility,
        "status": event.status,
        "organizer": str(event.organizer),
        "settings": {"requireApproval": event.event_settings.require_approval},
        "attendeeForm": {"status": event.attendee_form.status},
        "volunteerForm": {"status": event.volunteer_form.status},
        "speakerForm": {"status": event.speaker_form.status},
        "createdAt": isoformat(event.created_at),
        "updatedAt": isoformat(event.updated_at),
    }
