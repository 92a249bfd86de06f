import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from beanie import PydanticObjectId
from beanie.operators import In
from fastapi import BackgroundTasks

from eventdesk.errors import BadRequest, NotFound, ServiceError
from eventdesk.models import Event, FormSubmission, User, FORM_TYPES, SUBMISSION_STATUSES
from eventdesk.services import email_service
from eventdesk.services.event_service import REVIEWER_ROLES, ensure_can_manage, resolve_event
from eventdesk.services.form_service import check_form_type, validate_answers
from eventdesk.utils.helpers import is_object_id, isoformat, utcnow

logger = logging.getLogger(__name__)

DEFAULT_PARTICIPANT_NAME = "Event Participant"
SEARCH_FIELDS = ["user_name", "user_email", "data.name", "data.firstName", "data.lastName", "data.email"]


def normalize_answers(form_data: Dict[str, Any]) -> Dict[str, Any]:
    """Replace missing (null) answers with empty strings so nothing undefined is stored."""
    return {key: "" if value is None else value for key, value in form_data.items()}


def applicant_name(data: Dict[str, Any]) -> str:
    name = data.get("name")
    if isinstance(name, str) and name.strip():
        return name.strip()
    first = data.get("firstName") or data.get("first_name") or ""
    last = data.get("lastName") or data.get("last_name") or ""
    composed = f"{first} {last}".strip() if isinstance(first, str) and isinstance(last, str) else ""
    return composed or DEFAULT_PARTICIPANT_NAME


def applicant_email(data: Dict[str, Any]) -> Optional[str]:
    email = data.get("email")
    if isinstance(email, str) and email.strip():
        return email.strip()
    for key, value in data.items():
        if "email" in key.lower() and isinstance(value, str) and "@" in value:
            return value.strip()
    return None


async def ensure_capacity(event: Event) -> None:
    registered = await FormSubmission.find(
        FormSubmission.event_id == event.id,
        FormSubmission.form_type == "attendee",
        FormSubmission.status == "approved",
    ).count()
    if registered >= event.capacity:
        raise BadRequest("This event is at full capacity")


def initial_status(event: Event, form_type: str) -> str:
    if form_type == "attendee" and not event.event_settings.require_approval:
        return "approved"
    return "pending"


def event_email_info(event: Event) -> dict:
    date = event.start_date.strftime("%B %d, %Y")
    if event.start_time:
        date = f"{date} at {event.start_time}"
    return {
        "id": str(event.id),
        "title": event.title,
        "slug": event.slug,
        "date": date,
        "location": event.location or "TBD",
    }


async def submit_form(
    identifier: str,
    form_type: str,
    form_data: Any,
    user: Optional[User],
    background_tasks: BackgroundTasks,
) -> dict:
    if not identifier:
        raise BadRequest("Event ID is required")
    if not form_type:
        raise BadRequest("Form type is required")
    check_form_type(form_type)
    if not isinstance(form_data, dict):
        raise BadRequest("Form data is required")

    event = await resolve_event(identifier)

    # the publish check and the insert below are not atomic; a form unpublished in between still accepts this one
    if form_type in ("volunteer", "speaker") and event.form_state(form_type).status != "published":
        raise NotFound(f"{form_type.capitalize()} form is not available")

    if form_type == "attendee":
        await ensure_capacity(event)

    data = validate_answers(event.questions_for(form_type), normalize_answers(form_data))
    status = initial_status(event, form_type)
    email = applicant_email(data) or (user.email if user else None)
    name = applicant_name(data)

    submission = FormSubmission(
        event_id=event.id,
        user_id=user.id if user else None,
        form_type=form_type,
        status=status,
        user_name=name,
        user_email=email,
        data=data,
    )
    await submission.insert()
    logger.info("%s submission %s saved for event %s with status %s", form_type, submission.id, event.id, status)

    event_info = event_email_info(event)
    if email:
        background_tasks.add_task(
            email_service.send_submission_confirmation, email, name, form_type, status, event_info
        )
    try:
        organizer = await User.get(event.organizer)
    except Exception as e:
        logger.error("Could not load organizer %s of event %s: %s", event.organizer, event.id, e)
        organizer = None
    if organizer and organizer.email:
        background_tasks.add_task(
            email_service.send_organizer_notification,
            organizer.email, organizer.first_name, form_type, str(submission.id), data, event_info,
        )
    else:
        logger.warning("Organizer %s of event %s not found or has no email", event.organizer, event.id)

    if status == "approved":
        message = "Registration submitted successfully"
    else:
        message = f"{form_type.capitalize()} submission received and pending approval"
    return {"success": True, "message": message, "submissionId": str(submission.id), "status": status}


async def promote_to_speaker(user_id: Optional[PydanticObjectId]) -> bool:
    if user_id is None:
        return False
    user = await User.get(user_id)
    if user is None or user.user_type == "speaker":
        return False
    user.user_type = "speaker"
    await user.save()
    logger.info("User %s promoted to speaker", user_id)
    return True


async def organizer_contact(event: Event, fallback: User) -> dict:
    try:
        organizer = await User.get(event.organizer)
    except Exception as e:
        logger.error("Could not load organizer %s of event %s: %s", event.organizer, event.id, e)
        organizer = None
    if organizer:
        return {"name": organizer.full_name, "email": organizer.email}
    return {"name": "Event Organizer", "email": fallback.email}


async def update_submission_status(
    event: Event,
    form_type: str,
    submission_id: str,
    status: Optional[str],
    user: User,
    background_tasks: BackgroundTasks,
    recipient_email: Optional[str] = None,
    recipient_name: Optional[str] = None,
) -> dict:
    ensure_can_manage(event, user, REVIEWER_ROLES)
    check_form_type(form_type)
    if not is_object_id(submission_id):
        raise BadRequest("Invalid submission ID")
    if status not in SUBMISSION_STATUSES:
        raise BadRequest("Invalid status")

    submission = await FormSubmission.find_one(
        FormSubmission.id == PydanticObjectId(submission_id),
        FormSubmission.event_id == event.id,
        FormSubmission.form_type == form_type,
    )
    if submission is None:
        raise NotFound("Submission not found")

    submission.status = status
    submission.updated_at = utcnow()
    await submission.save()

    if status == "approved" and form_type == "speaker":
        await promote_to_speaker(submission.user_id)

    if status in ("approved", "rejected") and recipient_email:
        name = recipient_name or submission.user_name or DEFAULT_PARTICIPANT_NAME
        background_tasks.add_task(
            email_service.send_status_email,
            recipient_email, name, form_type, status, event_email_info(event), await organizer_contact(event, user),
        )

    return {"success": True, "message": f"{form_type.capitalize()} submission {status} successfully"}


def parse_submission_ids(submission_ids: Any) -> List[PydanticObjectId]:
    if not isinstance(submission_ids, list) or not submission_ids:
        raise BadRequest("Invalid submission IDs")
    if not all(is_object_id(i) for i in submission_ids):
        raise BadRequest("Invalid submission IDs")
    return [PydanticObjectId(i) for i in submission_ids]


async def bulk_approve(event: Event, form_type: str, submission_ids: Any, user: User) -> dict:
    check_form_type(form_type)
    ensure_can_manage(event, user, REVIEWER_ROLES)
    ids = parse_submission_ids(submission_ids)

    submissions = await FormSubmission.find(
        In(FormSubmission.id, ids),
        FormSubmission.event_id == event.id,
        FormSubmission.form_type == form_type,
    ).to_list()

    updated = 0
    now = utcnow()
    for submission in submissions:
        if submission.status == "approved":
            continue
        submission.status = "approved"
        submission.updated_at = now
        await submission.save()
        updated += 1
        if form_type == "speaker":
            await promote_to_speaker(submission.user_id)

    return {
        "success": True,
        "message": f"{len(ids)} {form_type} submissions approved successfully",
        "updatedCount": updated,
    }


def submission_to_public(submission: FormSubmission) -> dict:
    return {
        "id": str(submission.id),
        "eventId": str(submission.event_id),
        "userId": str(submission.user_id) if submission.user_id else None,
        "formType": submission.form_type,
        "status": submission.status,
        "userName": submission.user_name,
        "userEmail": submission.user_email,
        "data": submission.data,
        "notes": submission.notes,
        "isCheckedIn": submission.is_checked_in,
        "checkedInAt": isoformat(submission.checked_in_at),
        "checkInCount": submission.check_in_count,
        "createdAt": isoformat(submission.created_at),
        "updatedAt": isoformat(submission.updated_at),
    }


async def list_submissions(
    event: Event,
    form_type: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    criteria = [FormSubmission.event_id == event.id]
    if form_type:
        check_form_type(form_type)
        criteria.append(FormSubmission.form_type == form_type)
    if status:
        if status not in SUBMISSION_STATUSES:
            raise BadRequest("Invalid status")
        criteria.append(FormSubmission.status == status)
    if search:
        pattern = re.escape(search)
        criteria.append({"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS]})

    query = FormSubmission.find(*criteria)
    total = await query.count()
    submissions = await query.sort("-created_at").skip((page - 1) * limit).limit(limit).to_list()

    return {
        "submissions": [submission_to_public(s) for s in submissions],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": (total + limit - 1) // limit,
        },
    }


async def submission_counts(event: Event, form_type: Optional[str] = None) -> dict:
    form_types = [check_form_type(form_type)] if form_type else list(FORM_TYPES)
    counts = {}
    for kind in form_types:
        base = [FormSubmission.event_id == event.id, FormSubmission.form_type == kind]
        counts[kind] = {"total": await FormSubmission.find(*base).count()}
        for status in SUBMISSION_STATUSES:
            counts[kind][status] = await FormSubmission.find(*base, FormSubmission.status == status).count()
    return counts


async def pending_for_user(user: User) -> List[dict]:
    submissions = await FormSubmission.find(
        FormSubmission.user_id == user.id,
        FormSubmission.status == "pending",
    ).sort("-created_at").to_list()
    return [submission_to_public(s) for s in submissions]


def _stringify(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def collect_field_options(payloads: Iterable[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Map every primitive-valued field to the distinct values seen for it."""
    options: Dict[str, Dict[str, None]] = {}
    for data in payloads:
        for key, value in (data or {}).items():
            if isinstance(value, (str, int, float, bool)):
                options.setdefault(key, {})[_stringify(value)] = None
    return {key: list(values) for key, values in options.items()}


async def aggregate_field_options(identifier: str, user: Optional[User]) -> dict:
    try:
        event = await resolve_event(identifier)
        ensure_can_manage(event, user)
        submissions = await FormSubmission.find(
            FormSubmission.event_id == event.id,
            FormSubmission.form_type == "attendee",
        ).to_list()
        options = collect_field_options(s.data for s in submissions)
        return {"options": options, "totalFields": len(options)}
    except ServiceError:
        raise
    except Exception as e:
        logger.exception("Error fetching field options for event %s", identifier)
        return {
            "options": {},
            "totalFields": 0,
            "error": str(e) or "An error occurred while fetching field options",
        }
