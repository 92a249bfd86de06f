"""Custom question forms: resolving, editing and publishing them.

Each event embeds one ordered question list per form type together with a
draft/published flag per form. Public visitors only ever see a form whose
own status is ``published`` while the event itself is published or active;
anything else is reported as "not found" so unpublished events do not leak.
"""
import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from eventdesk.errors import BadRequest, NotFound, validation_message
from eventdesk.models import Event, FormState, Question, User, FORM_STATUSES, FORM_TYPES
from eventdesk.services.event_service import (
    ensure_can_manage,
    has_started,
    is_publicly_visible,
    resolve_event,
)
from eventdesk.utils.helpers import isoformat, utcnow

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
PHONE_RE = re.compile(r"^\+?[\d\s().-]{6,20}$")

_questions_adapter = TypeAdapter(List[Question])

FORM_DESCRIPTIONS = {
    "attendee": "Please fill out this form to register for this event.",
    "volunteer": "Please fill out this form to apply as a volunteer for this event.",
    "speaker": "Please fill out this form to apply as a speaker for this event.",
}


def check_form_type(form_type: str) -> str:
    if form_type not in FORM_TYPES:
        raise BadRequest("Invalid form type")
    return form_type


def is_form_open(event: Event, form_type: str) -> bool:
    return is_publicly_visible(event) and event.form_state(form_type).status == "published"


def build_form_config(event: Event, form_type: str) -> dict:
    questions = event.questions_for(form_type)
    return {
        "title": f"{form_type.capitalize()} Form",
        "description": FORM_DESCRIPTIONS[form_type],
        "questions": [q.model_dump() for q in questions],
        "status": event.form_state(form_type).status,
        "eventTitle": event.title,
        "eventSlug": event.slug,
        "eventDate": isoformat(event.start_date),
        "startTime": event.start_time,
        "isEventPassed": has_started(event),
    }


async def get_public_form(identifier: str, form_type: str) -> dict:
    check_form_type(form_type)
    event = await resolve_event(identifier)
    if not is_form_open(event, form_type):
        logger.info("Form %s of event %s is not publicly available", form_type, event.id)
        raise NotFound("Form not found")
    return build_form_config(event, form_type)


async def get_managed_form(identifier: str, form_type: str, user: Optional[User]) -> dict:
    check_form_type(form_type)
    event = await resolve_event(identifier)
    ensure_can_manage(event, user)
    return build_form_config(event, form_type)


def parse_questions(fields: Any) -> List[Question]:
    if not isinstance(fields, list):
        raise BadRequest("Invalid fields data")
    try:
        questions = _questions_adapter.validate_python(fields)
    except ValidationError as e:
        raise BadRequest(validation_message(e))

    seen = set()
    for question in questions:
        if question.id in seen:
            raise BadRequest(f"Duplicate question id '{question.id}'")
        seen.add(question.id)
        option_ids = [o.id for o in question.options]
        if len(option_ids) != len(set(option_ids)):
            raise BadRequest(f"Duplicate option id in question '{question.id}'")
    return questions


async def replace_questions(event: Event, form_type: str, fields: Any, user: Optional[User]) -> None:
    check_form_type(form_type)
    ensure_can_manage(event, user)
    questions = parse_questions(fields)
    # previous answers keyed by removed ids stay on their submissions untouched
    setattr(event.custom_questions, form_type, questions)
    event.updated_at = utcnow()
    await event.save()
    logger.info("Replaced %s questions of event %s (%d questions)", form_type, event.id, len(questions))


async def set_form_status(event: Event, form_type: str, status: str, user: Optional[User]) -> None:
    check_form_type(form_type)
    ensure_can_manage(event, user)
    if status not in FORM_STATUSES:
        raise BadRequest("Invalid form status")
    setattr(event, f"{form_type}_form", FormState(status=status, updated_at=utcnow()))
    event.updated_at = utcnow()
    await event.save()


async def publish_all_forms(event: Event, user: Optional[User]) -> None:
    ensure_can_manage(event, user)
    now = utcnow()
    for form_type in FORM_TYPES:
        setattr(event, f"{form_type}_form", FormState(status="published", updated_at=now))
    event.updated_at = now
    await event.save()


def form_statuses(event: Event) -> Dict[str, str]:
    return {form_type: event.form_state(form_type).status for form_type in FORM_TYPES}


def _is_empty(value) -> bool:
    return value is None or value == "" or value == [] or value is False


def _check_answer(question: Question, value):
    """Validate one answer against its question and return the value to store."""
    kind = question.type
    label = question.label

    if kind in ("text", "textarea"):
        if not isinstance(value, str):
            raise BadRequest(f"{label} must be text")
        return value

    if kind == "email":
        if not isinstance(value, str) or not EMAIL_RE.match(value.strip()):
            raise BadRequest(f"{label} must be a valid email address")
        return value.strip()

    if kind == "phone":
        if not isinstance(value, str) or not PHONE_RE.match(value.strip()):
            raise BadRequest(f"{label} must be a valid phone number")
        return value.strip()

    if kind == "number":
        if isinstance(value, bool):
            raise BadRequest(f"{label} must be a number")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            number = value
        else:
            try:
                number = float(str(value).strip())
            except ValueError:
                raise BadRequest(f"{label} must be a number")
        # nan and inf cannot be serialized back to JSON
        if not math.isfinite(number):
            raise BadRequest(f"{label} must be a number")
        if isinstance(value, float):
            return value
        return int(number) if number.is_integer() else number

    if kind == "date":
        if not isinstance(value, str):
            raise BadRequest(f"{label} must be a date")
        try:
            if len(value) <= 10:
                date.fromisoformat(value)
            else:
                datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise BadRequest(f"{label} must be a date")
        return value

    allowed = {o.value for o in question.options} | {o.id for o in question.options}

    if kind in ("select", "radio"):
        if not isinstance(value, str) or value not in allowed:
            raise BadRequest(f"{label} has an invalid choice")
        return value

    # checkbox
    if not question.options:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "on", "yes", "false", "off", "no"):
            return value.lower() in ("true", "on", "yes")
        raise BadRequest(f"{label} must be checked or unchecked")
    choices = [value] if isinstance(value, str) else value
    if not isinstance(choices, list) or not all(isinstance(c, str) and c in allowed for c in choices):
        raise BadRequest(f"{label} has an invalid choice")
    return choices


def validate_answers(questions: List[Question], data: Dict[str, Any]) -> Dict[str, Any]:
    """Check answers against the declared questions.

    Keys that do not belong to a declared question are kept as free-form
    fields. Missing answers to required questions are rejected.
    """
    answers = dict(data)
    for question in questions:
        value = answers.get(question.id)
        if _is_empty(value):
            if question.required:
                raise BadRequest(f"{question.label} is required")
            continue
        answers[question.id] = _check_answer(question, value)
    return answers
