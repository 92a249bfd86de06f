import logging
from pathlib import Path
from typing import Any, Dict, Optional

import resend
from jinja2 import Environment, FileSystemLoader, select_autoescape

from eventdesk.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render(template_name: str, **context) -> str:
    context.setdefault("app_url", settings.APP_URL.rstrip("/"))
    return env.get_template(template_name).render(**context)


def send_email(to: str, subject: str, html_content: str) -> bool:
    if not settings.RESEND_API_KEY:
        logger.warning("[Email Service] Resend API Key is MISSING or Empty. Skipping email to %s", to)
        return False

    logger.info("[Email Service] Attempting to send '%s' to %s...", subject, to)
    resend.api_key = settings.RESEND_API_KEY

    try:
        r = resend.Emails.send({
            "from": settings.EMAIL_FROM,
            "to": to,
            "subject": subject,
            "html": html_content,
        })
        logger.info("[Email Service] Resend API Response: %s", r)
        return True
    except Exception as e:
        logger.error("[Email Service] FAILED to send email to %s: %s", to, e)
        return False


def send_submission_confirmation(email: str, name: str, form_type: str, status: str, event_info: Dict[str, Any]) -> bool:
    """Tell an applicant their submission arrived: confirmed when approved, under review otherwise."""
    if status == "approved":
        subject = f"Registration Confirmed: {event_info['title']}"
        template = "registration_confirmed.html"
    else:
        subject = f"{form_type.capitalize()} Submission Received: {event_info['title']}"
        template = "submission_under_review.html"
    html_content = render(template, name=name, form_type=form_type, event=event_info)
    return send_email(email, subject, html_content)


def send_organizer_notification(email: str, organizer_name: str, form_type: str, submission_id: str,
                                submission_data: Dict[str, Any], event_info: Dict[str, Any]) -> bool:
    subject = f"New {form_type.capitalize()} Submission for {event_info['title']}"
    html_content = render(
        "organizer_notification.html",
        organizer_name=organizer_name,
        form_type=form_type,
        submission_id=submission_id,
        submission_data=submission_data,
        event=event_info,
    )
    return send_email(email, subject, html_content)


def send_status_email(email: str, name: str, form_type: str, status: str, event_info: Dict[str, Any],
                      organizer: Dict[str, Optional[str]]) -> bool:
    if status == "approved":
        subject = f"Your {form_type} application for {event_info['title']} has been approved"
        template = "application_approved.html"
    else:
        subject = f"Update on your {form_type} application for {event_info['title']}"
        template = "application_rejected.html"
    html_content = render(template, name=name, form_type=form_type, event=event_info, organizer=organizer)
    return send_email(email, subject, html_content)
