from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Request

from eventdesk.dependencies import get_current_user, require_user
from eventdesk.models import User
from eventdesk.schemas import FormFieldsUpdate, PublishRequest, SubmissionRequest
from eventdesk.services import form_service, submission_service
from eventdesk.services.activity_service import log_activity
from eventdesk.services.event_service import ensure_can_manage, resolve_event

router = APIRouter(prefix="/api/events", tags=["forms"])

# Form configuration

@router.get("/{id}/forms/status")
async def get_form_statuses(id: str, user: User = Depends(require_user)):
    event = await resolve_event(id)
    ensure_can_manage(event, user)
    return {"forms": form_service.form_statuses(event)}

@router.post("/{id}/publish-all-forms")
async def publish_all_forms(request: Request, id: str, user: User = Depends(require_user)):
    event = await resolve_event(id)
    await form_service.publish_all_forms(event, user)
    await log_activity(request, "publish_all", "Published all forms", user, event)
    return {"success": True, "message": "All forms published successfully", "eventSlug": event.slug}

@router.get("/{id}/forms/{form_type}/config")
async def get_public_form_config(id: str, form_type: str):
    return {"form": await form_service.get_public_form(id, form_type)}

@router.get("/{id}/forms/{form_type}")
async def get_form_for_editing(id: str, form_type: str, user: User = Depends(require_user)):
    return {"form": await form_service.get_managed_form(id, form_type, user)}

@router.put("/{id}/forms/{form_type}/config")
async def update_form_config(request: Request, id: str, form_type: str, payload: FormFieldsUpdate,
                             user: User = Depends(require_user)):
    form_service.check_form_type(form_type)
    event = await resolve_event(id)
    await form_service.replace_questions(event, form_type, payload.fields, user)
    await log_activity(request, "form_update", f"Replaced {form_type} questions", user, event)
    return {"success": True, "message": f"{form_type.capitalize()} form updated successfully"}

@router.patch("/{id}/forms/{form_type}/publish")
async def publish_form(request: Request, id: str, form_type: str, payload: PublishRequest,
                       user: User = Depends(require_user)):
    form_service.check_form_type(form_type)
    event = await resolve_event(id)
    await form_service.set_form_status(event, form_type, payload.status, user)
    await log_activity(request, "form_publish", f"Set {form_type} form to {payload.status}", user, event)
    verb = "published" if payload.status == "published" else "updated"
    return {"success": True, "message": f"Form {verb} successfully", "eventSlug": event.slug}

# Submission intake

@router.post("/{id}/forms/{form_type}/submissions", status_code=201)
async def submit_form(id: str, form_type: str, payload: SubmissionRequest, background_tasks: BackgroundTasks,
                      user: Optional[User] = Depends(get_current_user)):
    return await submission_service.submit_form(id, form_type, payload.form_data, user, background_tasks)

@router.post("/{id}/register", status_code=201)
async def register_attendee(id: str, background_tasks: BackgroundTasks, form_data: Dict[str, Any] = Body(...),
                            user: Optional[User] = Depends(get_current_user)):
    return await submission_service.submit_form(id, "attendee", form_data, user, background_tasks)

@router.post("/{id}/volunteer-applications", status_code=201)
async def submit_volunteer_application(id: str, background_tasks: BackgroundTasks,
                                       form_data: Dict[str, Any] = Body(...),
                                       user: Optional[User] = Depends(get_current_user)):
    return await submission_service.submit_form(id, "volunteer", form_data, user, background_tasks)

@router.post("/{id}/speaker-applications", status_code=201)
async def submit_speaker_application(id: str, background_tasks: BackgroundTasks,
                                     form_data: Dict[str, Any] = Body(...),
                                     user: Optional[User] = Depends(get_current_user)):
    return await submission_service.submit_form(id, "speaker", form_data, user, background_tasks)
