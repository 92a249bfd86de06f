from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from eventdesk.dependencies import require_user
from eventdesk.models import FormSubmission, User
from eventdesk.schemas import BulkApproveRequest, StatusUpdate
from eventdesk.services import submission_service
from eventdesk.services.activity_service import log_activity
from eventdesk.services.event_service import REVIEWER_ROLES, ensure_can_manage, resolve_event
from eventdesk.services.excel_service import generate_submissions_excel
from eventdesk.services.form_service import check_form_type

router = APIRouter(tags=["submissions"])

@router.get("/api/events/{id}/submissions")
async def list_submissions(
    id: str,
    user: User = Depends(require_user),
    form_type: Optional[str] = Query(None, alias="formType"),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    event = await resolve_event(id)
    ensure_can_manage(event, user, REVIEWER_ROLES)
    return await submission_service.list_submissions(event, form_type, status, search, page, limit)

@router.get("/api/events/{id}/submissions/counts")
async def submission_counts(id: str, user: User = Depends(require_user), type: Optional[str] = Query(None)):
    event = await resolve_event(id)
    ensure_can_manage(event, user, REVIEWER_ROLES)
    return await submission_service.submission_counts(event, type)

@router.patch("/api/events/{id}/submissions/{form_type}/bulk-approve")
async def bulk_approve(request: Request, id: str, form_type: str, payload: BulkApproveRequest,
                       user: User = Depends(require_user)):
    check_form_type(form_type)
    event = await resolve_event(id)
    result = await submission_service.bulk_approve(event, form_type, payload.submission_ids, user)
    await log_activity(request, "bulk_approve", f"Approved {result['updatedCount']} {form_type} submissions", user, event)
    return result

@router.patch("/api/events/{id}/submissions/{form_type}/{submission_id}")
async def update_submission_status(request: Request, id: str, form_type: str, submission_id: str,
                                   payload: StatusUpdate, background_tasks: BackgroundTasks,
                                   user: User = Depends(require_user)):
    event = await resolve_event(id)
    result = await submission_service.update_submission_status(
        event, form_type, submission_id, payload.status, user, background_tasks,
        recipient_email=payload.email, recipient_name=payload.name,
    )
    await log_activity(request, "status_change", f"{form_type} submission {submission_id} set to {payload.status}", user, event)
    return result

@router.get("/api/events/{id}/submissions/{form_type}/export")
async def export_submissions(request: Request, id: str, form_type: str, user: User = Depends(require_user)):
    check_form_type(form_type)
    event = await resolve_event(id)
    ensure_can_manage(event, user, REVIEWER_ROLES)

    submissions = await FormSubmission.find(
        FormSubmission.event_id == event.id,
        FormSubmission.form_type == form_type,
    ).sort("created_at").to_list()
    questions = [q.model_dump() for q in event.questions_for(form_type)]
    title = f"{event.title} - {form_type.capitalize()} Submissions"

    # pandas is synchronous, keep it off the event loop
    output = await run_in_threadpool(
        generate_submissions_excel, [s.model_dump() for s in submissions], questions, title
    )
    await log_activity(request, "export", f"Exported {len(submissions)} {form_type} submissions", user, event)

    filename = f"{event.slug}_{form_type}_submissions.xlsx"
    return StreamingResponse(
        output,
        media_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )

@router.get("/api/events/{id}/field-options")
async def field_options(id: str, user: User = Depends(require_user)):
    return await submission_service.aggregate_field_options(id, user)

@router.get("/api/submissions/my-pending")
async def my_pending_submissions(user: User = Depends(require_user)):
    return {"submissions": await submission_service.pending_for_user(user)}
