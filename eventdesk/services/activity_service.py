from typing import Optional

from fastapi import Request

from eventdesk.models import ActivityLog, Event, User

PER_PAGE = 20
LEVELS = ("INFO", "WARNING", "ERROR")

async def log_activity(
    request: Request,
    action: str,
    details: Optional[str] = None,
    user: Optional[User] = None,
    event: Optional[Event] = None,
    level: Optional[str] = None,
):
    """Record an organizer action (or a failure) in MongoDB."""
    if level is None:
        if action == "login_failed":
            level = "WARNING"
        else:
            level = "INFO"

    log = ActivityLog(
        level=level,
        action=action,
        details=details,
        username=user.email if user else None,
        event_id=event.id if event else None,
        ip_address=request.client.host if request.client else "unknown",
        user_agent=request.headers.get("user-agent", "unknown"),
    )
    await log.insert()
    return log

async def event_activity(event: Event, page: int = 1, level: Optional[str] = None) -> dict:
    query_filter = {"event_id": event.id}
    if level and level in LEVELS:
        query_filter["level"] = level

    query = ActivityLog.find(query_filter)
    total_logs = await query.count()
    total_pages = max(1, (total_logs + PER_PAGE - 1) // PER_PAGE)
    logs = await query.sort("-created_at").skip((page - 1) * PER_PAGE).limit(PER_PAGE).to_list()

    return {
        "logs": [
            {
                "action": log.action,
                "level": log.level,
                "details": log.details,
                "username": log.username,
                "createdAt": log.created_at.isoformat(),
            }
            for log in logs
        ],
        "currentPage": page,
        "totalPages": total_pages,
        "totalLogs": total_logs,
    }
