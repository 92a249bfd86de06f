from beanie import Document, Indexed, PydanticObjectId
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, get_args
import re

from eventdesk.utils.helpers import as_naive_utc, utcnow

FormType = Literal["attendee", "volunteer", "speaker"]
FormStatus = Literal["draft", "published"]
SubmissionStatus = Literal["pending", "approved", "rejected"]
EventStatus = Literal["draft", "published", "cancelled", "completed", "active"]
QuestionType = Literal["text", "textarea", "select", "radio", "checkbox", "date", "email", "phone", "number"]
UserRole = Literal["user", "event-planner", "admin", "super-admin"]

FORM_TYPES = get_args(FormType)
FORM_STATUSES = get_args(FormStatus)
SUBMISSION_STATUSES = get_args(SubmissionStatus)
CHOICE_TYPES = {"select", "radio", "checkbox"}
PUBLIC_EVENT_STATUSES = {"published", "active"}

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class QuestionOption(BaseModel):
    id: str
    value: str


class Question(BaseModel):
    id: str = Field(pattern=r"^[A-Za-z0-9_-]+$")
    type: QuestionType
    label: str = Field(min_length=1, max_length=200)
    placeholder: Optional[str] = Field(None, max_length=200)
    required: bool = False
    options: List[QuestionOption] = []

    @model_validator(mode="after")
    def check_options(self):
        if self.type not in CHOICE_TYPES:
            self.options = []
        elif self.type in ("select", "radio") and not self.options:
            raise ValueError(f"Question '{self.id}' needs at least one option")
        return self


class CustomQuestions(BaseModel):
    attendee: List[Question] = []
    volunteer: List[Question] = []
    speaker: List[Question] = []


class FormState(BaseModel):
    status: FormStatus = "draft"
    updated_at: Optional[datetime] = None


class EventSettings(BaseModel):
    require_approval: bool = False


class User(Document):
    first_name: str
    last_name: str = ""
    email: Indexed(str, unique=True)  # stored lowercase
    password: str
    role: UserRole = "user"
    user_type: Optional[str] = None  # participation type, e.g. "speaker"
    created_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "users"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Event(Document):
    title: str
    slug: Indexed(str, unique=True)
    description: str = ""
    start_date: datetime
    end_date: Optional[datetime] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: str = ""
    category: str = ""
    tags: List[str] = []
    image: Optional[str] = None
    capacity: int = Field(100, ge=1, le=10000)
    price: float = Field(0, ge=0)
    event_type: Literal["Online", "Offline", "Hybrid"] = "Offline"
    visibility: Literal["Public", "Private"] = "Public"
    status: EventStatus = "draft"
    organizer: PydanticObjectId
    custom_questions: CustomQuestions = Field(default_factory=CustomQuestions)
    attendee_form: FormState = Field(default_factory=FormState)
    volunteer_form: FormState = Field(default_factory=FormState)
    speaker_form: FormState = Field(default_factory=FormState)
    event_settings: EventSettings = Field(default_factory=EventSettings)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "events"
        indexes = [
            [("organizer", 1)],
            [("status", 1)],
        ]

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, value):
        if value and not TIME_RE.match(value):
            raise ValueError("Time must use the HH:MM format")
        return value or None

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, value):
        return list(dict.fromkeys(t.strip() for t in value if t.strip()))

    @model_validator(mode="after")
    def check_schedule(self):
        start = as_naive_utc(self.start_date)
        end = as_naive_utc(self.end_date)
        if end is not None and end < start:
            raise ValueError("End date must be on or after the start date")
        same_day = end is None or end.date() == start.date()
        if same_day and self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("End time must be after the start time")
        return self

    def form_state(self, form_type: str) -> FormState:
        return getattr(self, f"{form_type}_form")

    def questions_for(self, form_type: str) -> List[Question]:
        return getattr(self.custom_questions, form_type)


class FormSubmission(Document):
    event_id: PydanticObjectId
    user_id: Optional[PydanticObjectId] = None
    form_type: FormType
    status: SubmissionStatus = "pending"
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    data: Dict[str, Any] = {}
    notes: Optional[str] = None
    # event-day check-in, independent from approval
    is_checked_in: bool = False
    checked_in_at: Optional[datetime] = None
    checked_in_by: Optional[PydanticObjectId] = None
    check_in_count: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "formsubmissions"
        indexes = [
            [("event_id", 1), ("form_type", 1)],
            [("event_id", 1), ("status", 1)],
            [("event_id", 1), ("form_type", 1), ("status", 1)],
            [("user_id", 1), ("event_id", 1)],
        ]


class ActivityLog(Document):
    log_type: str = "activity"
    level: str = "INFO"
    action: str
    details: Optional[str] = None
    username: Optional[str] = None
    event_id: Optional[PydanticObjectId] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "activity_logs"
        indexes = [
            [("created_at", -1)],
            [("event_id", 1), ("created_at", -1)],
            [("level", 1)],
        ]
