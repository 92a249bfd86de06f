"""Request bodies accepted by the JSON API (camelCase on the wire)."""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignupRequest(ApiModel):
    first_name: str = Field(min_length=1)
    last_name: str = ""
    email: EmailStr
    password: str = Field(min_length=8)


class LoginRequest(ApiModel):
    email: EmailStr
    password: str


class EventSettingsIn(ApiModel):
    require_approval: bool = False


class EventCreate(ApiModel):
    title: str = Field(min_length=1, max_length=200)
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
    status: Literal["draft", "published", "cancelled", "completed", "active"] = "draft"
    settings: EventSettingsIn = EventSettingsIn()


class EventUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    image: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1, le=10000)
    price: Optional[float] = Field(None, ge=0)
    event_type: Optional[Literal["Online", "Offline", "Hybrid"]] = None
    visibility: Optional[Literal["Public", "Private"]] = None
    status: Optional[Literal["draft", "published", "cancelled", "completed", "active"]] = None
    settings: Optional[EventSettingsIn] = None


class FormFieldsUpdate(ApiModel):
    fields: Any = None


class PublishRequest(ApiModel):
    status: str


class SubmissionRequest(ApiModel):
    form_data: Optional[Dict[str, Any]] = None


class StatusUpdate(ApiModel):
    status: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class BulkApproveRequest(ApiModel):
    submission_ids: Any = None
