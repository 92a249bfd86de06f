from datetime import timedelta

import pytest
import resend
from beanie import init_beanie
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from main import app
from eventdesk.config import settings
from eventdesk.database import DOCUMENT_MODELS
from eventdesk.dependencies import make_session_token
from eventdesk.models import CustomQuestions, Event, FormState, Question, User
from eventdesk.utils.helpers import utcnow


@pytest.fixture(autouse=True)
async def db():
    client = AsyncMongoMockClient()
    await init_beanie(database=client["eventdesk_test"], document_models=DOCUMENT_MODELS)
    yield client


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing emails instead of calling the Resend API."""
    sent = []

    def fake_send(params):
        sent.append(params)
        return {"id": f"email_{len(sent)}"}

    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test_key")
    monkeypatch.setattr(resend.Emails, "send", fake_send)
    return sent


def auth_headers(user: User) -> dict:
    return {"Cookie": f"{settings.SESSION_COOKIE}={make_session_token(user)}"}


async def make_user(email, role="user", first_name="Test", last_name="User", **extra) -> User:
    user = User(first_name=first_name, last_name=last_name, email=email, password="not-a-real-hash", role=role, **extra)
    await user.insert()
    return user


async def make_event(organizer: User, **overrides) -> Event:
    values = dict(
        title="PyData Meetup",
        slug="pydata-meetup",
        description="Monthly meetup",
        start_date=utcnow() + timedelta(days=30),
        start_time="18:00",
        end_time="21:00",
        location="Main Hall",
        category="Tech",
        status="published",
        organizer=organizer.id,
        attendee_form=FormState(status="published"),
        volunteer_form=FormState(status="published"),
        speaker_form=FormState(status="published"),
    )
    values.update(overrides)
    event = Event(**values)
    await event.insert()
    return event


@pytest.fixture
async def organizer():
    return await make_user("organizer@example.com", role="event-planner", first_name="Olivia", last_name="Organizer")


@pytest.fixture
async def outsider():
    return await make_user("outsider@example.com")


@pytest.fixture
async def applicant():
    return await make_user("applicant@example.com", first_name="Sam", last_name="Speaker")


@pytest.fixture
async def event(organizer):
    return await make_event(
        organizer,
        custom_questions=CustomQuestions(
            attendee=[
                Question(id="email", type="email", label="Email", required=True),
                Question(
                    id="tshirt",
                    type="select",
                    label="T-shirt size",
                    options=[{"id": "s", "value": "S"}, {"id": "m", "value": "M"}],
                ),
            ],
            speaker=[Question(id="topic", type="text", label="Talk topic", required=True)],
        ),
    )
