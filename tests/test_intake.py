import resend

from conftest import auth_headers, make_event
from eventdesk.models import CustomQuestions, EventSettings, FormState, FormSubmission, Question, User


async def test_attendee_submission_is_auto_approved(client, event, sent_emails):
    response = await client.post(
        f"/api/events/{event.id}/forms/attendee/submissions",
        json={"formData": {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com", "tshirt": "M"}},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "approved"

    submission = await FormSubmission.get(body["submissionId"])
    assert submission.status == "approved"
    assert submission.form_type == "attendee"
    assert submission.user_name == "Ada Lovelace"
    assert submission.user_email == "ada@example.com"
    assert submission.user_id is None

    recipients = [mail["to"] for mail in sent_emails]
    assert recipients == ["ada@example.com", "organizer@example.com"]
    assert sent_emails[0]["subject"].startswith("Registration Confirmed")


async def test_attendee_submission_pending_when_approval_required(client, organizer, sent_emails):
    event = await make_event(organizer, event_settings=EventSettings(require_approval=True))

    response = await client.post(f"/api/events/{event.slug}/register", json={"email": "bob@example.com"})

    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    assert "Submission Received" in sent_emails[0]["subject"]


async def test_volunteer_and_speaker_start_pending(client, event):
    volunteer = await client.post(f"/api/events/{event.id}/volunteer-applications", json={"name": "Vic"})
    speaker = await client.post(f"/api/events/{event.id}/speaker-applications", json={"name": "Sue", "topic": "Async"})

    assert volunteer.json()["status"] == "pending"
    assert speaker.json()["status"] == "pending"


async def test_speaker_form_not_published(client, organizer):
    event = await make_event(organizer, speaker_form=FormState(status="draft"))

    response = await client.post(f"/api/events/{event.id}/speaker-applications", json={"name": "Sue"})

    assert response.status_code == 404
    assert response.json()["error"] == "Speaker form is not available"
    assert await FormSubmission.count() == 0


async def test_volunteer_form_not_published_even_for_organizer(client, organizer):
    event = await make_event(organizer, volunteer_form=FormState(status="draft"))

    response = await client.post(
        f"/api/events/{event.id}/forms/volunteer/submissions",
        json={"formData": {"name": "Vic"}},
        headers=auth_headers(organizer),
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Volunteer form is not available"


async def test_null_answers_are_stored_as_empty_strings(client, event):
    response = await client.post(
        f"/api/events/{event.id}/forms/attendee/submissions",
        json={"formData": {"email": "ada@example.com", "company": None, "tshirt": None}},
    )

    submission = await FormSubmission.get(response.json()["submissionId"])
    assert submission.data["company"] == ""
    assert submission.data["tshirt"] == ""


async def test_name_falls_back_to_default(client, event):
    response = await client.post(f"/api/events/{event.id}/register", json={"email": "anon@example.com"})

    submission = await FormSubmission.get(response.json()["submissionId"])
    assert submission.user_name == "Event Participant"


async def test_authenticated_submission_records_user(client, event, applicant):
    response = await client.post(
        f"/api/events/{event.id}/speaker-applications",
        json={"name": "Sam Speaker", "topic": "Beanie in production"},
        headers=auth_headers(applicant),
    )

    submission = await FormSubmission.get(response.json()["submissionId"])
    assert submission.user_id == applicant.id
    # no email in the answers, so the account email is used
    assert submission.user_email == "applicant@example.com"


async def test_missing_form_data(client, event):
    response = await client.post(f"/api/events/{event.id}/forms/attendee/submissions", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "Form data is required"


async def test_invalid_form_type(client, event):
    response = await client.post(
        f"/api/events/{event.id}/forms/sponsor/submissions", json={"formData": {"name": "x"}}
    )

    assert response.status_code == 400


async def test_unknown_event(client):
    response = await client.post("/api/events/nope/register", json={"email": "a@example.com"})

    assert response.status_code == 404


async def test_answers_are_checked_against_questions(client, event):
    missing = await client.post(f"/api/events/{event.id}/register", json={"tshirt": "S"})
    bad_choice = await client.post(
        f"/api/events/{event.id}/register", json={"email": "a@example.com", "tshirt": "XXL"}
    )
    bad_email = await client.post(f"/api/events/{event.id}/register", json={"email": "not-an-email"})

    assert missing.status_code == 400
    assert missing.json()["error"] == "Email is required"
    assert bad_choice.status_code == 400
    assert bad_email.status_code == 400
    assert await FormSubmission.count() == 0


async def test_email_failure_does_not_fail_submission(client, event, monkeypatch, sent_emails):
    def broken_send(params):
        raise RuntimeError("smtp down")

    monkeypatch.setattr(resend.Emails, "send", broken_send)

    response = await client.post(f"/api/events/{event.id}/register", json={"email": "ada@example.com"})

    assert response.status_code == 201
    assert await FormSubmission.count() == 1


async def test_duplicate_submissions_are_accepted(client, event):
    for _ in range(2):
        response = await client.post(f"/api/events/{event.id}/register", json={"email": "ada@example.com"})
        assert response.status_code == 201

    assert await FormSubmission.find(FormSubmission.user_email == "ada@example.com").count() == 2


async def test_non_finite_number_is_rejected_and_listing_still_works(client, organizer):
    event = await make_event(
        organizer,
        custom_questions=CustomQuestions(volunteer=[Question(id="age", type="number", label="Age")]),
    )

    response = await client.post(f"/api/events/{event.id}/volunteer-applications", json={"name": "V", "age": "nan"})

    assert response.status_code == 400
    assert response.json()["error"] == "Age must be a number"
    assert await FormSubmission.count() == 0

    listing = await client.get(
        f"/api/events/{event.id}/submissions?formType=volunteer", headers=auth_headers(organizer)
    )
    assert listing.status_code == 200


async def test_checkbox_item_of_wrong_type_is_rejected(client, organizer):
    event = await make_event(
        organizer,
        custom_questions=CustomQuestions(
            speaker=[Question(id="topics", type="checkbox", label="Topics", options=[{"id": "a", "value": "AI"}])]
        ),
    )

    response = await client.post(f"/api/events/{event.id}/speaker-applications", json={"topics": [{"x": 1}]})

    assert response.status_code == 400
    assert response.json()["error"] == "Topics has an invalid choice"


async def test_full_event_rejects_attendees(client, organizer):
    event = await make_event(organizer, capacity=1)
    await FormSubmission(event_id=event.id, form_type="attendee", status="approved", data={}).insert()
    await FormSubmission(event_id=event.id, form_type="attendee", status="rejected", data={}).insert()

    response = await client.post(f"/api/events/{event.id}/register", json={"email": "late@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "This event is at full capacity"
    assert await FormSubmission.count() == 2

    volunteer = await client.post(f"/api/events/{event.id}/volunteer-applications", json={"name": "Vic"})
    assert volunteer.status_code == 201


async def test_capacity_counts_only_approved_attendees(client, organizer):
    event = await make_event(organizer, capacity=1, event_settings=EventSettings(require_approval=True))

    first = await client.post(f"/api/events/{event.id}/register", json={"email": "a@example.com"})
    second = await client.post(f"/api/events/{event.id}/register", json={"email": "b@example.com"})

    assert first.status_code == 201
    assert second.status_code == 201


async def test_organizer_lookup_failure_keeps_submission(client, event, monkeypatch):
    async def broken_get(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(User, "get", broken_get)

    response = await client.post(f"/api/events/{event.id}/register", json={"email": "ada@example.com"})

    assert response.status_code == 201
    assert await FormSubmission.count() == 1
