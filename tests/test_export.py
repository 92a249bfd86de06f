import io

from openpyxl import load_workbook

from conftest import auth_headers
from eventdesk.models import ActivityLog, FormSubmission


async def test_export_attendees_to_excel(client, event, organizer):
    await FormSubmission(
        event_id=event.id,
        form_type="attendee",
        status="approved",
        user_name="Ada Lovelace",
        user_email="ada@example.com",
        data={"email": "ada@example.com", "tshirt": "M"},
    ).insert()

    response = await client.get(
        f"/api/events/{event.id}/submissions/attendee/export", headers=auth_headers(organizer)
    )

    assert response.status_code == 200
    assert "pydata-meetup_attendee_submissions.xlsx" in response.headers["content-disposition"]

    sheet = load_workbook(io.BytesIO(response.content)).active
    assert sheet["A1"].value == "PyData Meetup - Attendee Submissions"
    headers = [cell.value for cell in sheet[2]]
    assert headers == ["Name", "Email", "Status", "Submitted At", "Email", "T-shirt size"]
    row = [cell.value for cell in sheet[3]]
    assert row[0] == "Ada Lovelace"
    assert row[2] == "approved"
    assert row[5] == "M"

    assert await ActivityLog.find_one(ActivityLog.action == "export") is not None


async def test_activity_log_lists_actions(client, event, organizer, outsider):
    headers = auth_headers(organizer)
    await client.patch(f"/api/events/{event.id}/forms/speaker/publish", json={"status": "draft"}, headers=headers)

    response = await client.get(f"/api/events/{event.id}/activity", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["totalLogs"] == 1
    assert body["logs"][0]["action"] == "form_publish"
    assert body["logs"][0]["username"] == "organizer@example.com"

    assert (await client.get(f"/api/events/{event.id}/activity", headers=auth_headers(outsider))).status_code == 403
