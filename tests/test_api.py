import pytest

from mwa_survey.api import admin
from mwa_survey.db.models import SurveyResponse


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_submit_survey_stores_one_row(client, db_session, make_record):
    resp = client.post("/api/submit-survey", json=make_record(mwaIndications=["benign"], unknownKey="dropped"))

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True

    rows = db_session.query(SurveyResponse).all()
    assert len(rows) == 1
    assert str(rows[0].id) == body["id"]
    assert rows[0].answers["mwaIndications"] == ["benign"]
    assert "unknownKey" not in rows[0].answers


def test_submit_survey_stores_off_the_event_loop(client, make_record, monkeypatch):
    calls = []
    real_run_in_threadpool = admin.run_in_threadpool

    async def spy(func, *args, **kwargs):
        calls.append(func)
        return await real_run_in_threadpool(func, *args, **kwargs)

    monkeypatch.setattr(admin, "run_in_threadpool", spy)

    resp = client.post("/api/submit-survey", json=make_record())

    assert resp.status_code == 201
    assert len(calls) == 1


def test_submit_survey_twice_is_two_rows(client, db_session, make_record):
    client.post("/api/submit-survey", json=make_record())
    client.post("/api/submit-survey", json=make_record())
    assert db_session.query(SurveyResponse).count() == 2


def test_submit_survey_rejects_invalid_json(client):
    resp = client.post(
        "/api/submit-survey",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid JSON"}


@pytest.mark.parametrize("override", [
    {"doctorName": ""},
    {"specialty": None},
    {"familiarWithMWA": 1},
])
def test_submit_survey_rejects_incomplete_data(client, db_session, make_record, override):
    resp = client.post("/api/submit-survey", json=make_record(**override))

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "Invalid survey data"
    assert body["details"]
    assert db_session.query(SurveyResponse).count() == 0


def test_submit_survey_rejects_non_object(client):
    resp = client.post("/api/submit-survey", json=["doctorName"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid survey data"


def test_fetch_responses_oldest_first(client, make_record):
    client.post("/api/submit-survey", json=make_record(doctorName="Dr. First"))
    client.post("/api/submit-survey", json=make_record(doctorName="Dr. Second"))

    resp = client.get("/api/admin/responses")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [r["doctorName"] for r in data] == ["Dr. First", "Dr. Second"]
    assert all(r["_id"] and r["createdAt"] for r in data)
    assert data[0]["mwaIndications"] == []


def test_analytics_without_responses(client):
    body = client.get("/api/admin/analytics").json()
    assert body["success"] is True
    assert body["data"] is None
    assert body["message"] == "No data available"


def test_analytics(client, make_record):
    for familiar in ("yes", "yes", "no", "no", "no"):
        client.post("/api/submit-survey", json=make_record(familiarWithMWA=familiar))

    body = client.get("/api/admin/analytics").json()

    assert body["theme"] in ("dark", "light")
    data = body["data"]
    assert data["totalResponses"] == 5
    assert data["mwaAwareCount"] == 2
    assert {i["key"]: i["value"] for i in data["mwaFamiliarityData"]} == {"yes": 40, "no": 60}


def test_response_table_filters(client, make_record):
    client.post("/api/submit-survey", json=make_record(doctorName="Dr. Smith", specialty="ent"))
    client.post("/api/submit-survey", json=make_record(doctorName="Dr. Jones", specialty="surgeon"))

    body = client.get("/api/admin/responses/table", params={"search": "dr. smith"}).json()
    assert body["total"] == 2
    assert [row["record"]["doctorName"] for row in body["rows"]] == ["Dr. Smith"]
    assert body["rows"][0]["row_id"] == body["rows"][0]["record"]["_id"]
    assert body["specialties"] == ["ent", "surgeon"]

    body = client.get("/api/admin/responses/table", params={"specialty": "surgeon"}).json()
    assert [row["record"]["doctorName"] for row in body["rows"]] == ["Dr. Jones"]


def test_export_all(client, make_record):
    client.post("/api/submit-survey", json=make_record())

    resp = client.post("/api/admin/responses/export", json={})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="thyroid-survey-responses.csv"' in resp.headers["content-disposition"]
    lines = resp.text.split("\n")
    assert lines[0].startswith("Doctor Name,Hospital,")
    assert lines[1].startswith('"Dr. Smith","City General"')


def test_export_selected(client, make_record):
    first = client.post("/api/submit-survey", json=make_record(doctorName="Dr. A")).json()["id"]
    client.post("/api/submit-survey", json=make_record(doctorName="Dr. B"))

    resp = client.post("/api/admin/responses/export", json={"selected_ids": [first]})

    assert resp.status_code == 200
    assert 'filename="selected-doctors-survey-1.csv"' in resp.headers["content-disposition"]
    assert len(resp.text.split("\n")) == 2
    assert '"Dr. A"' in resp.text


def test_export_empty_selection(client, make_record):
    client.post("/api/submit-survey", json=make_record())

    resp = client.post("/api/admin/responses/export", json={"selected_ids": []})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Please select at least one doctor to export."


def test_survey_definition(client):
    body = client.get("/api/survey/definition").json()

    assert body["start"] == "A"
    assert [s["id"] for s in body["sections"]] == ["A", "MWAInfo", "B", "C", "D", "Consent", "MWAConsent"]
    assert "mwaIndications" in body["multi_select"]
    assert body["initial_answers"]["complications"] == []


def test_survey_next_forks_on_familiarity(client):
    resp = client.post("/api/survey/next", json={"section": "A", "answers": {"familiarWithMWA": "no"}})
    assert resp.json()["next"]["id"] == "MWAInfo"

    resp = client.post("/api/survey/next", json={"section": "A", "answers": {"familiarWithMWA": "yes"}})
    assert resp.json()["next"]["id"] == "B"


def test_survey_next_from_consent_runs_gate(client, make_record):
    resp = client.post("/api/survey/next", json={"section": "Consent", "answers": make_record()})

    assert resp.status_code == 400
    error = resp.json()["detail"]["error"]
    assert error["code"] == "MISSING_FIELD"
    assert error["message"] == "Please fill out the required field: Consent"

    resp = client.post(
        "/api/survey/next",
        json={"section": "Consent", "answers": make_record(receiveUpdates="yes")},
    )
    assert resp.status_code == 200
    assert resp.json()["done"] is True


def test_survey_evaluate(client, make_record):
    body = client.post(
        "/api/survey/evaluate",
        json={"section": "MWAConsent", "answers": make_record(hospitalName="")},
    ).json()

    assert body["complete"] is False
    assert body["missing"]["field"] == "hospitalName"
    assert "receiveUpdates" not in body["required_fields"]
