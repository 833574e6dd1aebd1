from mwa_survey.db.models import SurveyResponse


def _begin(client):
    resp = client.post("/api/survey/begin")
    assert resp.status_code == 200
    return resp.json()


def _answer(client, run_id, key, value):
    resp = client.post("/api/survey/answer", json={"run_id": run_id, "key": key, "value": value})
    assert resp.status_code == 200
    return resp.json()


def _fill(client, run_id, answers):
    for key, value in answers.items():
        _answer(client, run_id, key, value)


def test_begin_starts_on_section_a(client):
    run = _begin(client)

    assert run["section"] == "A"
    assert run["done"] is False
    assert run["next"]["id"] == "A"
    assert run["answers"]["mwaIndications"] == []
    assert run["response_id"] is None


def test_resume_and_show_return_the_same_run(client):
    run = _begin(client)
    _answer(client, run["run_id"], "doctorName", "Dr. Smith")

    resumed = client.post("/api/survey/resume", json={"run_id": run["run_id"]}).json()
    shown = client.get(f"/api/survey/runs/{run['run_id']}").json()

    assert resumed["answers"]["doctorName"] == "Dr. Smith"
    assert shown["answers"] == resumed["answers"]
    assert shown["history"] == []


def test_unknown_run(client):
    resp = client.post("/api/survey/resume", json={"run_id": "nope"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["error"]["code"] == "UNKNOWN_RUN"


def test_toggle_is_idempotent(client):
    run_id = _begin(client)["run_id"]
    for option in ("cysts", "benign", "benign"):
        body = client.post(
            "/api/survey/toggle",
            json={"run_id": run_id, "key": "mwaIndications", "option": option, "included": True},
        ).json()

    assert body["answers"]["mwaIndications"] == ["benign", "cysts"]

    body = client.post(
        "/api/survey/toggle",
        json={"run_id": run_id, "key": "mwaIndications", "option": "cysts", "included": False},
    ).json()
    assert body["answers"]["mwaIndications"] == ["benign"]


def test_advance_and_retreat(client):
    run_id = _begin(client)["run_id"]
    _answer(client, run_id, "familiarWithMWA", "yes")

    body = client.post("/api/survey/advance", json={"run_id": run_id, "section": "A"}).json()
    assert body["section"] == "B"

    body = client.post("/api/survey/retreat", json={"run_id": run_id}).json()
    assert body["section"] == "A"

    history = client.get(f"/api/survey/runs/{run_id}").json()["history"]
    assert history == [
        {"action": "advance", "from_section": "A", "to_section": "B"},
        {"action": "retreat", "from_section": "B", "to_section": "A"},
    ]


def test_stale_section_is_rejected(client):
    run_id = _begin(client)["run_id"]

    resp = client.post("/api/survey/advance", json={"run_id": run_id, "section": "C"})

    assert resp.status_code == 400
    assert resp.json()["detail"]["error"]["code"] == "FLOW_DIVERGENCE"


def test_submit_blocked_on_missing_field(client, db_session, make_record):
    run_id = _begin(client)["run_id"]
    _fill(client, run_id, make_record(familiarWithMWA="yes"))
    for _ in range(4):
        client.post("/api/survey/advance", json={"run_id": run_id})

    resp = client.post("/api/survey/advance", json={"run_id": run_id, "section": "Consent"})

    assert resp.status_code == 400
    error = resp.json()["detail"]["error"]
    assert error["code"] == "MISSING_FIELD"
    assert error["field"] == "learnedAboutMWA"
    assert db_session.query(SurveyResponse).count() == 0

    # the run stays open on Consent
    run = client.get(f"/api/survey/runs/{run_id}").json()
    assert run["section"] == "Consent"
    assert run["done"] is False


def test_full_familiar_run_is_stored(client, db_session, make_record):
    run_id = _begin(client)["run_id"]
    _fill(client, run_id, make_record(
        familiarWithMWA="yes",
        learnedAboutMWA="conference",
        mwaComparison="more-effective",
        contraindications="large goitre",
        procedureCount=14,
        receiveUpdates="yes",
    ))
    client.post(
        "/api/survey/toggle",
        json={"run_id": run_id, "key": "mwaIndications", "option": "benign", "included": True},
    )

    sections = []
    for _ in range(5):
        body = client.post("/api/survey/advance", json={"run_id": run_id}).json()
        sections.append(body["section"])

    assert sections == ["B", "C", "D", "Consent", "Consent"]
    assert body["done"] is True
    assert body["next"] is None

    row = db_session.query(SurveyResponse).one()
    assert str(row.id) == body["response_id"]
    assert row.answers["procedureCount"] == "14"
    assert row.answers["mwaIndications"] == ["benign"]


def test_unfamiliar_run_submits_without_consent_answer(client, db_session, make_record):
    run_id = _begin(client)["run_id"]
    _fill(client, run_id, make_record(familiarWithMWA="no", mwaInterest="maybe"))

    sections = [
        client.post("/api/survey/advance", json={"run_id": run_id}).json()["section"]
        for _ in range(3)
    ]

    assert sections == ["MWAInfo", "MWAConsent", "MWAConsent"]
    assert db_session.query(SurveyResponse).count() == 1


def test_submitted_run_is_closed(client, make_record):
    run_id = _begin(client)["run_id"]
    _fill(client, run_id, make_record())
    for _ in range(3):
        client.post("/api/survey/advance", json={"run_id": run_id})

    resp = client.post("/api/survey/answer", json={"run_id": run_id, "key": "doctorName", "value": "x"})
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"]["code"] == "STATUS_INACTIVE"


def test_answer_rejects_unknown_key(client):
    run_id = _begin(client)["run_id"]

    resp = client.post("/api/survey/answer", json={"run_id": run_id, "key": "bogusKey", "value": "x"})

    assert resp.status_code == 400
    error = resp.json()["detail"]["error"]
    assert error["code"] == "UNKNOWN_FIELD"
    assert error["field"] == "bogusKey"
    assert "bogusKey" not in client.get(f"/api/survey/runs/{run_id}").json()["answers"]


def test_toggle_rejects_single_answer_question(client):
    run_id = _begin(client)["run_id"]
    _answer(client, run_id, "doctorName", "Dr. Smith")

    resp = client.post(
        "/api/survey/toggle",
        json={"run_id": run_id, "key": "doctorName", "option": "benign", "included": True},
    )

    assert resp.status_code == 400
    assert resp.json()["detail"]["error"]["code"] == "UNKNOWN_FIELD"
    assert client.get(f"/api/survey/runs/{run_id}").json()["answers"]["doctorName"] == "Dr. Smith"


def test_other_text_fields_can_be_answered(client):
    run_id = _begin(client)["run_id"]
    body = _answer(client, run_id, "specialtyOther", "Nuclear medicine")
    assert body["answers"]["specialtyOther"] == "Nuclear medicine"
