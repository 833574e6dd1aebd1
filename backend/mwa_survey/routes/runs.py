# Stateful wizard runs: survey.py (definition + gate) + storage.py (run store) + submission

from typing import Any, Optional
from uuid import uuid4
import base64
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from mwa_survey.api.survey import build_meta, error_detail, missing_field_exception, show_section
from mwa_survey.core.config import SURVEY_VERSION
from mwa_survey.core.definition import ANSWER_KEYS, MULTI_SELECT_FIELDS, Section
from mwa_survey.core.errors import MalformedInputError, MissingFieldError, PersistenceError
from mwa_survey.db.session import get_db
from mwa_survey.services import validation
from mwa_survey.services.storage import InMemoryRunStore, WizardRun
from mwa_survey.services.submission import SubmissionClient, database_sink
from mwa_survey.services.wizard import FormStateMachine

logger = logging.getLogger(__name__)

router = APIRouter()

# One store instance per process
STORE = InMemoryRunStore()


# ---------- helpers ----------

def _new_run_id() -> str:
    """
    URL-safe short id from 16 random bytes (~22 chars).
    """
    return base64.urlsafe_b64encode(uuid4().bytes).rstrip(b"=").decode("ascii")


def _require_run(run_id: str) -> WizardRun:
    run = STORE.get_run(run_id)
    if run is None:
        raise HTTPException(
            status_code=404,
            detail=error_detail("UNKNOWN_RUN", f"Run '{run_id}' not found."),
        )
    return run


def _require_active(run: WizardRun) -> None:
    if run.get("status") != "active":
        raise HTTPException(
            status_code=409,
            detail=error_detail("STATUS_INACTIVE", f"Run is {run.get('status')}."),
        )


def _require_field(key: str, multi_select: bool = False) -> None:
    # the answer set has a fixed key set; toggles only apply to multi-selects
    allowed = MULTI_SELECT_FIELDS if multi_select else ANSWER_KEYS
    if key not in allowed:
        kind = "multi-select question" if multi_select else "survey question"
        raise HTTPException(
            status_code=400,
            detail=error_detail("UNKNOWN_FIELD", f"'{key}' is not a {kind}.", field=key),
        )


def _require_section(run: WizardRun, section: Optional[Section]) -> None:
    # the client must be acting on the section the run is on
    if section is not None and section.value != run["section"]:
        raise HTTPException(
            status_code=400,
            detail=error_detail(
                "FLOW_DIVERGENCE",
                f"Expected section '{run['section']}', got '{section.value}'.",
            ),
        )


def _machine(run: WizardRun) -> FormStateMachine:
    return FormStateMachine.from_snapshot(run)


def _run_payload(run: WizardRun) -> dict:
    done = run["status"] == "submitted"
    return {
        "run_id": run["run_id"],
        "done": done,
        "section": run["section"],
        "next": None if done else show_section(Section(run["section"]))["next"],
        "answers": run["answers"],
        "response_id": run.get("response_id"),
        "version": run["version"],
        "meta": build_meta(),
    }


# ---------- request models ----------

class RunRequest(BaseModel):
    run_id: str


class AnswerRequest(BaseModel):
    run_id: str
    key: str
    value: Any = None


class ToggleRequest(BaseModel):
    run_id: str
    key: str
    option: str
    included: bool


class NavigateRequest(BaseModel):
    run_id: str
    section: Optional[Section] = None   # the section the client thinks it is leaving


# ---------- endpoints ----------

@router.post("/survey/begin")
def begin_run():
    """
    Create a new run with an empty answer set, positioned on section A.
    """
    machine = FormStateMachine()
    record: WizardRun = {
        "run_id": _new_run_id(),
        "version": SURVEY_VERSION,
        "status": "active",
        "response_id": None,
        **machine.snapshot(),
    }
    run = STORE.create_run(record)
    logger.info("wizard run %s started", run["run_id"])

    return _run_payload(run)


@router.post("/survey/resume")
def resume_run(req: RunRequest):
    return _run_payload(_require_run(req.run_id))


@router.get("/survey/runs/{run_id}")
def show_run(run_id: str):
    run = _require_run(run_id)
    payload = _run_payload(run)
    payload["history"] = run.get("history", [])
    return payload


@router.post("/survey/answer")
def set_answer(req: AnswerRequest):
    run = _require_run(req.run_id)
    _require_active(run)
    _require_field(req.key)

    machine = _machine(run)
    machine.set_answer(req.key, req.value)
    run = STORE.update_run(req.run_id, answers=machine.answers)
    return _run_payload(run)


@router.post("/survey/toggle")
def toggle_option(req: ToggleRequest):
    run = _require_run(req.run_id)
    _require_active(run)
    _require_field(req.key, multi_select=True)

    machine = _machine(run)
    machine.toggle_multi_value(req.key, req.option, req.included)
    run = STORE.update_run(req.run_id, answers=machine.answers)
    return _run_payload(run)


@router.post("/survey/advance")
def advance_run(req: NavigateRequest, db: Session = Depends(get_db)):
    """
    Move to the next section. Leaving Consent/MWAConsent runs the validation
    gate, stores the answers and completes the run.
    """
    run = _require_run(req.run_id)
    _require_active(run)
    _require_section(run, req.section)

    machine = _machine(run)
    origin = machine.current_section
    machine.advance()

    if machine.submitted:
        try:
            validation.validate(machine.answers, validation.required_fields_for(machine.answers, origin))
        except MissingFieldError as exc:
            raise missing_field_exception(exc)

        try:
            response_id = SubmissionClient(database_sink(db)).submit(machine.answers)
        except MalformedInputError as exc:
            raise HTTPException(status_code=400, detail={"error": exc.to_dict(), "meta": build_meta()})
        except PersistenceError as exc:
            raise HTTPException(status_code=500, detail={"error": exc.to_dict(), "meta": build_meta()})

        changes = {"status": "submitted", "response_id": response_id}
    else:
        changes = {}

    run = STORE.record_step(
        req.run_id,
        {
            "action": "advance",
            "from_section": origin.value,
            "to_section": None if machine.submitted else machine.current_section.value,
        },
        **machine.snapshot(),
        **changes,
    )
    return _run_payload(run)


@router.post("/survey/retreat")
def retreat_run(req: NavigateRequest):
    run = _require_run(req.run_id)
    _require_active(run)
    _require_section(run, req.section)

    machine = _machine(run)
    origin = machine.current_section
    machine.retreat()

    run = STORE.record_step(
        req.run_id,
        {
            "action": "retreat",
            "from_section": origin.value,
            "to_section": machine.current_section.value,
        },
        **machine.snapshot(),
    )
    return _run_payload(run)
