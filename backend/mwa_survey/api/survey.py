# HTTP Routes for the survey wizard without server-side state (client holds the answers)
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime, timezone
import logging

from mwa_survey.core import config
from mwa_survey.core.definition import (
    ANSWER_KEYS,
    MULTI_SELECT_FIELDS,
    START_SECTION,
    SURVEY_DEFINITION,
    Section,
    initial_answers,
    section_payload,
)
from mwa_survey.core.errors import MissingFieldError
from mwa_survey.services import validation
from mwa_survey.services.wizard import next_section

logger = logging.getLogger(__name__)

router = APIRouter() # Routers = modular endpoints (keeps code organized by endpoints)


class SectionRequest(BaseModel):
    section: Section = START_SECTION
    answers: Dict[str, Any] = Field(default_factory=dict)


def build_meta() -> dict: # server-authored metadata with an ISO-8601 UTC timestamp

    now_utc = datetime.now(timezone.utc) # timezone aware UTC
    ts = now_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    return {
        "version": config.SURVEY_VERSION,
        "timestamp": ts
    }


def error_detail(code: str, message: str, **extra: Any) -> dict:
    error = {"code": code, "message": message}
    error.update(extra)
    return {"error": error, "meta": build_meta()}


def missing_field_exception(exc: MissingFieldError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"error": exc.to_dict(), "meta": build_meta()},
    )


def show_section(section: Section) -> dict:
    payload = section_payload(Section(section).value)

    # choice options go out as an ordered list, the UI renders them top to bottom
    for question in payload["questions"].values():
        if "options" in question and isinstance(question["options"], dict):
            question["options"] = [
                {"key": k, "label": v["label"]} for k, v in question["options"].items()
            ]

    return {
        "next": {
            "id": payload["id"],
            "title": payload["title"],
            "questions": list(payload["questions"].values()),
            "resources": payload.get("resources", []),
            "terminal": Section(section) in (Section.CONSENT, Section.MWA_CONSENT),
        },
        "done": False,
        "meta": build_meta(),
    }


@router.get("/survey/definition")
def survey_definition():
    return {
        "start": START_SECTION.value,
        "sections": [show_section(Section(sid))["next"] for sid in SURVEY_DEFINITION],
        "answer_keys": list(ANSWER_KEYS),
        "multi_select": sorted(MULTI_SELECT_FIELDS),
        "initial_answers": initial_answers(),
        "meta": build_meta(),
    }


@router.post("/survey/next")    # advances one section forward for a client-held answer set
def survey_next(request: SectionRequest):
    target = next_section(request.section, request.answers)

    if target is None:
        # leaving a consent section submits, so the gate must pass first
        try:
            validation.validate(
                request.answers,
                validation.required_fields_for(request.answers, request.section),
            )
        except MissingFieldError as exc:
            raise missing_field_exception(exc)
        return {"next": None, "done": True, "meta": build_meta()}

    return show_section(target)


@router.post("/survey/evaluate")
def evaluate_survey_progress(request: SectionRequest):
    required = validation.required_fields_for(request.answers, request.section)
    missing: Optional[MissingFieldError] = validation.first_missing_field(request.answers, request.section)

    return {
        "section": request.section.value,
        "required_fields": required,
        "missing": missing.to_dict() if missing else None,
        "complete": missing is None,
        "meta": build_meta(),
    }
