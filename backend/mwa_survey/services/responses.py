from sqlalchemy.orm import Session # session lifetime is owned by the caller (get_db dependency)
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict, List
from datetime import datetime, timezone
import json
import logging

from pydantic import ValidationError

from mwa_survey.core.config import RECORD_SCHEMA_VERSION
from mwa_survey.core.errors import FetchError, MalformedInputError, PersistenceError
from mwa_survey.db.models import SurveyResponse
from mwa_survey.schemas import StoredResponse, SurveyAnswers

# All survey response reads and writes go through this module.
# Inserts only: a stored response is never updated or merged.

logger = logging.getLogger(__name__)


def utc_now():
    return datetime.now(timezone.utc)


def validation_details(exc: ValidationError) -> List[Dict[str, Any]]:
    return [
        {"path": [str(part) for part in err["loc"]], "message": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


def build_record(answers: Dict[str, Any]) -> Dict[str, Any]:
    # Validate the answer set against the versioned record schema
    if answers is None or not isinstance(answers, dict):
        raise MalformedInputError("answers must be a JSON object")

    try:
        record = SurveyAnswers.model_validate(answers)
    except ValidationError as e:
        raise MalformedInputError("Invalid survey data", details=validation_details(e))

    payload = record.model_dump()

    # JSON requires string keys; the column is JSON so check before the insert
    try:
        json.dumps(payload)
    except TypeError as e:
        raise MalformedInputError(f"answers are not JSON-serializable: {e}")

    return payload


def create_response(db: Session, answers: Dict[str, Any]) -> SurveyResponse:
    """Insert one response row and commit it.

    Raises MalformedInputError if the answers do not fit the record schema and
    PersistenceError if the database rejects the write.
    """
    payload = build_record(answers)

    response = SurveyResponse(
        created_at=utc_now(), # receipt time is a system fact
        schema_version=RECORD_SCHEMA_VERSION,
        answers=payload,
    )
    try:
        db.add(response)
        db.flush() # assigns response.id before the commit
        db.commit()
        db.refresh(response)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("failed to store survey response")
        raise PersistenceError("Failed to save survey") from e

    logger.info("stored survey response %s", response.id)
    return response


def to_document(response: SurveyResponse) -> Dict[str, Any]:
    document = dict(response.answers or {})
    document.update({
        "_id": str(response.id),
        "createdAt": response.created_at,
        "schemaVersion": response.schema_version,
    })
    return StoredResponse.model_validate(document).to_document()


def list_responses(db: Session) -> List[Dict[str, Any]]:
    # Full, unpaginated list, oldest first
    try:
        rows = db.query(SurveyResponse).order_by(SurveyResponse.created_at.asc()).all()
    except SQLAlchemyError as e:
        logger.exception("failed to fetch survey responses")
        raise FetchError("Failed to fetch responses") from e

    return [to_document(row) for row in rows]
