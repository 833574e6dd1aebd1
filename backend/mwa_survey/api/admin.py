# Submission endpoint + admin dashboard endpoints (response list, analytics, table, CSV export)
from typing import List, Optional
import json
import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from mwa_survey.api.survey import build_meta
from mwa_survey.core import config
from mwa_survey.core.errors import FetchError, MalformedInputError, PersistenceError
from mwa_survey.db.session import get_db
from mwa_survey.schemas import SurveySubmission
from mwa_survey.services import aggregator, responses, table
from mwa_survey.services.submission import SubmissionClient, database_sink

logger = logging.getLogger(__name__)

router = APIRouter()


def _failure(status_code: int, error: str, **extra) -> JSONResponse:
    body = {"success": False, "error": error}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


@router.post("/submit-survey", status_code=201)
async def submit_survey(request: Request, db: Session = Depends(get_db)):
    try:
        data = json.loads(await request.body())
    except ValueError:
        return _failure(400, "Invalid JSON")

    if not isinstance(data, dict):
        return _failure(400, "Invalid survey data", details=[{"path": [], "message": "Expected a JSON object"}])

    # minimal server-side check, independent of the client's validation gate
    try:
        SurveySubmission.model_validate(data)
    except ValidationError as e:
        logger.info("rejected survey submission: %d schema errors", e.error_count())
        return _failure(400, "Invalid survey data", details=responses.validation_details(e))

    try:
        # the session is blocking; keep it off the event loop
        response_id = await run_in_threadpool(SubmissionClient(database_sink(db)).submit, data)
    except MalformedInputError as exc:
        return _failure(400, exc.message, details=exc.details)
    except PersistenceError:
        return _failure(500, "Failed to save survey")

    return {"success": True, "id": response_id}


@router.get("/admin/responses")
def list_survey_responses(db: Session = Depends(get_db)):
    try:
        data = responses.list_responses(db)
    except FetchError as exc:
        return _failure(500, exc.message)
    return {"success": True, "data": data}


@router.get("/admin/analytics")
def dashboard_analytics(db: Session = Depends(get_db)):
    try:
        records = responses.list_responses(db)
    except FetchError as exc:
        return _failure(500, exc.message)

    analytics = aggregator.build_dashboard(records)
    return {
        "success": True,
        "theme": config.DASHBOARD_THEME,
        "data": analytics,
        "message": None if analytics else "No data available",
        "meta": build_meta(),
    }


@router.get("/admin/responses/table")
def response_table(
    search: str = "",
    specialty: str = Query(table.ALL),
    experience: str = Query(table.ALL),
    db: Session = Depends(get_db),
):
    try:
        records = responses.list_responses(db)
    except FetchError as exc:
        return _failure(500, exc.message)

    rows = [
        {"row_id": row_id, "record": record}
        for row_id, record in table.with_ids(records)
        if table.passes_filters(record, search, specialty, experience)
    ]
    return {
        "success": True,
        "total": len(records),
        "rows": rows,
        "specialties": table.specialty_options(records),
        "theme": config.DASHBOARD_THEME,
    }


class ExportRequest(BaseModel):
    search: str = ""
    specialty: str = table.ALL
    experience: str = table.ALL
    selected_ids: Optional[List[str]] = None   # None exports every filtered row


@router.post("/admin/responses/export")
def export_responses(req: ExportRequest, db: Session = Depends(get_db)):
    try:
        records = responses.list_responses(db)
    except FetchError as exc:
        return _failure(500, exc.message)

    selected = table.select_for_export(records, req.search, req.specialty, req.experience, req.selected_ids)
    if req.selected_ids is not None and not selected:
        return _failure(400, "Please select at least one doctor to export.")

    if req.selected_ids is None:
        filename = "thyroid-survey-responses.csv"
    else:
        filename = f"selected-doctors-survey-{len(selected)}.csv"

    return Response(
        content=table.export_rows(selected),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
