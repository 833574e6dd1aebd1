import uuid

from sqlalchemy import Column, DateTime, JSON, String, Uuid
from sqlalchemy.sql import func

from mwa_survey.core.config import RECORD_SCHEMA_VERSION
from mwa_survey.db.base import Base


class SurveyResponse(Base): # one submitted survey, written once and never updated
    __tablename__ = "survey_responses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    # bump together with schemas.SurveyAnswers when the answer shape changes
    schema_version = Column(String(40), nullable=False, default=RECORD_SCHEMA_VERSION)

    # the validated answer set, keyed by question id
    answers = Column(JSON, nullable=False, default=dict)
