# Record schemas for the storage boundary (what goes into and comes out of the DB)
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mwa_survey.core.config import RECORD_SCHEMA_VERSION


class SurveySubmission(BaseModel):
    """Minimum a submission must carry before anything is written."""

    model_config = ConfigDict(extra="allow")

    doctorName: str = Field(min_length=1)
    hospitalName: str = Field(min_length=1)
    specialty: str = Field(min_length=1)
    yearsOfPractice: str = Field(min_length=1)
    practiceSetting: str = Field(min_length=1)
    managedThyroidPatients: str = Field(min_length=1)
    familiarWithMWA: str = Field(min_length=1)


class SurveyAnswers(BaseModel):
    """Versioned answer set (survey.response.v1). Optional answers default to empty."""

    model_config = ConfigDict(extra="ignore")

    # Section A
    doctorName: str
    hospitalName: str
    specialty: str
    specialtyOther: str = ""
    yearsOfPractice: str
    practiceSetting: str
    managedThyroidPatients: str
    familiarWithMWA: str

    # Section B
    learnedAboutMWA: str = ""
    learnedAboutMWAOther: str = ""
    mwaIndications: List[str] = Field(default_factory=list)
    mwaComparison: str = ""
    contraindications: str = ""

    # Section C
    mwaExperience: str = ""
    procedureCount: str = ""
    observedOutcomes: List[str] = Field(default_factory=list)
    complications: List[str] = Field(default_factory=list)
    complicationsOther: str = ""

    # Section D
    mwaViableAlternative: str = ""
    adoptionFactors: List[str] = Field(default_factory=list)
    attendWorkshop: str = ""
    additionalComments: str = ""

    # Consent & contact (both consent sections)
    receiveUpdates: str = ""
    contactEmail: str = ""

    # MWAInfo branch
    mwaInterest: str = ""
    mwaLearnMethod: List[str] = Field(default_factory=list)
    mwaLearnOther: str = ""
    mwaAttendCME: str = ""
    mwaConcerns: List[str] = Field(default_factory=list)
    mwaConcernOther: str = ""
    mwaReceiveResources: str = ""
    mwaResourceEmail: str = ""

    @field_validator("procedureCount", mode="before")
    @classmethod
    def _count_as_text(cls, value: Union[str, int, float, None]) -> str:
        # number inputs arrive as numbers from some clients
        if value is None:
            return ""
        if isinstance(value, bool):
            raise ValueError("procedureCount must be a number or text")
        if isinstance(value, (int, float)):
            return str(int(value)) if float(value).is_integer() else str(value)
        return value


class StoredResponse(BaseModel):
    """Wire shape of a stored record: the answers plus `_id` and `createdAt`."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id")
    createdAt: Optional[datetime] = None
    schemaVersion: str = RECORD_SCHEMA_VERSION

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
