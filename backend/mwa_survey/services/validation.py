# Validation gate: which answers must be filled before the survey is submitted.
import logging
from typing import Any, Dict, Mapping, Optional

from mwa_survey.core.definition import Section
from mwa_survey.core.errors import MissingFieldError

logger = logging.getLogger(__name__)

BASE_REQUIRED_FIELDS: Dict[str, str] = {
    "doctorName": "Doctor's Name",
    "hospitalName": "Hospital/Institution",
    "specialty": "Specialty",
    "yearsOfPractice": "Years of Clinical Practice",
    "practiceSetting": "Practice Setting",
    "managedThyroidPatients": "Managed Thyroid Patients",
    "familiarWithMWA": "Familiar with MWA",
}

# Section B answers, only asked of respondents who know MWA
FAMILIAR_REQUIRED_FIELDS: Dict[str, str] = {
    "learnedAboutMWA": "How did you learn about MWA",
    "mwaIndications": "MWA Indications",
    "mwaComparison": "MWA Comparison",
    "contraindications": "Contraindications",
}

# Only the Consent section asks for it; MWAConsent does not.
CONSENT_REQUIRED_FIELDS: Dict[str, str] = {
    "receiveUpdates": "Consent",
}


def required_fields_for(answers: Mapping[str, Any], section: Optional[Section] = None) -> Dict[str, str]:
    """Field key -> human readable label, in the order they are checked."""
    required = dict(BASE_REQUIRED_FIELDS)

    if answers.get("familiarWithMWA") == "yes":
        required.update(FAMILIAR_REQUIRED_FIELDS)

    if section is not None and Section(section) is Section.CONSENT:
        required.update(CONSENT_REQUIRED_FIELDS)

    return required


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    if isinstance(value, str):
        return value == ""
    return False


def validate(answers: Mapping[str, Any], required_fields: Mapping[str, str]) -> None:
    """Raise MissingFieldError for the first empty required field."""
    for key, label in required_fields.items():
        if is_empty(answers.get(key)):
            logger.info("validation blocked on missing field %s", key)
            raise MissingFieldError(key, label)


def first_missing_field(answers: Mapping[str, Any], section: Optional[Section] = None) -> Optional[MissingFieldError]:
    try:
        validate(answers, required_fields_for(answers, section))
    except MissingFieldError as exc:
        return exc
    return None
