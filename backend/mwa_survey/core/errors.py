# Error kinds surfaced to the respondent or the dashboard user.
# All of them are recoverable by user action (edit and resubmit, or retry).
from typing import Any, Dict, List, Optional


class SurveyError(Exception):
    code = "SURVEY_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class MissingFieldError(SurveyError):
    """A required answer is empty; raised by the validation gate."""

    code = "MISSING_FIELD"

    def __init__(self, key: str, label: str) -> None:
        super().__init__(f"Please fill out the required field: {label}")
        self.key = key
        self.label = label

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["field"] = self.key
        payload["label"] = self.label
        return payload


class MalformedInputError(SurveyError):
    """Submission body is not JSON or fails the minimal schema check."""

    code = "MALFORMED_INPUT"

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.details:
            payload["details"] = self.details
        return payload


class PersistenceError(SurveyError):
    code = "PERSISTENCE_FAILED"


class FetchError(SurveyError):
    code = "FETCH_FAILED"
