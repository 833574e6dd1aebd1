"""HTTP client for a running survey service.

One request at a time, no retries: a failure is raised to the caller, who
decides whether to try again.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from mwa_survey.core.config import SURVEY_API_BASE_URL
from mwa_survey.core.errors import FetchError, MalformedInputError, PersistenceError
from mwa_survey.services.submission import serialize_answers

logger = logging.getLogger(__name__)


class SurveyApiClient:
    def __init__(
        self,
        base_url: str = SURVEY_API_BASE_URL,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = 30.0,
    ) -> None:
        self._client = httpx.Client(base_url=base_url.rstrip("/"), transport=transport, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SurveyApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def submit_survey(self, answers: Mapping[str, Any]) -> str:
        try:
            response = self._client.post("/submit-survey", json=serialize_answers(answers))
        except httpx.HTTPError as e:
            logger.error("survey submission request failed: %s", e)
            raise PersistenceError("Submission failed. Please try again.") from e

        body = _json_body(response)

        if response.status_code == 400:
            raise MalformedInputError(body.get("error") or "Invalid survey data", details=body.get("details"))
        if response.status_code >= 300 or not body.get("success"):
            logger.error("survey submission rejected with status %s", response.status_code)
            raise PersistenceError(body.get("error") or "Submission failed. Please try again.")

        return str(body.get("id", ""))

    # Sink interface for SubmissionClient
    __call__ = submit_survey

    def fetch_responses(self) -> List[Dict[str, Any]]:
        try:
            response = self._client.get("/admin/responses")
        except httpx.HTTPError as e:
            logger.error("fetching survey responses failed: %s", e)
            raise FetchError("Network error") from e

        body = _json_body(response)
        if not body.get("success"):
            raise FetchError(body.get("error") or "Failed to fetch data")

        data = body.get("data")
        if not isinstance(data, list):
            raise FetchError("Malformed response list")
        return data


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
