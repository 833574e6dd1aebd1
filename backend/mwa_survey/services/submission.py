"""Hand a finished answer set to whoever persists it.

The client serializes the answers into a plain JSON-ready document and passes
it to a sink: a callable taking that document and returning the stored id.
`database_sink` writes straight into the local database; the HTTP client in
`services.api_client` is the sink for a remote deployment.
"""
import copy
import logging
from typing import Any, Callable, Dict, Mapping

from sqlalchemy.orm import Session

from mwa_survey.services import responses

logger = logging.getLogger(__name__)

Sink = Callable[[Dict[str, Any]], str]


def serialize_answers(answers: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep copy with sets/tuples turned into lists so the document is JSON-ready."""
    document: Dict[str, Any] = {}
    for key, value in answers.items():
        if isinstance(value, (set, frozenset, tuple)):
            value = list(value)
        document[key] = copy.deepcopy(value)
    return document


def database_sink(db: Session) -> Sink:
    def _store(document: Dict[str, Any]) -> str:
        return str(responses.create_response(db, document).id)

    return _store


class SubmissionClient:
    def __init__(self, sink: Sink) -> None:
        self._sink = sink

    def submit(self, answers: Mapping[str, Any]) -> str:
        """Send one answer set; returns the stored record id.

        Errors from the sink (MalformedInputError, PersistenceError) propagate
        unchanged so the caller can show them and let the respondent retry.
        """
        document = serialize_answers(answers)
        response_id = self._sink(document)
        logger.info("survey submitted as %s", response_id)
        return response_id
