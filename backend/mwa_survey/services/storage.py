"""In-process store for stateful wizard runs.

A run is the server-side copy of one respondent's FormStateMachine snapshot
plus bookkeeping (status, navigation history, stored response id). Runs live
only as long as the process; a submitted response is what gets persisted.
"""
from __future__ import annotations

import copy
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, TypedDict

RunStatus = Literal["active", "submitted"]


class NavigationStep(TypedDict):
    action: Literal["advance", "retreat"]
    from_section: str
    to_section: Optional[str]   # None when the step submitted the survey


class WizardRun(TypedDict, total=False):
    run_id: str
    version: str
    status: RunStatus
    section: str
    submitted: bool
    answers: Dict[str, Any]
    history: List[NavigationStep]
    response_id: Optional[str]
    created_at: str
    updated_at: str


def _stamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class InMemoryRunStore:
    # Callers only ever see deep copies; the lock covers every read and write.

    def __init__(self) -> None:
        self._runs: Dict[str, WizardRun] = {}
        self._lock = threading.RLock()

    def _stored(self, run_id: str) -> WizardRun:
        try:
            return self._runs[run_id]
        except KeyError:
            raise KeyError(f"wizard run '{run_id}' not found") from None

    def create_run(self, run: WizardRun) -> WizardRun:
        run_id = run.get("run_id")
        if not run_id:
            raise ValueError("a wizard run needs a run_id")

        stored = copy.deepcopy(run)
        stored.setdefault("history", [])
        stored.setdefault("created_at", _stamp())
        stored["updated_at"] = stored["created_at"]

        with self._lock:
            if run_id in self._runs:
                raise ValueError(f"wizard run '{run_id}' already exists")
            self._runs[run_id] = stored
            return copy.deepcopy(stored)

    def get_run(self, run_id: str) -> Optional[WizardRun]:
        with self._lock:
            run = self._runs.get(run_id)
            return copy.deepcopy(run) if run is not None else None

    def update_run(self, run_id: str, **changes: Any) -> WizardRun:
        """Overwrite the given top-level fields of a run."""
        with self._lock:
            run = self._stored(run_id)
            run.update(copy.deepcopy(changes))
            run["updated_at"] = _stamp()
            return copy.deepcopy(run)

    def record_step(self, run_id: str, step: NavigationStep, **changes: Any) -> WizardRun:
        """Append a navigation step and apply the machine's new state in one go."""
        with self._lock:
            run = self._stored(run_id)
            run.update(copy.deepcopy(changes))
            run.setdefault("history", []).append(copy.deepcopy(step))
            run["updated_at"] = _stamp()
            return copy.deepcopy(run)

    def clear(self) -> None:
        with self._lock:
            self._runs.clear()
