"""Multi-section survey wizard.

Holds the answer set and the current section, and moves between sections.
The machine never validates and never fails; callers run the validation gate
(services.validation) before advancing out of a terminal section.

Navigation graph:

    A --(familiarWithMWA == "no")--> MWAInfo --> MWAConsent --> submitted
    A --(anything else)-----------> B --> C --> D --> Consent --> submitted
"""
import copy
import logging
from typing import Any, Dict, Optional

from mwa_survey.core.definition import (
    QUESTIONS,
    START_SECTION,
    TERMINAL_SECTIONS,
    Section,
    initial_answers,
)

logger = logging.getLogger(__name__)

# Fixed successors; A is the only fork and is handled in next_section().
_SUCCESSORS: Dict[Section, Section] = {
    Section.B: Section.C,
    Section.C: Section.D,
    Section.D: Section.CONSENT,
    Section.MWA_INFO: Section.MWA_CONSENT,
}

_PREDECESSORS: Dict[Section, Section] = {
    Section.B: Section.A,
    Section.C: Section.B,
    Section.D: Section.C,
    Section.CONSENT: Section.D,
    Section.MWA_INFO: Section.A,
    Section.MWA_CONSENT: Section.MWA_INFO,
}


def next_section(from_section: Section, answers: Dict[str, Any]) -> Optional[Section]:
    """Successor of a section, or None when leaving it submits the survey."""
    from_section = Section(from_section)
    if from_section in TERMINAL_SECTIONS:
        return None
    if from_section is Section.A:
        return Section.MWA_INFO if answers.get("familiarWithMWA") == "no" else Section.B
    return _SUCCESSORS[from_section]


def previous_section(from_section: Section) -> Section:
    """Predecessor of a section; A has none and maps to itself."""
    from_section = Section(from_section)
    return _PREDECESSORS.get(from_section, from_section)


class FormStateMachine:
    def __init__(
        self,
        answers: Optional[Dict[str, Any]] = None,
        current_section: Section = START_SECTION,
        submitted: bool = False,
    ) -> None:
        self.answers: Dict[str, Any] = initial_answers()
        if answers:
            self.answers.update(copy.deepcopy(answers))
        self.current_section = Section(current_section)
        self.submitted = submitted

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any]) -> "FormStateMachine":
        return cls(
            answers=snapshot.get("answers"),
            current_section=snapshot.get("section", START_SECTION),
            submitted=bool(snapshot.get("submitted", False)),
        )

    def snapshot(self) -> Dict[str, Any]:
        return {
            "answers": copy.deepcopy(self.answers),
            "section": self.current_section.value,
            "submitted": self.submitted,
        }

    def set_answer(self, key: str, value: Any) -> None:
        self.answers[key] = value

    def toggle_multi_value(self, key: str, option: str, included: bool) -> None:
        current = self.answers.get(key)
        values = list(current) if isinstance(current, (list, tuple, set)) else []

        if included and option not in values:
            values.append(option)
            order = list(QUESTIONS.get(key, {}).get("options", {}))
            # display order follows the option list; unknown tokens go last
            values.sort(key=lambda v: order.index(v) if v in order else len(order))
        elif not included and option in values:
            values = [v for v in values if v != option]

        self.answers[key] = values

    def advance(self, from_section: Optional[Section] = None) -> Section:
        """Move forward from `from_section` (default: the current section).

        Leaving Consent or MWAConsent marks the survey submitted and leaves the
        section where it is. Once submitted, the machine no longer moves.
        """
        if self.submitted:
            return self.current_section

        origin = Section(from_section) if from_section is not None else self.current_section
        target = next_section(origin, self.answers)
        if target is None:
            self.current_section = origin
            self.submitted = True
            logger.debug("wizard submitted from section %s", origin.value)
        else:
            self.current_section = target
        return self.current_section

    def retreat(self, from_section: Optional[Section] = None) -> Section:
        if self.submitted:
            return self.current_section

        origin = Section(from_section) if from_section is not None else self.current_section
        self.current_section = previous_section(origin)
        return self.current_section
