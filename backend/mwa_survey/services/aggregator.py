"""Dashboard analytics over the stored survey responses.

Every function here is pure: the same record list always yields the same
output. Records are loosely typed documents; a field that is missing, has an
unexpected type, or holds a token outside the question's vocabulary is simply
not counted.
"""
import enum
import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from mwa_survey.core import config
from mwa_survey.core.definition import option_label, vocabulary

logger = logging.getLogger(__name__)


class DenominatorMode(str, enum.Enum):
    TOTAL_RECORDS = "totalRecords"        # every fetched record, answered or not
    TOTAL_SELECTIONS = "totalSelections"  # sum of the bucket counts


PIE_COLORS = ["#4160ec", "#63d3e1", "#8f4dfc", "#ff7bac", "#ffe697", "#50e3c2"]

# Chart palettes per question, in vocabulary order
CHART_COLORS: Dict[str, List[str]] = {
    "specialty": ["#4160ec", "#63d3e1", "#8f4dfc", "#ff7bac", "#50e3c2", "#ffe697"],
    "yearsOfPractice": ["#4160ec", "#63d3e1", "#8f4dfc", "#ff7bac"],
    "practiceSetting": ["#4160ec", "#63d3e1", "#8f4dfc", "#ff7bac"],
    "familiarWithMWA": ["#50e3c2", "#ff7bac"],
    "mwaIndications": ["#4160ec", "#63d3e1", "#8f4dfc", "#ff7bac", "#ffe697"],
    "mwaComparison": ["#50e3c2", "#4160ec", "#ff7bac", "#ffe697"],
    "observedOutcomes": ["#50e3c2", "#4160ec", "#ffe697", "#ff7bac", "#8f4dfc"],
    "complications": ["#ff7bac", "#ff9f43", "#f368e0", "#ff6b6b", "#feca57"],
    "mwaInterest": ["#50e3c2", "#ffe697", "#ff7bac"],
    "mwaAttendCME": ["#50e3c2", "#ffe697", "#ff7bac"],
}

# Interest-style questions that show an illustrative split instead of an
# all-zero chart when nobody has answered them yet.
PLACEHOLDER_DISTRIBUTIONS: Dict[str, Sequence[int]] = {
    "mwaInterest": config.INTEREST_PLACEHOLDER,
    "mwaAttendCME": config.CME_PLACEHOLDER,
}


def count_by_option(records: Iterable[Mapping[str, Any]], field: str, vocab: Sequence[str]) -> Dict[str, int]:
    """Occurrences of each vocabulary token for `field` across `records`.

    Multi-select answers contribute once per matching token, so one record can
    land in several buckets.
    """
    counts = {token: 0 for token in vocab}

    for record in records:
        if not isinstance(record, Mapping):
            continue
        value = record.get(field)

        if isinstance(value, list):
            for token in value:
                if isinstance(token, str) and token in counts:
                    counts[token] += 1
        elif isinstance(value, str) and value in counts:
            counts[value] += 1

    return counts


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_percentages(
    counts: Mapping[str, int],
    mode: DenominatorMode = DenominatorMode.TOTAL_SELECTIONS,
    total_records: Optional[int] = None,
) -> Dict[str, int]:
    """Whole-number percentages of the chosen denominator.

    When the buckets account for the whole denominator, the rounding remainder
    is added to the largest entry (first one on ties) so the set sums to 100.
    Records that left the question blank are not redistributed. A zero
    denominator gives all zeros.
    """
    selections = sum(counts.values())
    if DenominatorMode(mode) is DenominatorMode.TOTAL_RECORDS:
        if total_records is None:
            raise ValueError("total_records is required for the totalRecords denominator")
        denominator = total_records
    else:
        denominator = selections

    if denominator <= 0:
        return {key: 0 for key in counts}

    percentages = {key: _round_half_up(count / denominator * 100) for key, count in counts.items()}

    total = sum(percentages.values())
    # only rounding residue is corrected, never the share of blank answers
    if total != 100 and selections == denominator:
        largest = max(percentages, key=lambda k: percentages[k])
        percentages[largest] += 100 - total

    return percentages


def chart_items(field: str, values: Mapping[str, int]) -> List[Dict[str, Any]]:
    colors = CHART_COLORS.get(field, PIE_COLORS)
    return [
        {
            "key": token,
            "name": option_label(field, token) or token,
            "value": value,
            "color": colors[index % len(colors)],
        }
        for index, (token, value) in enumerate(values.items())
    ]


def percentage_chart(
    records: Sequence[Mapping[str, Any]],
    field: str,
    mode: DenominatorMode,
) -> List[Dict[str, Any]]:
    counts = count_by_option(records, field, vocabulary(field))
    return chart_items(field, to_percentages(counts, mode, total_records=len(records)))


def interest_chart(records: Sequence[Mapping[str, Any]], field: str) -> List[Dict[str, Any]]:
    """Percentages of selections, or the placeholder split when all buckets are empty."""
    vocab = vocabulary(field)
    counts = count_by_option(records, field, vocab)

    if not any(counts.values()):
        placeholder = PLACEHOLDER_DISTRIBUTIONS[field]
        logger.debug("no answers for %s, using placeholder distribution", field)
        return chart_items(field, dict(zip(vocab, placeholder)))

    return chart_items(field, to_percentages(counts, DenominatorMode.TOTAL_SELECTIONS))


def specialty_distribution(records: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Raw counts per specialty actually present; a missing specialty counts as other."""
    counts: Dict[str, int] = {}
    for record in records:
        specialty = record.get("specialty") if isinstance(record, Mapping) else None
        if not isinstance(specialty, str) or not specialty:
            specialty = "other"
        counts[specialty] = counts.get(specialty, 0) + 1

    items = []
    for index, (token, count) in enumerate(counts.items()):
        label = option_label("specialty", token)
        if label is None:
            label = " ".join(word.capitalize() for word in token.split("-"))
        items.append({
            "key": token,
            "name": label,
            "value": count,
            "color": CHART_COLORS["specialty"][index % len(CHART_COLORS["specialty"])],
        })
    return items


def build_dashboard(records: Sequence[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """All dashboard charts for the fetched records; None when there are none."""
    if not records:
        return None

    total = len(records)
    aware = sum(1 for r in records if isinstance(r, Mapping) and r.get("familiarWithMWA") == "yes")

    familiarity = to_percentages(
        {"yes": aware, "no": total - aware},
        DenominatorMode.TOTAL_RECORDS,
        total_records=total,
    )

    indications = count_by_option(records, "mwaIndications", vocabulary("mwaIndications"))

    return {
        "totalResponses": total,
        "mwaAwareCount": aware,
        "notAwareCount": total - aware,
        "specialtyData": specialty_distribution(records),
        "practiceYearsData": percentage_chart(records, "yearsOfPractice", DenominatorMode.TOTAL_RECORDS),
        "practiceSettingData": percentage_chart(records, "practiceSetting", DenominatorMode.TOTAL_RECORDS),
        "mwaFamiliarityData": chart_items("familiarWithMWA", familiarity),
        "comparisonData": percentage_chart(records, "mwaComparison", DenominatorMode.TOTAL_RECORDS),
        "indicationsData": chart_items("mwaIndications", indications),
        "actualOutcomesData": percentage_chart(records, "observedOutcomes", DenominatorMode.TOTAL_SELECTIONS),
        "complicationsData": percentage_chart(records, "complications", DenominatorMode.TOTAL_SELECTIONS),
        "mwaInterestData": interest_chart(records, "mwaInterest"),
        "cmeAttendanceData": interest_chart(records, "mwaAttendCME"),
    }
