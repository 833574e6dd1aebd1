# Response table for the admin dashboard: filtering, row selection, CSV export.
import csv
import io
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

ALL = "all"

EXPORT_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("Doctor Name", "doctorName"),
    ("Hospital", "hospitalName"),
    ("Specialty", "specialty"),
    ("Years of Practice", "yearsOfPractice"),
    ("Practice Setting", "practiceSetting"),
    ("Managed Thyroid Patients", "managedThyroidPatients"),
    ("Familiar with MWA", "familiarWithMWA"),
    ("MWA Experience", "mwaExperience"),
    ("Procedure Count", "procedureCount"),
    ("MWA Indications", "mwaIndications"),
    ("Complications", "complications"),
    ("Additional Comments", "additionalComments"),
)

MULTI_VALUE_SEPARATOR = "; "


def _text(record: Mapping[str, Any], field: str) -> str:
    value = record.get(field)
    return value if isinstance(value, str) else ""


def matches_search(record: Mapping[str, Any], search_term: str) -> bool:
    if not search_term:
        return True
    needle = search_term.lower()
    return any(needle in _text(record, field).lower() for field in ("doctorName", "hospitalName", "specialty"))


def passes_filters(
    record: Mapping[str, Any],
    search_term: str = "",
    specialty_filter: str = ALL,
    experience_filter: str = ALL,
) -> bool:
    return (
        matches_search(record, search_term)
        and (specialty_filter == ALL or record.get("specialty") == specialty_filter)
        and (experience_filter == ALL or record.get("mwaExperience") == experience_filter)
    )


def filter_records(
    records: Sequence[Mapping[str, Any]],
    search_term: str = "",
    specialty_filter: str = ALL,
    experience_filter: str = ALL,
) -> List[Mapping[str, Any]]:
    """Records passing the search box and both dropdown filters, in input order."""
    return [
        record
        for record in records
        if passes_filters(record, search_term, specialty_filter, experience_filter)
    ]


def specialty_options(records: Iterable[Mapping[str, Any]]) -> List[str]:
    """Distinct non-empty specialties, first-seen order, for the filter dropdown."""
    seen: List[str] = []
    for record in records:
        specialty = record.get("specialty")
        if isinstance(specialty, str) and specialty and specialty not in seen:
            seen.append(specialty)
    return seen


def record_id(record: Mapping[str, Any], index: int) -> str:
    """Selection key: the persisted id, else "<doctorName>-<index>".

    `index` must be the record's position in the full, unfiltered list so the
    fallback key survives re-filtering.
    """
    persisted = record.get("_id") or record.get("id")
    if isinstance(persisted, Mapping):
        persisted = persisted.get("$oid")
    if persisted:
        return str(persisted)
    return f"{_text(record, 'doctorName')}-{index}"


def with_ids(records: Sequence[Mapping[str, Any]]) -> List[Tuple[str, Mapping[str, Any]]]:
    return [(record_id(record, index), record) for index, record in enumerate(records)]


def toggle_selection(selected: Set[str], row_id: str, included: bool) -> Set[str]:
    updated = set(selected)
    if included:
        updated.add(row_id)
    else:
        updated.discard(row_id)
    return updated


def select_all(filtered_ids: Iterable[str], included: bool) -> Set[str]:
    return set(filtered_ids) if included else set()


def export_rows(records: Iterable[Mapping[str, Any]]) -> str:
    """CSV text: fixed header row, one quoted row per record, no trailing newline."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    # header row is written bare, data cells are always quoted
    buffer.write(",".join(header for header, _ in EXPORT_COLUMNS) + "\n")

    for record in records:
        row = []
        for _, field in EXPORT_COLUMNS:
            value = record.get(field)
            if isinstance(value, list):
                row.append(MULTI_VALUE_SEPARATOR.join(str(v) for v in value))
            elif value is None:
                row.append("")
            else:
                row.append(str(value))
        writer.writerow(row)

    return buffer.getvalue().rstrip("\n")


def select_for_export(
    records: Sequence[Mapping[str, Any]],
    search_term: str = "",
    specialty_filter: str = ALL,
    experience_filter: str = ALL,
    selected_ids: Optional[Iterable[str]] = None,
) -> List[Mapping[str, Any]]:
    """Filtered records, narrowed to `selected_ids` when a selection is given."""
    wanted = set(selected_ids) if selected_ids is not None else None
    rows = []
    for row_id, record in with_ids(records):
        if wanted is not None and row_id not in wanted:
            continue
        rows.append(record)
    return filter_records(rows, search_term, specialty_filter, experience_filter)
