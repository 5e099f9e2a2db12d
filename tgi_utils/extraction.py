"""
Group partitioning and timepoint extraction over consolidated animals.

Turns AnimalRecords into the per-group, per-day inputs the TGI calculators
consume. Animals missing a baseline or a target value are excluded
silently, so the resulting sample size can be smaller than the group.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .config import ColumnConfig
from .consolidation import AnimalRecord, Measurement, _is_empty, _to_number

METADATA_FIELDS = ('group', 'strain', 'sex')


@dataclass(frozen=True)
class TimepointSample:
    """An animal's baseline value and its value at a target study day."""
    animal_id: str
    baseline: float
    volume: float
    study_day: int


# =============================================================================
# GROUPS
# =============================================================================

def get_group_label(animal: AnimalRecord, field: str = 'group') -> Optional[str]:
    """
    Group label of an animal for a partition field.

    ``group``, ``strain`` and ``sex`` read the record's metadata; any other
    field is looked up as a string parameter, first non-empty value in
    study-day order.
    """
    if field in METADATA_FIELDS:
        return getattr(animal, field)
    for measurement in animal.measurements:
        value = measurement.parameters.get(field)
        if isinstance(value, str) and value.strip():
            return value
    return None


def group_animals(animals: Iterable[AnimalRecord], field: str = 'group') -> Dict[str, List[AnimalRecord]]:
    """Partition animals by exact label match; unlabeled animals are left out."""
    groups: Dict[str, List[AnimalRecord]] = {}
    for animal in animals:
        label = get_group_label(animal, field)
        if label is None:
            continue
        groups.setdefault(label, []).append(animal)
    return groups


def available_groups(animals: Iterable[AnimalRecord], field: str = 'group') -> List[str]:
    return sorted(group_animals(animals, field))


def available_group_fields(
    rows: Iterable[Mapping[str, Any]],
    columns: Optional[ColumnConfig] = None
) -> List[str]:
    """
    Columns usable as grouping variables: non-reserved columns holding at
    least one non-empty, non-numeric value. Sorted by name.
    """
    columns = columns or ColumnConfig()
    reserved = set(columns.reserved)
    fields = set()
    for row in rows:
        for key, value in row.items():
            if key in reserved or _is_empty(value):
                continue
            if _to_number(value) is None:
                fields.add(key)
    return sorted(fields)


# =============================================================================
# TIMEPOINTS
# =============================================================================

def study_days(animals: Iterable[AnimalRecord], parameter: Optional[str] = None) -> List[int]:
    """
    Sorted unique study days across all animals.

    With ``parameter``, only days where some animal has a numeric value
    for it are listed.
    """
    return sorted({
        m.study_day
        for animal in animals
        for m in animal.measurements
        if parameter is None or m.get_numeric(parameter) is not None
    })


def default_baseline_day(animals: Iterable[AnimalRecord], parameter: Optional[str] = None) -> Optional[int]:
    """Earliest study day (carrying ``parameter``, if given), or None."""
    days = study_days(animals, parameter)
    return days[0] if days else None


def find_measurement(
    animal: AnimalRecord,
    day: int,
    nearest: bool = True,
    parameter: Optional[str] = None
) -> Optional[Measurement]:
    """
    Measurement at ``day``, falling back to the closest day.

    Args:
        animal: Animal to search
        day: Target study day
        nearest: Fall back to the smallest |day difference| when there is
            no exact match. Ties keep the earlier day.
        parameter: Only consider measurements with a numeric value for it
    """
    candidates = animal.measurements
    if parameter is not None:
        candidates = [m for m in candidates if m.get_numeric(parameter) is not None]

    for measurement in candidates:
        if measurement.study_day == day:
            return measurement
    if not nearest:
        return None

    closest = None
    closest_diff = float('inf')
    for measurement in candidates:
        diff = abs(measurement.study_day - day)
        if diff < closest_diff:
            closest_diff = diff
            closest = measurement
    return closest


def extract_timepoint_values(animals: Iterable[AnimalRecord], day: int, parameter: str) -> List[float]:
    """Numeric values of ``parameter`` at exactly ``day``, one per animal that has one."""
    values = []
    for animal in animals:
        measurement = find_measurement(animal, day, nearest=False, parameter=parameter)
        if measurement is not None:
            values.append(measurement.get_numeric(parameter))
    return values


def match_timepoint_samples(
    animals: Iterable[AnimalRecord],
    target_day: int,
    parameter: str,
    baseline_day: Optional[int] = None,
    nearest: bool = False
) -> List[TimepointSample]:
    """
    Pair each animal's baseline value with its value at ``target_day``.

    The baseline is always an exact match on ``baseline_day`` (default:
    earliest study day with a ``parameter`` value among ``animals``). The
    target uses an exact match, or the nearest day when ``nearest`` is True.
    """
    animals = list(animals)
    if baseline_day is None:
        baseline_day = default_baseline_day(animals, parameter)
        if baseline_day is None:
            return []

    samples = []
    for animal in animals:
        baseline = find_measurement(animal, baseline_day, nearest=False, parameter=parameter)
        current = find_measurement(animal, target_day, nearest=nearest, parameter=parameter)
        if baseline is None or current is None:
            continue
        samples.append(TimepointSample(
            animal_id=animal.animal_id,
            baseline=baseline.get_numeric(parameter),
            volume=current.get_numeric(parameter),
            study_day=current.study_day
        ))
    return samples


def detect_tumor_volume_column(
    data: Union[Iterable[Mapping[str, Any]], Sequence[str]],
    candidates: Optional[Sequence[str]] = None
) -> Optional[str]:
    """
    First tumor-volume column, in priority order, that holds any data.

    Args:
        data: Raw rows, or a plain sequence of column names
        candidates: Column names to try (default: ColumnConfig.tumor_volume)
    """
    candidates = tuple(candidates or ColumnConfig().tumor_volume)
    data = list(data)

    if all(isinstance(item, str) for item in data):
        present = set(data)
        return next((c for c in candidates if c in present), None)

    for candidate in candidates:
        if any(not _is_empty(row.get(candidate)) for row in data):
            return candidate
    return None
