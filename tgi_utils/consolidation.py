"""
Fold flat spreadsheet rows into per-animal longitudinal records.

Input rows are mappings of column name -> raw cell value, one row per
(animal, study day, parameter set). Output is one AnimalRecord per animal
with at most one Measurement per study day, sorted by day.

Rows that do not fit (no animal id, non-numeric study day) are dropped
without raising; partial data is expected from heterogeneous spreadsheets.
Drops are logged at DEBUG level and counted on the consolidator.
"""

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .config import ColumnConfig

logger = logging.getLogger(__name__)

ParameterValue = Union[float, str]


@dataclass
class Measurement:
    """One observation of an animal at one study day."""
    study_day: int
    date: Optional[str] = None
    parameters: Dict[str, ParameterValue] = field(default_factory=dict)

    def get_numeric(self, parameter: str) -> Optional[float]:
        """Return the parameter as a float, or None if missing or non-numeric."""
        value = self.parameters.get(parameter)
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            return None
        number = float(value)
        if math.isnan(number):
            return None
        return number


@dataclass
class AnimalRecord:
    """An animal's metadata and its measurements ordered by study day."""
    animal_id: str
    group: Optional[str] = None
    strain: Optional[str] = None
    sex: Optional[str] = None
    measurements: List[Measurement] = field(default_factory=list)

    @property
    def study_days(self) -> List[int]:
        return [m.study_day for m in self.measurements]


# =============================================================================
# CELL COERCION
# =============================================================================

def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ''


def _first_present(row: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    """Value of the first alias holding a non-empty cell, else None."""
    for alias in aliases:
        value = row.get(alias)
        if not _is_empty(value):
            return value
    return None


def _to_number(value: Any) -> Optional[float]:
    """Float for numeric cells or strings that parse entirely as a number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    if math.isnan(number):
        return None
    return number


def _to_study_day(value: Any) -> Optional[int]:
    number = _to_number(value)
    if number is None or math.isinf(number):
        return None
    return int(number)


def _to_label(value: Any) -> Optional[str]:
    """Metadata cells as strings; integral floats lose the trailing '.0'."""
    if _is_empty(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


# =============================================================================
# CONSOLIDATOR
# =============================================================================

class AnimalDataConsolidator:
    """
    Owns the AnimalRecord set of one import session.

    Example:
        >>> consolidator = AnimalDataConsolidator()
        >>> animals = consolidator.consolidate([
        ...     {'Animal_ID': 'M1', 'Group': 'Vehicle', 'Day': 0, 'Volume': 100},
        ...     {'Animal_ID': 'M1', 'Group': 'Vehicle', 'Day': 7, 'Volume': 180},
        ... ])
        >>> [m.study_day for m in animals[0].measurements]
        [0, 7]
    """

    def __init__(self, columns: Optional[ColumnConfig] = None):
        self.columns = columns or ColumnConfig()
        self.animals: Dict[str, AnimalRecord] = {}
        self.dropped_rows = 0

    def consolidate(self, raw_rows: Iterable[Mapping[str, Any]]) -> List[AnimalRecord]:
        """
        Discard the current set and rebuild it from ``raw_rows``.

        Returns:
            All AnimalRecords in first-seen order
        """
        self.animals = {}
        self.dropped_rows = 0

        for index, row in enumerate(raw_rows):
            animal_id = _to_label(_first_present(row, self.columns.animal_id))
            if not animal_id:
                logger.debug("Dropping row %d: no animal id", index)
                self.dropped_rows += 1
                continue

            if animal_id not in self.animals:
                self.animals[animal_id] = AnimalRecord(
                    animal_id=animal_id,
                    group=_to_label(_first_present(row, self.columns.group)),
                    strain=_to_label(_first_present(row, self.columns.strain)),
                    sex=_to_label(_first_present(row, self.columns.sex)),
                )

            if not self.add_measurement(animal_id, row):
                logger.debug("Dropping row %d (%s): non-numeric study day", index, animal_id)
                self.dropped_rows += 1

        logger.debug("Consolidated %d animals, dropped %d rows", len(self.animals), self.dropped_rows)
        return self.get_all_animals()

    def add_measurement(self, animal_id: str, row: Mapping[str, Any]) -> bool:
        """
        Merge one row into the animal's measurement for its study day.

        Returns:
            False if the animal is unknown or the row has no numeric day
        """
        animal = self.animals.get(animal_id)
        if animal is None:
            return False

        study_day = _to_study_day(_first_present(row, self.columns.study_day))
        if study_day is None:
            return False

        measurement = next((m for m in animal.measurements if m.study_day == study_day), None)
        if measurement is None:
            measurement = Measurement(
                study_day=study_day,
                date=_to_label(_first_present(row, self.columns.date))
            )
            animal.measurements.append(measurement)

        reserved = self.columns.reserved
        for key, raw in row.items():
            if key in reserved:
                continue
            number = _to_number(raw)
            if number is not None:
                measurement.parameters[key] = number
            elif not _is_empty(raw):
                measurement.parameters[key] = raw

        animal.measurements.sort(key=lambda m: m.study_day)
        return True

    def get_animal(self, animal_id: str) -> Optional[AnimalRecord]:
        return self.animals.get(animal_id)

    def get_all_animals(self) -> List[AnimalRecord]:
        return list(self.animals.values())

    def get_parameter_timeline(self, animal_id: str, parameter: str) -> List[Dict[str, Any]]:
        """
        Time series of one parameter for one animal.

        Returns:
            List of {'study_day', 'date', 'value'} for measurements that
            carry the parameter, ordered by study day
        """
        animal = self.animals.get(animal_id)
        if animal is None:
            return []
        return [
            {'study_day': m.study_day, 'date': m.date, 'value': m.parameters[parameter]}
            for m in animal.measurements
            if parameter in m.parameters
        ]


def consolidate(
    raw_rows: Iterable[Mapping[str, Any]],
    columns: Optional[ColumnConfig] = None
) -> List[AnimalRecord]:
    """Consolidate rows with a throwaway consolidator."""
    return AnimalDataConsolidator(columns).consolidate(raw_rows)
