"""
Per-animal waterfall response analysis.

Each animal's response is its percent change from its own baseline
measurement (exact baseline day). Three modes:

- 'timepoint': value at the target day (nearest day if absent)
- 'best': minimum value over the whole series
- 'vs_control': the animal's change at the target day minus the control
  group's mean change (mean response vs mean baseline); control animals
  report 0

Animals without a baseline measurement are left out.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence

import numpy as np

from .consolidation import AnimalRecord
from .extraction import find_measurement, get_group_label

WaterfallMode = Literal['timepoint', 'best', 'vs_control']
WATERFALL_MODES = ('timepoint', 'best', 'vs_control')
NO_GROUP = 'No Group'


@dataclass(frozen=True)
class WaterfallEntry:
    animal_id: str
    group: str
    baseline_volume: float
    response_volume: float
    percent_change: float
    best_response: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WaterfallSummary:
    group: str
    n: int
    mean: float
    median: float
    sd: float
    min: float
    max: float

    def __repr__(self) -> str:
        return (f"{self.group}: n={self.n}, mean={self.mean:.1f}%, median={self.median:.1f}%, "
                f"SD={self.sd:.1f}%, range {self.min:.1f}% to {self.max:.1f}%")


def _percent_change(value: float, baseline: float) -> float:
    with np.errstate(divide='ignore', invalid='ignore'):
        return float((np.float64(value) - baseline) / np.float64(baseline) * 100)


def _control_mean_change(
    control_animals: Sequence[AnimalRecord],
    parameter: str,
    baseline_day: int,
    target_day: int
) -> Optional[float]:
    """Percent change of the control mean response over the control mean baseline."""
    baselines, responses = [], []
    for animal in control_animals:
        baseline = find_measurement(animal, baseline_day, nearest=False, parameter=parameter)
        response = find_measurement(animal, target_day, nearest=True, parameter=parameter)
        if baseline is not None and response is not None:
            baselines.append(baseline.get_numeric(parameter))
            responses.append(response.get_numeric(parameter))
    if not responses:
        return None
    return _percent_change(np.mean(responses), np.mean(baselines))


def waterfall_analysis(
    animals: Iterable[AnimalRecord],
    parameter: str,
    baseline_day: int,
    target_day: Optional[int] = None,
    mode: WaterfallMode = 'timepoint',
    group_field: str = 'group',
    control_group: Optional[str] = None
) -> List[WaterfallEntry]:
    """
    Per-animal percent change from baseline, sorted ascending.

    Args:
        animals: Consolidated animals
        parameter: Measurement parameter holding tumor volume
        baseline_day: Exact baseline study day
        target_day: Response day for 'timepoint' and 'vs_control'
        mode: 'timepoint', 'best' or 'vs_control'
        group_field: Partition field for group labels
        control_group: Control label, required for 'vs_control'

    Returns:
        WaterfallEntry list, most negative change first
    """
    if mode not in WATERFALL_MODES:
        raise ValueError(f"Unknown waterfall mode: {mode}. Use one of {WATERFALL_MODES}")
    if mode in ('timepoint', 'vs_control') and target_day is None:
        raise ValueError(f"mode '{mode}' needs a target_day")

    animals = list(animals)
    labels = {a.animal_id: get_group_label(a, group_field) or NO_GROUP for a in animals}

    control_change = None
    if mode == 'vs_control' and control_group is not None:
        controls = [a for a in animals if labels[a.animal_id] == control_group]
        control_change = _control_mean_change(controls, parameter, baseline_day, target_day)

    entries = []
    for animal in animals:
        series = [m for m in animal.measurements if m.get_numeric(parameter) is not None]
        baseline = find_measurement(animal, baseline_day, nearest=False, parameter=parameter)
        if baseline is None:
            continue
        baseline_volume = baseline.get_numeric(parameter)
        group = labels[animal.animal_id]
        best_volume = min(m.get_numeric(parameter) for m in series)

        percent_change = 0.0
        response_volume = baseline_volume

        if mode == 'timepoint':
            response = find_measurement(animal, target_day, nearest=True, parameter=parameter)
            response_volume = response.get_numeric(parameter)
            percent_change = _percent_change(response_volume, baseline_volume)
        elif mode == 'best':
            response_volume = best_volume
            percent_change = _percent_change(best_volume, baseline_volume)
        elif control_group is not None and group != control_group and control_change is not None:
            response = find_measurement(animal, target_day, nearest=True, parameter=parameter)
            response_volume = response.get_numeric(parameter)
            percent_change = _percent_change(response_volume, baseline_volume) - control_change

        entries.append(WaterfallEntry(
            animal_id=animal.animal_id,
            group=group,
            baseline_volume=baseline_volume,
            response_volume=response_volume,
            percent_change=percent_change,
            best_response=best_volume
        ))

    return sorted(entries, key=lambda e: e.percent_change)


def summarize_waterfall(entries: Sequence[WaterfallEntry]) -> Dict[str, WaterfallSummary]:
    """
    Response summary per group, groups sorted by name.

    The median is the element at index n // 2 of the sorted responses and
    the SD uses the population denominator n.
    """
    by_group: Dict[str, List[float]] = {}
    for entry in entries:
        by_group.setdefault(entry.group, []).append(entry.percent_change)

    summaries = {}
    for group in sorted(by_group):
        responses = np.sort(np.asarray(by_group[group], dtype=np.float64))
        summaries[group] = WaterfallSummary(
            group=group,
            n=len(responses),
            mean=float(np.mean(responses)),
            median=float(responses[len(responses) // 2]),
            sd=float(np.std(responses)),
            min=float(responses[0]),
            max=float(responses[-1])
        )
    return summaries
