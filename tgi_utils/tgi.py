"""
Tumor Growth Inhibition (TGI) calculators.

Two TGI formulas, one per analysis mode:

Growth-rate TGI (time course, PMID:32277094):
    Each animal's growth rate g = V_t / V_0 - 1 is computed from its own
    baseline. TGI = (1 - mean(g_treatment) / mean(g_control)) * 100, with
    the SEM propagated from both groups' growth-rate SEMs and Welch's
    t-test run on the growth rates.

Simple-ratio TGI (single endpoint / group comparison):
    TGI = (mean(control) - mean(treatment)) / mean(control) * 100 on raw
    volumes, accompanied by Welch's t-test, Mann-Whitney U, Cohen's d and
    a bootstrap CI, and classified into efficacy and magnitude categories.

Non-positive control growth yields TGI = 0 and SEM = 0 instead of a
division by zero. No function in this module raises on degenerate
statistics; check ``n`` and NaN before display.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .bootstrap import BootstrapCI, bootstrap_tgi_confidence_interval, get_rng
from .config import StatisticsConfig
from .consolidation import AnimalRecord
from .descriptive import ArrayLike, DescriptiveStats, _as_array, describe, mean, standard_deviation, standard_error
from .extraction import (
    TimepointSample,
    extract_timepoint_values,
    group_animals,
    match_timepoint_samples,
    study_days,
    default_baseline_day,
)
from .hypothesis import MannWhitneyResult, TTestResult, cohens_d, mann_whitney_u, welch_t_test


# =============================================================================
# DATA CLASSES FOR RESULTS
# =============================================================================

@dataclass(frozen=True)
class TGIStatistics:
    """Growth-rate TGI for one (treatment, control, timepoint) triple. Growth values are in percent."""
    tgi: float
    tgi_sem: float
    p_value: float
    significance: str
    n: int
    treatment_growth: float
    control_growth: float
    treatment_growth_sem: float
    control_growth_sem: float

    def __repr__(self) -> str:
        return f"TGI={self.tgi:.1f} ± {self.tgi_sem:.1f}% (p={self.p_value:.4f} {self.significance}, n={self.n})"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TGIPoint:
    """One emitted point of a TGI-over-time curve."""
    group: str
    study_day: int
    statistics: TGIStatistics
    n_control: int

    def to_dict(self) -> Dict[str, Any]:
        row = {'group': self.group, 'study_day': self.study_day, 'n_control': self.n_control}
        row.update(self.statistics.to_dict())
        return row


@dataclass(frozen=True)
class TGIInterpretation:
    efficacy: str
    tgi_category: str
    statistical_significance: str


@dataclass(frozen=True)
class TGIAnalysis:
    """Simple-ratio TGI analysis of one treatment group at one timepoint."""
    treatment_name: str
    n_control: int
    n_treatment: int
    control_mean: float
    control_sd: float
    treatment_mean: float
    treatment_sd: float
    tgi: float
    tgi_ci: BootstrapCI
    t_test: TTestResult
    mann_whitney: MannWhitneyResult
    cohens_d: float
    interpretation: TGIInterpretation

    def __repr__(self) -> str:
        return (f"{self.treatment_name}: TGI={self.tgi:.1f}% {self.tgi_ci!r}, "
                f"p={self.t_test.p_value:.4f}, d={self.cohens_d:.2f} ({self.interpretation.efficacy})")

    def to_row(self) -> Dict[str, Any]:
        """Flat dict for tabular export."""
        return {
            'treatment': self.treatment_name,
            'n_control': self.n_control,
            'n_treatment': self.n_treatment,
            'control_mean': self.control_mean,
            'control_sd': self.control_sd,
            'treatment_mean': self.treatment_mean,
            'treatment_sd': self.treatment_sd,
            'tgi': self.tgi,
            'tgi_ci_lower': self.tgi_ci.lower,
            'tgi_ci_upper': self.tgi_ci.upper,
            't_statistic': self.t_test.t_statistic,
            't_df': self.t_test.degrees_of_freedom,
            't_p_value': self.t_test.p_value,
            'u_statistic': self.mann_whitney.u_statistic,
            'u_p_value': self.mann_whitney.p_value,
            'cohens_d': self.cohens_d,
            'efficacy': self.interpretation.efficacy,
            'tgi_category': self.interpretation.tgi_category,
            'statistical_significance': self.interpretation.statistical_significance,
        }


@dataclass(frozen=True)
class TimepointAnalysis:
    study_day: int
    control_stats: DescriptiveStats
    treatments: List[TGIAnalysis]


@dataclass(frozen=True)
class LongitudinalSummary:
    """Per-treatment summary across the analysed timepoints."""
    treatment_name: str
    timepoints_analysed: int
    final_day: Optional[int]
    final_tgi: Optional[float]
    best_day: Optional[int]
    best_tgi: Optional[float]
    first_significant_day: Optional[int]


@dataclass(frozen=True)
class AdvancedTGIResult:
    timepoints: List[TimepointAnalysis]
    overall_analysis: Dict[str, LongitudinalSummary]

    def endpoint(self, study_day: int) -> Optional[TimepointAnalysis]:
        """Analysis at one study day, if it was analysed."""
        return next((tp for tp in self.timepoints if tp.study_day == study_day), None)


# =============================================================================
# GROWTH-RATE TGI
# =============================================================================

def significance_label(p_value: float) -> str:
    """Star notation: *** p<0.001, ** p<0.01, * p<0.05, else 'ns'."""
    if p_value < 0.001:
        return '***'
    if p_value < 0.01:
        return '**'
    if p_value < 0.05:
        return '*'
    return 'ns'


def growth_rates(volumes: ArrayLike, baselines: ArrayLike) -> NDArray[np.float64]:
    """Per-animal growth rate V / V0 - 1."""
    volumes = _as_array(volumes)
    baselines = _as_array(baselines)
    if len(volumes) != len(baselines):
        raise ValueError(f"volumes and baselines must have same length: {len(volumes)} vs {len(baselines)}")
    with np.errstate(divide='ignore', invalid='ignore'):
        return volumes / baselines - 1


def calculate_tgi(
    treatment_volumes: ArrayLike,
    control_volumes: ArrayLike,
    treatment_baselines: ArrayLike,
    control_baselines: ArrayLike,
    config: Optional[StatisticsConfig] = None
) -> TGIStatistics:
    """
    Growth-rate TGI with propagated SEM and Welch's t-test.

    Args:
        treatment_volumes: Treatment volumes at the target day
        control_volumes: Control volumes at the target day
        treatment_baselines: Treatment baselines, aligned with volumes
        control_baselines: Control baselines, aligned with volumes
        config: Statistics settings (alpha, p-value method)

    Returns:
        TGIStatistics; growth values and their SEMs are in percent and
        ``n`` is the treatment sample size

    Example:
        >>> calculate_tgi([150, 150, 150], [200, 200, 200], [100, 100, 100], [100, 100, 100]).tgi
        50.0
    """
    config = config or StatisticsConfig()

    treatment_growth_rates = growth_rates(treatment_volumes, treatment_baselines)
    control_growth_rates = growth_rates(control_volumes, control_baselines)

    treatment_growth = np.float64(mean(treatment_growth_rates))
    control_growth = np.float64(mean(control_growth_rates))

    treatment_sem = np.float64(standard_error(treatment_growth_rates))
    control_sem = np.float64(standard_error(control_growth_rates))

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        if control_growth > 0:
            tgi = (1 - treatment_growth / control_growth) * 100
            tgi_sem = (100 / control_growth) * np.sqrt(
                treatment_sem ** 2 + (treatment_growth ** 2 / control_growth ** 2) * control_sem ** 2
            )
        else:
            tgi = 0.0
            tgi_sem = 0.0

    t_test = welch_t_test(
        treatment_growth_rates,
        control_growth_rates,
        alpha=config.alpha,
        ci_multiplier=config.t_ci_multiplier,
        p_value_method=config.p_value_method
    )

    return TGIStatistics(
        tgi=float(tgi),
        tgi_sem=float(tgi_sem),
        p_value=t_test.p_value,
        significance=significance_label(t_test.p_value),
        n=len(treatment_growth_rates),
        treatment_growth=float(treatment_growth * 100),
        control_growth=float(control_growth * 100),
        treatment_growth_sem=float(treatment_sem * 100),
        control_growth_sem=float(control_sem * 100)
    )


def calculate_tgi_at_timepoint(
    treatment_samples: Sequence[TimepointSample],
    control_samples: Sequence[TimepointSample],
    config: Optional[StatisticsConfig] = None
) -> TGIStatistics:
    """Growth-rate TGI from matched baseline/volume samples."""
    return calculate_tgi(
        [s.volume for s in treatment_samples],
        [s.volume for s in control_samples],
        [s.baseline for s in treatment_samples],
        [s.baseline for s in control_samples],
        config=config
    )


def tgi_over_time(
    animals: Iterable[AnimalRecord],
    control_group: str,
    parameter: str,
    group_field: str = 'group',
    baseline_day: Optional[int] = None,
    min_group_size: Optional[int] = None,
    config: Optional[StatisticsConfig] = None
) -> Dict[str, List[TGIPoint]]:
    """
    Growth-rate TGI of every treatment group against the control, per day.

    Every study day with a ``parameter`` value is tried. Baseline and target
    values are exact-day matches. A point is emitted only when both the
    control and the treatment group have at least ``min_group_size``
    matched animals on that day.

    Args:
        animals: Consolidated animals
        control_group: Label of the control group
        parameter: Measurement parameter holding tumor volume
        group_field: Partition field (see extraction.get_group_label)
        baseline_day: Baseline study day (default: earliest day with a ``parameter`` value)
        min_group_size: Overrides config.min_group_size
        config: Statistics settings

    Returns:
        Dict mapping each treatment group (sorted) to its points in day order
    """
    config = config or StatisticsConfig()
    min_group_size = config.min_group_size if min_group_size is None else min_group_size

    animals = list(animals)
    groups = group_animals(animals, group_field)
    days = study_days(animals, parameter)
    if baseline_day is None:
        baseline_day = default_baseline_day(animals, parameter)

    control_animals = groups.get(control_group, [])
    results: Dict[str, List[TGIPoint]] = {}

    for group in sorted(groups):
        if group == control_group:
            continue
        points = []
        for day in days:
            control_samples = match_timepoint_samples(control_animals, day, parameter, baseline_day=baseline_day)
            treatment_samples = match_timepoint_samples(groups[group], day, parameter, baseline_day=baseline_day)
            if len(control_samples) < min_group_size or len(treatment_samples) < min_group_size:
                continue
            stats = calculate_tgi_at_timepoint(treatment_samples, control_samples, config=config)
            points.append(TGIPoint(
                group=group,
                study_day=day,
                statistics=stats,
                n_control=len(control_samples)
            ))
        results[group] = points

    return results


# =============================================================================
# SIMPLE-RATIO TGI
# =============================================================================

def simple_ratio_tgi(control_mean: float, treatment_mean: float) -> float:
    """(control - treatment) / control * 100 on group means."""
    with np.errstate(divide='ignore', invalid='ignore'):
        return float((np.float64(control_mean) - treatment_mean) / np.float64(control_mean) * 100)


def categorize_tgi(tgi: float) -> str:
    if tgi >= 100:
        return 'Tumor regression'
    if tgi >= 50:
        return 'High inhibition'
    if tgi >= 30:
        return 'Moderate inhibition'
    if tgi >= 10:
        return 'Low inhibition'
    if tgi >= 0:
        return 'Minimal inhibition'
    return 'Tumor acceleration'


def interpret_tgi(tgi: float, p_value: float, alpha: float = 0.05) -> TGIInterpretation:
    """
    Classify efficacy (TGI threshold AND p < alpha) and magnitude.

    Efficacy:
        TGI > 50: Highly effective
        TGI > 30: Moderately effective
        TGI > 10: Minimally effective
        otherwise or not significant: No effect
    """
    significant = p_value < alpha
    efficacy = 'No effect'
    if tgi > 50 and significant:
        efficacy = 'Highly effective'
    elif tgi > 30 and significant:
        efficacy = 'Moderately effective'
    elif tgi > 10 and significant:
        efficacy = 'Minimally effective'

    return TGIInterpretation(
        efficacy=efficacy,
        tgi_category=categorize_tgi(tgi),
        statistical_significance='Significant' if significant else 'Not significant'
    )


def perform_tgi_analysis(
    control: ArrayLike,
    treatment: ArrayLike,
    treatment_name: str,
    config: Optional[StatisticsConfig] = None,
    rng: Optional[np.random.Generator] = None
) -> TGIAnalysis:
    """
    Simple-ratio TGI of raw volumes with the full test battery.

    Welch's t-test and Mann-Whitney U are run with the control group
    first, so a positive t means control volumes are larger. Cohen's d
    follows the same orientation.
    """
    config = config or StatisticsConfig()
    control = _as_array(control)
    treatment = _as_array(treatment)

    control_mean = mean(control)
    treatment_mean = mean(treatment)
    tgi = simple_ratio_tgi(control_mean, treatment_mean)

    t_test = welch_t_test(
        control,
        treatment,
        alpha=config.alpha,
        ci_multiplier=config.t_ci_multiplier,
        p_value_method=config.p_value_method
    )
    mann_whitney = mann_whitney_u(control, treatment, alpha=config.alpha)
    tgi_ci = bootstrap_tgi_confidence_interval(
        control,
        treatment,
        n_bootstrap=config.bootstrap_iterations,
        confidence=config.confidence_level,
        rng=rng
    )

    return TGIAnalysis(
        treatment_name=treatment_name,
        n_control=len(control),
        n_treatment=len(treatment),
        control_mean=control_mean,
        control_sd=standard_deviation(control),
        treatment_mean=treatment_mean,
        treatment_sd=standard_deviation(treatment),
        tgi=tgi,
        tgi_ci=tgi_ci,
        t_test=t_test,
        mann_whitney=mann_whitney,
        cohens_d=cohens_d(control, treatment),
        interpretation=interpret_tgi(tgi, t_test.p_value, alpha=config.alpha)
    )


def _summarize_longitudinal(
    treatment_name: str,
    analyses: List[TimepointAnalysis],
    alpha: float
) -> LongitudinalSummary:
    series = [
        (tp.study_day, t)
        for tp in analyses
        for t in tp.treatments
        if t.treatment_name == treatment_name
    ]
    if not series:
        return LongitudinalSummary(treatment_name, 0, None, None, None, None, None)

    final_day, final = series[-1]
    finite = [(day, t) for day, t in series if np.isfinite(t.tgi)]
    best_day, best = max(finite, key=lambda item: item[1].tgi) if finite else (None, None)
    first_significant = next((day for day, t in series if t.t_test.p_value < alpha), None)

    return LongitudinalSummary(
        treatment_name=treatment_name,
        timepoints_analysed=len(series),
        final_day=final_day,
        final_tgi=final.tgi,
        best_day=best_day,
        best_tgi=best.tgi if best is not None else None,
        first_significant_day=first_significant
    )


def calculate_advanced_tgi(
    control_animals: Sequence[AnimalRecord],
    treatment_groups: Mapping[str, Sequence[AnimalRecord]],
    timepoints: Iterable[int],
    parameter: str,
    config: Optional[StatisticsConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None
) -> AdvancedTGIResult:
    """
    Simple-ratio TGI analysis of every treatment group at every timepoint.

    Raw values are taken at exact study days. A treatment is analysed at a
    timepoint when both it and the control have at least one value there.

    Args:
        control_animals: Control group animals
        treatment_groups: Treatment name -> animals
        timepoints: Study days to analyse
        parameter: Measurement parameter holding tumor volume
        config: Statistics settings
        rng: Random source for the bootstrap CIs
        seed: Seed for a fresh random source when ``rng`` is not given

    Returns:
        AdvancedTGIResult with per-timepoint analyses and a per-treatment
        longitudinal summary
    """
    config = config or StatisticsConfig()
    rng = get_rng(rng, seed)

    analyses = []
    for day in timepoints:
        control_data = extract_timepoint_values(control_animals, day, parameter)
        treatments = []
        for name, animals in treatment_groups.items():
            treatment_data = extract_timepoint_values(animals, day, parameter)
            if control_data and treatment_data:
                treatments.append(perform_tgi_analysis(control_data, treatment_data, name, config=config, rng=rng))
        analyses.append(TimepointAnalysis(
            study_day=day,
            control_stats=describe(control_data),
            treatments=treatments
        ))

    overall = {
        name: _summarize_longitudinal(name, analyses, config.alpha)
        for name in treatment_groups
    }
    return AdvancedTGIResult(timepoints=analyses, overall_analysis=overall)


# =============================================================================
# REPORTING
# =============================================================================

def format_p_value(p_value: float) -> str:
    return '<0.001' if p_value < 0.001 else f"{p_value:.3f}"


def format_tgi_table(points: Sequence[TGIPoint], precision: int = 1) -> str:
    """
    Format a TGI-over-time series as a markdown table.

    Args:
        points: Points of one treatment group
        precision: Decimal places for percentages

    Returns:
        Markdown table string
    """
    lines = ["| Study Day | TGI (%) | SEM | n | p-value | Significance | Treatment Growth (%) | Control Growth (%) |",
             "|-----------|---------|-----|---|---------|--------------|----------------------|--------------------|"]

    for point in sorted(points, key=lambda p: p.study_day):
        s = point.statistics
        treatment = f"{s.treatment_growth:.{precision}f} ± {s.treatment_growth_sem:.{precision}f}"
        control = f"{s.control_growth:.{precision}f} ± {s.control_growth_sem:.{precision}f}"
        lines.append(
            f"| {point.study_day} | {s.tgi:.{precision}f} | {s.tgi_sem:.{precision}f} | {s.n} | "
            f"{format_p_value(s.p_value)} | {s.significance} | {treatment} | {control} |"
        )

    return "\n".join(lines)
