"""
TGI Utilities

A package for computing tumor growth inhibition (TGI) and related
efficacy statistics from longitudinal preclinical animal studies.

Modules:
    consolidation: Fold flat spreadsheet rows into per-animal time series
    extraction: Group partitioning, timepoint matching, baseline selection
    descriptive: Mean, variance, SD, SEM
    distributions: erf, normal CDF, gamma/beta and t-distribution approximations
    hypothesis: Welch's t-test, Mann-Whitney U, Cohen's d
    bootstrap: Percentile bootstrap CI for the simple-ratio TGI
    tgi: Growth-rate and simple-ratio TGI calculators
    waterfall: Per-animal waterfall responses
    colors: Group color assignment
    config: Configuration management and reproducibility

Example:
    >>> from tgi_utils import consolidate, tgi_over_time, detect_tumor_volume_column
    >>>
    >>> animals = consolidate(rows)
    >>> volume_column = detect_tumor_volume_column(rows)
    >>> curves = tgi_over_time(animals, control_group="Vehicle", parameter=volume_column)
    >>> for point in curves["Compound A"]:
    ...     print(point.study_day, point.statistics)
"""

__version__ = "0.1.0"

# Data consolidation
from .consolidation import (
    AnimalDataConsolidator,
    AnimalRecord,
    Measurement,
    consolidate,
)

# Timepoint and group extraction
from .extraction import (
    TimepointSample,
    get_group_label,
    group_animals,
    available_groups,
    available_group_fields,
    study_days,
    default_baseline_day,
    find_measurement,
    extract_timepoint_values,
    match_timepoint_samples,
    detect_tumor_volume_column,
)

# Descriptive statistics
from .descriptive import (
    mean,
    variance,
    standard_deviation,
    standard_error,
    describe,
    DescriptiveStats,
)

# Distribution approximations
from .distributions import (
    erf,
    normal_cdf,
    gamma,
    beta,
    incomplete_beta,
    t_cdf,
    t_two_sided_p_value,
    t_distribution_p_value,
    two_sided_p_value,
)

# Hypothesis tests
from .hypothesis import (
    welch_t_test,
    mann_whitney_u,
    rank_with_ties,
    cohens_d,
    TTestResult,
    MannWhitneyResult,
)

# Bootstrap
from .bootstrap import (
    bootstrap_tgi_confidence_interval,
    resample,
    BootstrapCI,
)

# TGI calculators
from .tgi import (
    calculate_tgi,
    calculate_tgi_at_timepoint,
    growth_rates,
    significance_label,
    tgi_over_time,
    simple_ratio_tgi,
    perform_tgi_analysis,
    interpret_tgi,
    categorize_tgi,
    calculate_advanced_tgi,
    format_p_value,
    format_tgi_table,
    TGIStatistics,
    TGIPoint,
    TGIAnalysis,
    TGIInterpretation,
    TimepointAnalysis,
    LongitudinalSummary,
    AdvancedTGIResult,
)

# Waterfall analysis
from .waterfall import (
    waterfall_analysis,
    summarize_waterfall,
    WaterfallEntry,
    WaterfallSummary,
)

from .colors import GroupColorAssigner, DEFAULT_PALETTE

# Configuration and reproducibility
from .config import (
    AnalysisConfig,
    StatisticsConfig,
    ColumnConfig,
    set_all_seeds,
    get_system_info,
    save_analysis_metadata,
    get_default_config,
    get_quick_test_config,
)

__all__ = [
    # Version
    "__version__",

    # Consolidation
    "AnimalDataConsolidator",
    "AnimalRecord",
    "Measurement",
    "consolidate",

    # Extraction
    "TimepointSample",
    "get_group_label",
    "group_animals",
    "available_groups",
    "available_group_fields",
    "study_days",
    "default_baseline_day",
    "find_measurement",
    "extract_timepoint_values",
    "match_timepoint_samples",
    "detect_tumor_volume_column",

    # Descriptive statistics
    "mean",
    "variance",
    "standard_deviation",
    "standard_error",
    "describe",
    "DescriptiveStats",

    # Distributions
    "erf",
    "normal_cdf",
    "gamma",
    "beta",
    "incomplete_beta",
    "t_cdf",
    "t_two_sided_p_value",
    "t_distribution_p_value",
    "two_sided_p_value",

    # Hypothesis tests
    "welch_t_test",
    "mann_whitney_u",
    "rank_with_ties",
    "cohens_d",
    "TTestResult",
    "MannWhitneyResult",

    # Bootstrap
    "bootstrap_tgi_confidence_interval",
    "resample",
    "BootstrapCI",

    # TGI
    "calculate_tgi",
    "calculate_tgi_at_timepoint",
    "growth_rates",
    "significance_label",
    "tgi_over_time",
    "simple_ratio_tgi",
    "perform_tgi_analysis",
    "interpret_tgi",
    "categorize_tgi",
    "calculate_advanced_tgi",
    "format_p_value",
    "format_tgi_table",
    "TGIStatistics",
    "TGIPoint",
    "TGIAnalysis",
    "TGIInterpretation",
    "TimepointAnalysis",
    "LongitudinalSummary",
    "AdvancedTGIResult",

    # Waterfall
    "waterfall_analysis",
    "summarize_waterfall",
    "WaterfallEntry",
    "WaterfallSummary",

    # Colors
    "GroupColorAssigner",
    "DEFAULT_PALETTE",

    # Configuration
    "AnalysisConfig",
    "StatisticsConfig",
    "ColumnConfig",
    "set_all_seeds",
    "get_system_info",
    "save_analysis_metadata",
    "get_default_config",
    "get_quick_test_config",
]
