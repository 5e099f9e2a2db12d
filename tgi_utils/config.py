"""
Configuration management for reproducible TGI analyses.

This module provides:
- Dataclass-based configuration with validation
- Column alias tables for spreadsheet ingestion
- Seed management for reproducible bootstrap intervals
- YAML loading/saving support
- Analysis metadata tracking

Usage:
    >>> config = AnalysisConfig.from_yaml("configs/study.yaml")
    >>> set_all_seeds(config.seed)
    >>> # Run analyses...
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Any, Tuple
from pathlib import Path
import json
import hashlib
from datetime import datetime
import platform
import random

import yaml
import numpy as np

from .distributions import P_VALUE_METHODS


# =============================================================================
# SEED MANAGEMENT
# =============================================================================

def set_all_seeds(seed: int) -> None:
    """
    Seed Python's random module and NumPy's legacy global generator.

    Nothing in tgi_utils draws from global random state: the bootstrap
    uses its own Generator seeded from AnalysisConfig.seed. The CLI calls
    this only so user code that relies on the global generators is
    reproducible too.

    Args:
        seed: Random seed value
    """
    random.seed(seed)
    np.random.seed(seed)


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================

@dataclass
class StatisticsConfig:
    """Statistical analysis settings."""
    confidence_level: float = 0.95
    alpha: float = 0.05
    bootstrap_iterations: int = 1000
    min_group_size: int = 3  # Matched animals per group for a TGI-over-time point
    t_ci_multiplier: float = 2.0
    p_value_method: str = "t_cdf"

    def __post_init__(self):
        if self.p_value_method not in P_VALUE_METHODS:
            raise ValueError(f"Invalid p_value_method: {self.p_value_method}. Must be one of {P_VALUE_METHODS}")
        if not 0 < self.confidence_level < 1:
            raise ValueError(f"confidence_level must be in (0, 1), got {self.confidence_level}")
        if not 0 < self.alpha < 1:
            raise ValueError(f"alpha must be in (0, 1), got {self.alpha}")
        if self.bootstrap_iterations < 1:
            raise ValueError(f"bootstrap_iterations must be >= 1, got {self.bootstrap_iterations}")
        if self.min_group_size < 1:
            raise ValueError(f"min_group_size must be >= 1, got {self.min_group_size}")


@dataclass
class ColumnConfig:
    """
    Case-sensitive column aliases, in priority order.

    Any column outside the id/day/date aliases becomes a measurement
    parameter.
    """
    animal_id: Tuple[str, ...] = ("Animal_ID", "AnimalID", "animalId")
    study_day: Tuple[str, ...] = ("Study_Day", "Day", "studyDay")
    date: Tuple[str, ...] = ("Date", "Measurement_Date")
    group: Tuple[str, ...] = ("Group", "Treatment_Group")
    strain: Tuple[str, ...] = ("Strain",)
    sex: Tuple[str, ...] = ("Sex",)
    tumor_volume: Tuple[str, ...] = ("Volume", "TumorVolume", "Tumor_Volume", "volume", "tumor_volume")

    def __post_init__(self):
        for name in ('animal_id', 'study_day', 'date', 'group', 'strain', 'sex', 'tumor_volume'):
            value = getattr(self, name)
            if isinstance(value, str):
                value = (value,)
            value = tuple(value)
            if not value:
                raise ValueError(f"{name} needs at least one column alias")
            setattr(self, name, value)

    @property
    def reserved(self) -> Tuple[str, ...]:
        """Columns that never become measurement parameters."""
        return self.animal_id + self.study_day + self.date


@dataclass
class AnalysisConfig:
    """
    Master configuration for a TGI analysis run.

    Combines study-level choices with the statistics and column settings.
    Supports YAML serialization and hash-based integrity checking.

    Example:
        >>> config = AnalysisConfig(name="study_042", control_group="Vehicle")
        >>> config.save("configs/study_042.yaml")
        >>>
        >>> # Later...
        >>> config = AnalysisConfig.from_yaml("configs/study_042.yaml")
    """
    name: str = "tgi_analysis"
    seed: Optional[int] = 42
    control_group: Optional[str] = None
    group_field: str = "group"
    parameter: Optional[str] = None  # None = detect tumor volume column
    baseline_day: Optional[int] = None  # None = earliest study day
    endpoint_day: Optional[int] = None  # None = last study day
    output_dir: str = "Results"

    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
    columns: ColumnConfig = field(default_factory=ColumnConfig)

    def __post_init__(self):
        if isinstance(self.statistics, dict):
            self.statistics = StatisticsConfig(**self.statistics)
        if isinstance(self.columns, dict):
            self.columns = ColumnConfig(**self.columns)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary."""
        def convert_tuples(obj):
            """Recursively convert tuples to lists for YAML compatibility."""
            if isinstance(obj, dict):
                return {k: convert_tuples(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [convert_tuples(item) for item in obj]
            return obj

        return convert_tuples({
            'name': self.name,
            'seed': self.seed,
            'control_group': self.control_group,
            'group_field': self.group_field,
            'parameter': self.parameter,
            'baseline_day': self.baseline_day,
            'endpoint_day': self.endpoint_day,
            'output_dir': self.output_dir,
            'statistics': asdict(self.statistics),
            'columns': asdict(self.columns),
        })

    def save(self, path: str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, path: str) -> 'AnalysisConfig':
        """Load configuration from YAML file."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisConfig':
        return cls(**data)

    def get_hash(self) -> str:
        """
        Compute deterministic hash of configuration.

        Useful for detecting configuration changes between runs.
        """
        config_str = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    def get_run_id(self) -> str:
        """Generate unique run ID based on config hash and timestamp."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{self.name}_{timestamp}_{self.get_hash()[:8]}"


# =============================================================================
# ANALYSIS METADATA
# =============================================================================

def get_system_info() -> Dict[str, Any]:
    """Get interpreter and library versions for reproducibility records."""
    return {
        'timestamp': datetime.now().isoformat(),
        'python_version': platform.python_version(),
        'platform': platform.platform(),
        'numpy_version': np.__version__,
        'yaml_version': yaml.__version__,
    }


def save_analysis_metadata(
    config: AnalysisConfig,
    output_dir: str,
    extra_info: Optional[Dict] = None
) -> str:
    """
    Save configuration, its hash and system info next to the results.

    Args:
        config: Analysis configuration
        output_dir: Directory to save metadata
        extra_info: Optional additional information

    Returns:
        Path to saved metadata file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    metadata = {
        'config': config.to_dict(),
        'config_hash': config.get_hash(),
        'system': get_system_info(),
    }

    if extra_info:
        metadata['extra'] = extra_info

    path = output_dir / f"analysis_metadata_{config.get_run_id()}.json"

    with open(path, 'w') as f:
        json.dump(metadata, f, indent=2, default=str)

    return str(path)


# =============================================================================
# DEFAULT CONFIGURATIONS
# =============================================================================

def get_default_config() -> AnalysisConfig:
    """Get default analysis configuration."""
    return AnalysisConfig()


def get_quick_test_config() -> AnalysisConfig:
    """Get minimal configuration for quick testing."""
    return AnalysisConfig(
        name="quick_test",
        statistics=StatisticsConfig(bootstrap_iterations=100),
    )
