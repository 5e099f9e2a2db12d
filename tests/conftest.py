"""
Pytest fixtures and configuration for TGI Utilities tests.

Provides:
- Seed management for reproducibility
- Raw spreadsheet-style study rows
- Consolidated animal fixtures
- Sample arrays for statistical tests
"""

import pytest
import numpy as np
import random
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# SEED MANAGEMENT
# =============================================================================

@pytest.fixture(autouse=True)
def set_random_seeds():
    """Set random seeds before each test for reproducibility."""
    seed = 42
    random.seed(seed)
    np.random.seed(seed)
    yield


@pytest.fixture
def rng():
    """Seeded numpy Generator for bootstrap calls."""
    return np.random.default_rng(42)


# =============================================================================
# STUDY FIXTURES
# =============================================================================

DAYS = (0, 7, 14, 21)

STUDY_VOLUMES = {
    # animal: (group, volumes at DAYS, None = not measured)
    'V1': ('Vehicle', (100, 150, 220, 300)),
    'V2': ('Vehicle', (120, 170, 260, 360)),
    'V3': ('Vehicle', (80, 130, 190, 250)),
    'V4': ('Vehicle', (100, 160, 230, 310)),
    'A1': ('Compound A', (100, 110, 120, 130)),
    'A2': ('Compound A', (110, 115, 125, 140)),
    'A3': ('Compound A', (90, 100, 105, 120)),
    'A4': ('Compound A', (100, 105, None, 125)),
    'B1': ('Compound B', (100, 140, 200, 260)),
    'B2': ('Compound B', (100, 130, 180, 240)),
}


def make_study_rows(volumes=None):
    """Flat rows, one per animal x day, the way a spreadsheet export looks."""
    volumes = volumes or STUDY_VOLUMES
    rows = []
    for animal_id, (group, series) in volumes.items():
        for day, volume in zip(DAYS, series):
            if volume is None:
                continue
            rows.append({
                'Animal_ID': animal_id,
                'Group': group,
                'Strain': 'BALB/c',
                'Sex': 'F',
                'Study_Day': day,
                'Volume': volume,
                'Body_Weight': 20.0 + day / 7,
            })
    return rows


@pytest.fixture
def study_rows():
    return make_study_rows()


@pytest.fixture
def study_animals(study_rows):
    from tgi_utils.consolidation import consolidate
    return consolidate(study_rows)


@pytest.fixture
def make_animal():
    """Factory for an AnimalRecord with one parameter series."""
    from tgi_utils.consolidation import AnimalRecord, Measurement

    def _make(animal_id, days_and_values, group=None, parameter='Volume'):
        measurements = [
            Measurement(study_day=day, parameters={parameter: float(value)})
            for day, value in days_and_values
        ]
        return AnimalRecord(animal_id=animal_id, group=group, measurements=measurements)

    return _make


# =============================================================================
# STATISTICAL DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_data():
    """Generate sample data for statistical tests."""
    return np.random.randn(100)


@pytest.fixture
def two_groups():
    """Two independent samples with a clear mean difference."""
    group1 = np.random.normal(10.0, 2.0, size=12)
    group2 = np.random.normal(7.0, 3.0, size=9)
    return group1, group2


@pytest.fixture
def volume_groups():
    """Control and treatment endpoint volumes (simple-ratio TGI = 50%)."""
    control = np.array([1000.0, 1100.0, 900.0, 1050.0, 950.0])
    treatment = np.array([500.0, 550.0, 450.0, 520.0, 480.0])
    return control, treatment


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def assert_array_close(a: np.ndarray, b: np.ndarray, rtol: float = 1e-5, atol: float = 1e-8):
    """Assert two arrays are close."""
    np.testing.assert_allclose(a, b, rtol=rtol, atol=atol)
