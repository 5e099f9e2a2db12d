"""
Tests for tgi_utils/extraction.py

Tests group partitioning and timepoint extraction including:
- Group labels from metadata and string parameters
- Exact and nearest-day measurement lookup
- Baseline/target matching
- Tumor-volume column detection
"""

import pytest


class TestGroups:
    """Tests for partitioning animals into groups."""

    def test_group_animals(self, study_animals):
        from tgi_utils.extraction import group_animals

        groups = group_animals(study_animals)

        assert set(groups) == {'Vehicle', 'Compound A', 'Compound B'}
        assert [a.animal_id for a in groups['Vehicle']] == ['V1', 'V2', 'V3', 'V4']

    def test_available_groups_sorted(self, study_animals):
        from tgi_utils.extraction import available_groups

        assert available_groups(study_animals) == ['Compound A', 'Compound B', 'Vehicle']

    def test_metadata_field(self, study_animals):
        from tgi_utils.extraction import available_groups

        assert available_groups(study_animals, 'sex') == ['F']

    def test_parameter_field(self):
        from tgi_utils.consolidation import consolidate
        from tgi_utils.extraction import group_animals

        rows = [
            {'Animal_ID': 'M1', 'Study_Day': 0, 'Dose': 'high'},
            {'Animal_ID': 'M2', 'Study_Day': 0, 'Dose': 'low'},
            {'Animal_ID': 'M3', 'Study_Day': 0, 'Dose': 'high'},
            {'Animal_ID': 'M4', 'Study_Day': 0, 'Dose': 5},
        ]
        groups = group_animals(consolidate(rows), 'Dose')

        assert {k: [a.animal_id for a in v] for k, v in groups.items()} == {'high': ['M1', 'M3'], 'low': ['M2']}

    def test_unlabeled_animals_left_out(self, make_animal):
        from tgi_utils.extraction import group_animals

        animals = [make_animal('M1', [(0, 100)], group='Vehicle'), make_animal('M2', [(0, 100)])]

        assert list(group_animals(animals)) == ['Vehicle']

    def test_available_group_fields(self, study_rows):
        from tgi_utils.extraction import available_group_fields

        assert available_group_fields(study_rows) == ['Group', 'Sex', 'Strain']


class TestStudyDays:
    """Tests for dataset day helpers."""

    def test_study_days(self, study_animals):
        from tgi_utils.extraction import study_days

        assert study_days(study_animals) == [0, 7, 14, 21]

    def test_default_baseline_day(self, study_animals):
        from tgi_utils.extraction import default_baseline_day

        assert default_baseline_day(study_animals) == 0
        assert default_baseline_day([]) is None

    def test_days_restricted_to_parameter(self):
        """Days with no value for the parameter do not count as study days for it."""
        from tgi_utils.consolidation import consolidate
        from tgi_utils.extraction import default_baseline_day, study_days

        rows = [
            {'Animal_ID': 'M1', 'Study_Day': -3, 'Body_Weight': 20.0},
            {'Animal_ID': 'M1', 'Study_Day': 0, 'Volume': 100, 'Body_Weight': 20.5},
            {'Animal_ID': 'M1', 'Study_Day': 7, 'Volume': 150},
            {'Animal_ID': 'M1', 'Study_Day': 10, 'Volume': 'n/a'},
        ]
        animals = consolidate(rows)

        assert study_days(animals) == [-3, 0, 7, 10]
        assert study_days(animals, 'Volume') == [0, 7]
        assert default_baseline_day(animals) == -3
        assert default_baseline_day(animals, 'Volume') == 0
        assert default_baseline_day(animals, 'Tumor_Volume') is None

    def test_match_default_baseline_uses_parameter_days(self):
        from tgi_utils.consolidation import consolidate
        from tgi_utils.extraction import match_timepoint_samples

        rows = [
            {'Animal_ID': 'M1', 'Study_Day': -3, 'Body_Weight': 20.0},
            {'Animal_ID': 'M1', 'Study_Day': 0, 'Volume': 100},
            {'Animal_ID': 'M1', 'Study_Day': 7, 'Volume': 150},
        ]
        samples = match_timepoint_samples(consolidate(rows), 7, 'Volume')

        assert len(samples) == 1
        assert samples[0].baseline == 100.0


class TestFindMeasurement:
    """Tests for exact and nearest-day lookup."""

    def test_exact(self, make_animal):
        from tgi_utils.extraction import find_measurement

        animal = make_animal('M1', [(0, 100), (7, 150), (14, 200)])

        assert find_measurement(animal, 7).study_day == 7

    def test_nearest_fallback(self, make_animal):
        from tgi_utils.extraction import find_measurement

        animal = make_animal('M1', [(0, 100), (7, 150), (14, 200)])

        assert find_measurement(animal, 10).study_day == 7
        assert find_measurement(animal, 12).study_day == 14
        assert find_measurement(animal, 30).study_day == 14

    def test_tie_keeps_earlier_day(self, make_animal):
        from tgi_utils.extraction import find_measurement

        animal = make_animal('M1', [(0, 100), (14, 200)])

        assert find_measurement(animal, 7).study_day == 0

    def test_exact_only(self, make_animal):
        from tgi_utils.extraction import find_measurement

        animal = make_animal('M1', [(0, 100), (7, 150)])

        assert find_measurement(animal, 10, nearest=False) is None

    def test_parameter_filter(self):
        """Days lacking the parameter are skipped for both exact and nearest lookup."""
        from tgi_utils.consolidation import AnimalRecord, Measurement
        from tgi_utils.extraction import find_measurement

        animal = AnimalRecord(animal_id='M1', measurements=[
            Measurement(study_day=0, parameters={'Volume': 100.0}),
            Measurement(study_day=7, parameters={'Body_Weight': 21.0}),
            Measurement(study_day=10, parameters={'Volume': 'n/a'}),
            Measurement(study_day=14, parameters={'Volume': 200.0}),
        ])

        assert find_measurement(animal, 7, parameter='Volume').study_day == 0
        assert find_measurement(animal, 10, parameter='Volume').study_day == 14
        assert find_measurement(animal, 7, nearest=False, parameter='Volume') is None

    def test_no_measurements(self, make_animal):
        from tgi_utils.extraction import find_measurement

        assert find_measurement(make_animal('M1', []), 7) is None


class TestTimepointValues:
    """Tests for per-day value extraction and matching."""

    def test_extract_exact_day(self, study_animals):
        from tgi_utils.extraction import extract_timepoint_values, group_animals

        compound_a = group_animals(study_animals)['Compound A']

        assert extract_timepoint_values(compound_a, 14, 'Volume') == [120.0, 125.0, 105.0]
        assert extract_timepoint_values(compound_a, 0, 'Volume') == [100.0, 110.0, 90.0, 100.0]
        assert extract_timepoint_values(compound_a, 10, 'Volume') == []

    def test_zero_volume_kept(self, make_animal):
        """A measured volume of 0 is a value, not a missing measurement."""
        from tgi_utils.extraction import extract_timepoint_values, match_timepoint_samples

        animals = [make_animal('M1', [(0, 100), (7, 0)]), make_animal('M2', [(0, 100), (7, 80)])]

        assert extract_timepoint_values(animals, 7, 'Volume') == [0.0, 80.0]
        assert [s.volume for s in match_timepoint_samples(animals, 7, 'Volume')] == [0.0, 80.0]

    def test_match_samples(self, study_animals):
        from tgi_utils.extraction import group_animals, match_timepoint_samples

        vehicle = group_animals(study_animals)['Vehicle']
        samples = match_timepoint_samples(vehicle, 7, 'Volume')

        assert [s.animal_id for s in samples] == ['V1', 'V2', 'V3', 'V4']
        assert samples[1].baseline == 120.0
        assert samples[1].volume == 170.0
        assert samples[1].study_day == 7

    def test_match_requires_both_values(self, study_animals):
        from tgi_utils.extraction import group_animals, match_timepoint_samples

        compound_a = group_animals(study_animals)['Compound A']
        samples = match_timepoint_samples(compound_a, 14, 'Volume')

        assert [s.animal_id for s in samples] == ['A1', 'A2', 'A3']

    def test_match_nearest_target(self, make_animal):
        from tgi_utils.extraction import match_timepoint_samples

        animal = make_animal('M1', [(0, 100), (6, 140), (13, 190)])
        exact = match_timepoint_samples([animal], 7, 'Volume')
        nearest = match_timepoint_samples([animal], 7, 'Volume', nearest=True)

        assert exact == []
        assert nearest[0].study_day == 6
        assert nearest[0].volume == 140.0

    def test_missing_baseline_excluded(self, make_animal):
        from tgi_utils.extraction import match_timepoint_samples

        animals = [make_animal('M1', [(0, 100), (7, 150)]), make_animal('M2', [(3, 90), (7, 130)])]

        assert [s.animal_id for s in match_timepoint_samples(animals, 7, 'Volume', baseline_day=0)] == ['M1']

    def test_no_animals(self):
        from tgi_utils.extraction import match_timepoint_samples

        assert match_timepoint_samples([], 7, 'Volume') == []


class TestDetectTumorVolumeColumn:
    """Tests for tumor-volume column detection."""

    def test_priority_order(self):
        from tgi_utils.extraction import detect_tumor_volume_column

        rows = [{'Tumor_Volume': 100, 'Volume': 120}]

        assert detect_tumor_volume_column(rows) == 'Volume'

    def test_skips_empty_columns(self):
        from tgi_utils.extraction import detect_tumor_volume_column

        rows = [{'Volume': None, 'TumorVolume': ''}, {'Volume': float('nan'), 'tumor_volume': 80}]

        assert detect_tumor_volume_column(rows) == 'tumor_volume'

    def test_column_names(self):
        from tgi_utils.extraction import detect_tumor_volume_column

        assert detect_tumor_volume_column(['Animal_ID', 'TumorVolume']) == 'TumorVolume'

    def test_not_found(self):
        from tgi_utils.extraction import detect_tumor_volume_column

        assert detect_tumor_volume_column([{'Body_Weight': 20}]) is None

    def test_custom_candidates(self):
        from tgi_utils.extraction import detect_tumor_volume_column

        assert detect_tumor_volume_column([{'TV_mm3': 50}], candidates=['TV_mm3']) == 'TV_mm3'
