"""
Tests for tgi_utils/hypothesis.py

Tests hypothesis tests including:
- Welch's t-test (symmetry, df, degenerate variances)
- Midrank tie handling and Mann-Whitney U
- Cohen's d
"""

import math

import pytest
import numpy as np
from scipy import stats


class TestWelchTTest:
    """Tests for Welch's t-test."""

    def test_statistic_matches_scipy(self, two_groups):
        """t-statistic should match scipy's unequal-variance t-test."""
        from tgi_utils.hypothesis import welch_t_test

        group1, group2 = two_groups
        result = welch_t_test(group1, group2)
        expected = stats.ttest_ind(group1, group2, equal_var=False)

        assert result.t_statistic == pytest.approx(expected.statistic, rel=1e-10)

    def test_welch_satterthwaite_df(self, two_groups):
        from tgi_utils.hypothesis import welch_t_test

        group1, group2 = two_groups
        a = np.var(group1, ddof=1) / len(group1)
        b = np.var(group2, ddof=1) / len(group2)
        expected_df = (a + b) ** 2 / (a ** 2 / (len(group1) - 1) + b ** 2 / (len(group2) - 1))

        assert welch_t_test(group1, group2).degrees_of_freedom == pytest.approx(expected_df)

    def test_symmetry(self, two_groups):
        """Swapping groups negates t and leaves p unchanged."""
        from tgi_utils.hypothesis import welch_t_test

        group1, group2 = two_groups
        forward = welch_t_test(group1, group2)
        backward = welch_t_test(group2, group1)

        assert forward.t_statistic == pytest.approx(-backward.t_statistic)
        assert forward.p_value == pytest.approx(backward.p_value)
        assert forward.degrees_of_freedom == pytest.approx(backward.degrees_of_freedom)

    def test_large_df_p_value_is_normal(self):
        """For df > 30 the p-value is the normal approximation."""
        from tgi_utils.hypothesis import welch_t_test

        group1 = np.random.normal(0.0, 1.0, size=50)
        group2 = np.random.normal(0.5, 1.0, size=50)
        result = welch_t_test(group1, group2)

        assert result.degrees_of_freedom > 30
        expected = 2 * (1 - stats.norm.cdf(abs(result.t_statistic)))
        assert result.p_value == pytest.approx(expected, abs=1e-6)

    def test_confidence_interval_fixed_multiplier(self):
        from tgi_utils.hypothesis import welch_t_test

        group1 = [10.0, 12.0, 14.0]
        group2 = [5.0, 6.0, 7.0]
        result = welch_t_test(group1, group2)
        se = np.sqrt(4.0 / 3 + 1.0 / 3)

        assert result.ci_lower == pytest.approx(7.0 - 2.0 * se)
        assert result.ci_upper == pytest.approx(7.0 + 2.0 * se)
        assert result.confidence_interval == (result.ci_lower, result.ci_upper)

    def test_significance_flag(self):
        from tgi_utils.hypothesis import welch_t_test

        clearly_different = welch_t_test([1.0, 1.1, 0.9, 1.05], [5.0, 5.2, 4.8, 5.1])
        overlapping = welch_t_test([1.0, 2.0, 3.0, 4.0], [1.5, 2.5, 3.5, 2.0])

        assert clearly_different.significant
        assert not overlapping.significant

    def test_zero_variance_different_means(self):
        """Zero standard error with different means: t=±inf, p=0."""
        from tgi_utils.hypothesis import welch_t_test

        result = welch_t_test([0.5, 0.5, 0.5], [1.0, 1.0, 1.0])

        assert result.t_statistic == -math.inf
        assert result.p_value == 0.0
        assert result.degrees_of_freedom == 4
        assert result.significant

    def test_zero_variance_equal_means(self):
        """Zero standard error with equal means: t=0, p=1."""
        from tgi_utils.hypothesis import welch_t_test

        result = welch_t_test([2.0, 2.0, 2.0], [2.0, 2.0])

        assert result.t_statistic == 0.0
        assert result.p_value == 1.0
        assert not result.significant

    def test_single_observation_propagates_nan(self):
        from tgi_utils.hypothesis import welch_t_test

        result = welch_t_test([1.0], [2.0, 3.0, 4.0])

        assert math.isnan(result.t_statistic)
        assert math.isnan(result.p_value)
        assert not result.significant

    def test_legacy_p_value_method(self):
        from tgi_utils.hypothesis import welch_t_test
        from tgi_utils.distributions import t_distribution_p_value

        result = welch_t_test([1.0, 2.0, 3.0], [2.0, 4.0, 5.0], p_value_method='normal')

        assert result.p_value == pytest.approx(t_distribution_p_value(result.t_statistic, result.degrees_of_freedom))


class TestRanks:
    """Tests for midrank tie handling."""

    def test_tied_block_shares_average_rank(self):
        from tgi_utils.hypothesis import rank_with_ties

        np.testing.assert_array_equal(rank_with_ties([1, 2, 2, 3]), [1.0, 2.5, 2.5, 4.0])

    def test_ranks_follow_input_order(self):
        from tgi_utils.hypothesis import rank_with_ties

        np.testing.assert_array_equal(rank_with_ties([3, 2, 1, 2]), [4.0, 2.5, 1.0, 2.5])

    def test_matches_scipy_rankdata(self):
        from tgi_utils.hypothesis import rank_with_ties

        data = np.random.randint(0, 10, size=40).astype(float)

        np.testing.assert_array_equal(rank_with_ties(data), stats.rankdata(data))


class TestMannWhitneyU:
    """Tests for the Mann-Whitney U test."""

    def test_u1_plus_u2(self, two_groups):
        """U1 + U2 == n1 * n2."""
        from tgi_utils.hypothesis import mann_whitney_u

        group1, group2 = two_groups
        result = mann_whitney_u(group1, group2)

        assert result.u1 + result.u2 == pytest.approx(len(group1) * len(group2))
        assert result.u_statistic == min(result.u1, result.u2)

    def test_u_matches_scipy(self, two_groups):
        from tgi_utils.hypothesis import mann_whitney_u

        group1, group2 = two_groups
        result = mann_whitney_u(group1, group2)
        scipy_u = stats.mannwhitneyu(group1, group2, alternative='two-sided').statistic
        n1n2 = len(group1) * len(group2)

        assert result.u_statistic == pytest.approx(min(scipy_u, n1n2 - scipy_u))

    def test_complete_separation(self):
        from tgi_utils.hypothesis import mann_whitney_u

        result = mann_whitney_u([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])

        assert result.u1 == 0.0
        assert result.u2 == 9.0
        assert result.z_score == pytest.approx(-4.5 / np.sqrt(9 * 7 / 12))
        assert result.p_value < 0.05
        assert result.significant

    def test_ties(self):
        """Tied values across groups share midranks."""
        from tgi_utils.hypothesis import mann_whitney_u

        # pooled ranks: 1 -> 1, 2,2,2 -> 3, 3,3 -> 5.5
        result = mann_whitney_u([1.0, 2.0, 2.0], [2.0, 3.0, 3.0])

        assert result.u1 == pytest.approx(1.0)
        assert result.u2 == pytest.approx(8.0)

    def test_identical_groups_not_significant(self):
        from tgi_utils.hypothesis import mann_whitney_u

        result = mann_whitney_u([1.0, 2.0, 3.0], [1.0, 2.0, 3.0])

        assert result.z_score == 0.0
        assert result.p_value == pytest.approx(1.0, abs=1e-8)
        assert not result.significant


class TestCohensD:
    """Tests for Cohen's d."""

    def test_known_value(self):
        from tgi_utils.hypothesis import cohens_d

        assert cohens_d([2.0, 4.0, 6.0], [1.0, 3.0, 5.0]) == pytest.approx(0.5)

    def test_sign_follows_argument_order(self, two_groups):
        from tgi_utils.hypothesis import cohens_d

        group1, group2 = two_groups

        assert cohens_d(group1, group2) == pytest.approx(-cohens_d(group2, group1))

    def test_pooled_variance_weighted_by_n_minus_one(self):
        from tgi_utils.hypothesis import cohens_d

        group1 = [1.0, 2.0, 3.0, 4.0, 5.0]
        group2 = [2.0, 6.0]
        pooled = np.sqrt((4 * np.var(group1, ddof=1) + 1 * np.var(group2, ddof=1)) / 5)

        assert cohens_d(group1, group2) == pytest.approx((3.0 - 4.0) / pooled)
