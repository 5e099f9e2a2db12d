"""
Two-sample hypothesis tests and effect sizes for group comparisons.

This module provides:
- Welch's t-test (unequal variances, Welch-Satterthwaite df)
- Mann-Whitney U with midrank tie correction (normal approximation)
- Cohen's d with (n-1)-weighted pooled standard deviation

The p-values come from the closed-form approximations in
``tgi_utils.distributions``, not from scipy. Degenerate inputs never
raise: single-observation groups give NaN variances that propagate into
the statistic and p-value.

References:
- Welch (1947), Satterthwaite (1946)
- Mann & Whitney (1947)
- Cohen (1988)
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple

import numpy as np
from numpy.typing import NDArray

from .descriptive import ArrayLike, _as_array, mean, variance
from .distributions import PValueMethod, normal_cdf, two_sided_p_value


# =============================================================================
# DATA CLASSES FOR RESULTS
# =============================================================================

@dataclass(frozen=True)
class TTestResult:
    """Container for Welch's t-test results."""
    t_statistic: float
    degrees_of_freedom: float
    p_value: float
    significant: bool
    ci_lower: float
    ci_upper: float
    alpha: float = 0.05

    @property
    def confidence_interval(self) -> Tuple[float, float]:
        return (self.ci_lower, self.ci_upper)

    def __repr__(self) -> str:
        sig_str = "significant" if self.significant else "not significant"
        return (f"Welch t-test: t={self.t_statistic:.4f}, df={self.degrees_of_freedom:.2f}, "
                f"p={self.p_value:.6f} ({sig_str} at α={self.alpha})")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MannWhitneyResult:
    """Container for Mann-Whitney U results."""
    u_statistic: float
    u1: float
    u2: float
    z_score: float
    p_value: float
    significant: bool
    alpha: float = 0.05

    def __repr__(self) -> str:
        sig_str = "significant" if self.significant else "not significant"
        return (f"Mann-Whitney U: U={self.u_statistic:.1f}, z={self.z_score:.4f}, "
                f"p={self.p_value:.6f} ({sig_str} at α={self.alpha})")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# WELCH'S T-TEST
# =============================================================================

def welch_t_test(
    group1: ArrayLike,
    group2: ArrayLike,
    alpha: float = 0.05,
    ci_multiplier: float = 2.0,
    p_value_method: PValueMethod = 't_cdf'
) -> TTestResult:
    """
    Welch's two-sample t-test for unequal variances.

    Args:
        group1: First sample (the sign of t follows mean1 - mean2)
        group2: Second sample
        alpha: Significance level
        ci_multiplier: Fixed critical value for the CI of the mean
            difference (2.0 approximates a 95% interval)
        p_value_method: 't_cdf' (canonical) or 'normal' (legacy)

    Returns:
        TTestResult with t, df, two-sided p-value, significance and CI

    Degenerate cases:
        - If both groups have zero variance the standard error is 0. Equal
          means give t=0, p=1; different means give t=±inf, p=0. df falls
          back to n1 + n2 - 2.
        - Groups with a single observation have NaN variance; t, df and
          p are NaN and ``significant`` is False.
    """
    x1 = _as_array(group1)
    x2 = _as_array(group2)
    n1, n2 = len(x1), len(x2)

    mean1 = np.float64(mean(x1))
    mean2 = np.float64(mean(x2))
    var1 = np.float64(variance(x1))
    var2 = np.float64(variance(x2))

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        se_sq1 = var1 / n1
        se_sq2 = var2 / n2
        pooled_se = np.sqrt(se_sq1 + se_sq2)
        diff = mean1 - mean2

        if pooled_se == 0:
            df = np.float64(n1 + n2 - 2)
            if diff == 0:
                t_stat = np.float64(0.0)
                p_value = 1.0
            else:
                t_stat = np.copysign(np.inf, diff)
                p_value = 0.0
        else:
            t_stat = diff / pooled_se
            df = (se_sq1 + se_sq2) ** 2 / (se_sq1 ** 2 / (n1 - 1) + se_sq2 ** 2 / (n2 - 1))
            p_value = two_sided_p_value(float(t_stat), float(df), method=p_value_method)

        ci_lower = diff - ci_multiplier * pooled_se
        ci_upper = diff + ci_multiplier * pooled_se

    return TTestResult(
        t_statistic=float(t_stat),
        degrees_of_freedom=float(df),
        p_value=float(p_value),
        significant=bool(p_value < alpha),
        ci_lower=float(ci_lower),
        ci_upper=float(ci_upper),
        alpha=alpha
    )


# =============================================================================
# MANN-WHITNEY U
# =============================================================================

def _midranks(sorted_values: NDArray[np.float64]) -> NDArray[np.float64]:
    """Ranks for an ascending array, tied blocks share their average rank."""
    n = len(sorted_values)
    ranks = np.empty(n, dtype=np.float64)
    rank = 1
    i = 0
    while i < n:
        tie_count = 1
        while i + tie_count < n and sorted_values[i] == sorted_values[i + tie_count]:
            tie_count += 1
        ranks[i:i + tie_count] = rank + (tie_count - 1) / 2
        rank += tie_count
        i += tie_count
    return ranks


def rank_with_ties(values: ArrayLike) -> NDArray[np.float64]:
    """
    Rank values (1-based) with midrank tie correction.

    Returns ranks aligned with the input order.

    Example:
        >>> rank_with_ties([1, 2, 2, 3])
        array([1. , 2.5, 2.5, 4. ])
    """
    data = _as_array(values)
    order = np.argsort(data, kind='stable')
    ranks = np.empty(len(data), dtype=np.float64)
    ranks[order] = _midranks(data[order])
    return ranks


def mann_whitney_u(
    group1: ArrayLike,
    group2: ArrayLike,
    alpha: float = 0.05
) -> MannWhitneyResult:
    """
    Mann-Whitney U test using the normal approximation.

    The pooled sample is ranked with midrank ties; U1 comes from the rank
    sum of group1, U2 = n1*n2 - U1 and the reported U is min(U1, U2).
    The z-score uses mean n1*n2/2 and SD sqrt(n1*n2*(n1+n2+1)/12), with no
    continuity or tie variance correction.

    Args:
        group1: First sample
        group2: Second sample
        alpha: Significance level

    Returns:
        MannWhitneyResult
    """
    x1 = _as_array(group1)
    x2 = _as_array(group2)
    n1, n2 = len(x1), len(x2)

    ranks = rank_with_ties(np.concatenate([x1, x2]))
    r1 = float(np.sum(ranks[:n1]))

    u1 = r1 - (n1 * (n1 + 1)) / 2
    u2 = n1 * n2 - u1
    u = min(u1, u2)

    mean_u = (n1 * n2) / 2
    sd_u = np.sqrt((n1 * n2 * (n1 + n2 + 1)) / 12)
    with np.errstate(divide='ignore', invalid='ignore'):
        z_score = float((u - mean_u) / np.float64(sd_u))
    p_value = 2.0 * (1.0 - float(normal_cdf(abs(z_score))))

    return MannWhitneyResult(
        u_statistic=float(u),
        u1=float(u1),
        u2=float(u2),
        z_score=z_score,
        p_value=p_value,
        significant=bool(p_value < alpha),
        alpha=alpha
    )


# =============================================================================
# EFFECT SIZE
# =============================================================================

def cohens_d(group1: ArrayLike, group2: ArrayLike) -> float:
    """
    Cohen's d: (mean1 - mean2) / pooled SD.

    The pooled variance weights each group's sample variance by n-1.
    Zero pooled SD yields ±inf (or NaN for identical means).
    """
    x1 = _as_array(group1)
    x2 = _as_array(group2)
    n1, n2 = len(x1), len(x2)

    with np.errstate(divide='ignore', invalid='ignore'):
        pooled_var = ((n1 - 1) * np.float64(variance(x1)) + (n2 - 1) * np.float64(variance(x2))) / np.float64(n1 + n2 - 2)
        d = (np.float64(mean(x1)) - mean(x2)) / np.sqrt(pooled_var)

    return float(d)
