"""
Descriptive statistics primitives used throughout the TGI engine.

All functions accept any 1D array-like of numbers. Non-empty input is a
precondition: an empty array yields NaN rather than raising. The sample
variance needs at least two observations; with a single observation it is
NaN and the NaN propagates into everything built on top of it.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Sequence, Union
import warnings

import numpy as np
from numpy.typing import NDArray


ArrayLike = Union[Sequence[float], NDArray[np.float64]]


@dataclass(frozen=True)
class DescriptiveStats:
    """Container for group-level descriptive statistics."""
    mean: float
    sd: float
    sem: float
    n: int

    def __repr__(self) -> str:
        return f"{self.mean:.4f} ± {self.sem:.4f} SEM (SD={self.sd:.4f}, n={self.n})"

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _as_array(values: ArrayLike) -> NDArray[np.float64]:
    return np.asarray(values, dtype=np.float64).flatten()


def mean(values: ArrayLike) -> float:
    """Arithmetic mean."""
    data = _as_array(values)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        return float(np.mean(data))


def variance(values: ArrayLike) -> float:
    """
    Sample variance (denominator n-1).

    Returns NaN for a single observation instead of raising.
    """
    data = _as_array(values)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        return float(np.var(data, ddof=1))


def standard_deviation(values: ArrayLike) -> float:
    return float(np.sqrt(variance(values)))


def standard_error(values: ArrayLike) -> float:
    """Standard error of the mean: sample SD / sqrt(n)."""
    data = _as_array(values)
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.float64(standard_deviation(data)) / np.sqrt(len(data)))


def describe(values: ArrayLike) -> DescriptiveStats:
    """
    Summarise a sample as mean, SD, SEM and n.

    Example:
        >>> describe([100.0, 120.0, 140.0])
        120.0000 ± 11.5470 SEM (SD=20.0000, n=3)
    """
    data = _as_array(values)
    return DescriptiveStats(
        mean=mean(data),
        sd=standard_deviation(data),
        sem=standard_error(data),
        n=len(data)
    )
