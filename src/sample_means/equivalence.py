import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from .errors import EquivalenceMismatch, InvalidParameter

logger = logging.getLogger(__name__)

ArrayLike = Union[np.ndarray, Sequence[float]]


@dataclass(frozen=True)
class Comparison:
    """
    Outcome of comparing two numeric sequences.

    index/magnitude point at the first offending element and are None when
    the sequences match or differ only in length.
    """
    equal: bool
    index: Optional[int] = None
    magnitude: Optional[float] = None
    reason: str = ""

    def __bool__(self) -> bool:
        return self.equal


def _check_tolerance(tolerance: float) -> float:
    tol = float(tolerance)
    if not tol >= 0.0:
        raise InvalidParameter(f"tolerance must be >= 0, got {tolerance!r}")
    return tol


def compare(a: ArrayLike, b: ArrayLike, tolerance: float) -> Comparison:
    """
    Element-wise approximate equality with math.isclose semantics, using
    tolerance for both the relative and the absolute bound:

        |a_i - b_i| <= max(tolerance * max(|a_i|, |b_i|), tolerance)

    NaN never matches anything, including another NaN.
    """
    tol = _check_tolerance(tolerance)
    xa = np.asarray(a, dtype=np.float64).ravel()
    xb = np.asarray(b, dtype=np.float64).ravel()

    if xa.shape != xb.shape:
        return Comparison(
            equal=False,
            reason=f"length mismatch: {xa.size} != {xb.size}",
        )
    if xa.size == 0:
        return Comparison(equal=True)

    with np.errstate(invalid="ignore"):
        diff = np.abs(xa - xb)
        bound = np.maximum(tol * np.maximum(np.abs(xa), np.abs(xb)), tol)
        ok = diff <= bound

    if ok.all():
        return Comparison(equal=True)

    i = int(np.argmin(ok))
    mag = float(diff[i])
    return Comparison(
        equal=False,
        index=i,
        magnitude=mag,
        reason=f"first difference at index {i}: {xa[i]!r} vs {xb[i]!r} (|diff|={mag:.3e}, tolerance={tol:g})",
    )


def equivalent(a: ArrayLike, b: ArrayLike, tolerance: float) -> bool:
    result = compare(a, b, tolerance)
    if not result.equal:
        logger.warning("sequences not equivalent: %s", result.reason)
    return result.equal


def assert_equivalent(a: ArrayLike, b: ArrayLike, tolerance: float) -> None:
    """
    Like equivalent(), but raise EquivalenceMismatch naming the first
    differing index and its magnitude.
    """
    result = compare(a, b, tolerance)
    if not result.equal:
        raise EquivalenceMismatch(
            result.reason,
            index=result.index,
            magnitude=result.magnitude,
        )
