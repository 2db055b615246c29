from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from sample_means.equivalence import assert_equivalent, compare, equivalent
from sample_means.errors import EquivalenceMismatch, InvalidParameter


def test_identical_sequences() -> None:
    x = np.linspace(-1.0, 1.0, 11)
    assert equivalent(x, x.copy(), 0.0)


def test_floating_drift_within_tolerance() -> None:
    a = [0.1 + 0.2, 1.0, -3.5]
    b = [0.3, 1.0 + 1e-12, -3.5]
    assert equivalent(a, b, 1e-9)
    assert not equivalent(a, b, 0.0)


def test_relative_bound_for_large_values() -> None:
    # |diff| = 1 is far above the absolute bound but tiny relative to 1e12
    assert equivalent([1e12], [1e12 + 1.0], 1e-9)


def test_length_mismatch() -> None:
    result = compare([1.0, 2.0], [1.0], 1e-9)
    assert not result.equal
    assert result.index is None
    assert "length" in result.reason


def test_empty_sequences_match() -> None:
    assert equivalent(np.empty(0), [], 1e-9)


def test_reports_first_difference() -> None:
    a = [0.0, 1.0, 2.0, 3.0]
    b = [0.0, 1.0, 2.5, 4.0]
    result = compare(a, b, 1e-9)
    assert not result
    assert result.index == 2
    assert result.magnitude == pytest.approx(0.5)
    assert "index 2" in result.reason


def test_equivalent_logs_mismatch(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="sample_means.equivalence"):
        assert not equivalent([1.0], [2.0], 1e-9)
    assert "index 0" in caplog.text


def test_nan_never_matches() -> None:
    assert not equivalent([math.nan], [math.nan], 1.0)


def test_assert_equivalent_raises_with_location() -> None:
    with pytest.raises(EquivalenceMismatch) as info:
        assert_equivalent([1.0, 2.0], [1.0, 2.1], 1e-9)
    assert info.value.index == 1
    assert info.value.magnitude == pytest.approx(0.1)

    assert_equivalent([1.0, 2.0], [1.0, 2.0], 1e-9)


@pytest.mark.parametrize("tol", [-1e-9, math.nan])
def test_bad_tolerance(tol: float) -> None:
    with pytest.raises(InvalidParameter):
        compare([1.0], [1.0], tol)
