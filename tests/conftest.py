from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest

from sample_means.random_source import RandomSource
from simulations.common import BenchmarkConfig
from simulations.methods import StrategyRegistry, default_registry
from simulations.run import TimingHarness


@pytest.fixture
def source() -> RandomSource:
    return RandomSource(seed=123)


@pytest.fixture
def registry() -> StrategyRegistry:
    return default_registry()


@pytest.fixture
def harness() -> TimingHarness:
    return TimingHarness()


@pytest.fixture
def small_config() -> BenchmarkConfig:
    """Fast settings for tests that exercise the pipeline, not the timings."""
    return BenchmarkConfig(n=5, reps=40, repetitions=3, seed=7)
