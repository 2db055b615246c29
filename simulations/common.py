# simulations/common.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import math
import time

import numpy as np

from sample_means.errors import InvalidParameter, StrategyExecutionFailure
from sample_means.random_source import SeedLike


DEFAULT_SEED = 123
DEFAULT_SAMPLE_SIZE = 9
DEFAULT_REPLICATIONS = 1000
DEFAULT_REPETITIONS = 20
DEFAULT_TOLERANCE = 1e-9
DEFAULT_REFERENCE = "batch_replicate"


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def validate_params(n: int, reps: int, repetitions: int = 1) -> None:
    """
    Shared argument checks. Raised before anything is timed.
    """
    if not _is_int(n) or n <= 0:
        raise InvalidParameter(f"n must be a positive integer, got {n!r}")
    if not _is_int(reps) or reps < 0:
        raise InvalidParameter(f"N must be a non-negative integer, got {reps!r}")
    if not _is_int(repetitions) or repetitions <= 0:
        raise InvalidParameter(f"repetitions must be a positive integer, got {repetitions!r}")


@dataclass(frozen=True)
class BenchmarkConfig:
    """
    Parameters shared by every strategy in one benchmark.
    """
    n: int = DEFAULT_SAMPLE_SIZE            # draws per replication
    reps: int = DEFAULT_REPLICATIONS        # replications (N)
    repetitions: int = DEFAULT_REPETITIONS  # timed runs per strategy
    seed: SeedLike = DEFAULT_SEED
    tolerance: float = DEFAULT_TOLERANCE
    reference: str = DEFAULT_REFERENCE
    include_anti_patterns: bool = False
    budget_s: Optional[float] = None        # max wall-clock per repetition
    warmup: int = 0

    def __post_init__(self) -> None:
        validate_params(self.n, self.reps, self.repetitions)
        if not float(self.tolerance) >= 0.0:
            raise InvalidParameter(f"tolerance must be >= 0, got {self.tolerance!r}")
        if not isinstance(self.seed, np.random.SeedSequence) and (not _is_int(self.seed) or self.seed < 0):
            raise InvalidParameter(f"seed must be a non-negative integer or SeedSequence, got {self.seed!r}")
        if not isinstance(self.reference, str) or not self.reference.strip():
            raise InvalidParameter("reference strategy name must be non-empty")
        # Registry keys are stripped and lower-cased
        object.__setattr__(self, "reference", self.reference.strip().lower())
        if self.budget_s is not None and not self.budget_s > 0:
            raise InvalidParameter("budget_s must be > 0 when given")
        if not _is_int(self.warmup) or self.warmup < 0:
            raise InvalidParameter("warmup must be >= 0")


@dataclass(frozen=True)
class TrialResult:
    """
    One timed invocation of one strategy.
    """
    strategy: str
    repetition: int
    output: np.ndarray
    elapsed_s: float


@dataclass
class StrategyRun:
    """
    Everything recorded for one strategy across its repetitions.

    error is set when the strategy raised; trials then holds whatever
    completed before the failure and is not used for timing.
    """
    name: str
    order: int
    trials: List[TrialResult] = field(default_factory=list)
    error: Optional[StrategyExecutionFailure] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def timings(self) -> List[float]:
        return [t.elapsed_s for t in self.trials]

    @property
    def output(self) -> Optional[np.ndarray]:
        """
        Output of the first repetition. Every repetition is reseeded, so
        they are all the same.
        """
        return self.trials[0].output if self.trials else None


@dataclass(frozen=True)
class TimingStats:
    min: float
    median: float
    mean: float
    max: float


def summarize_timings(timings: List[float]) -> TimingStats:
    if not timings:
        raise ValueError("timings must be non-empty")

    ordered = sorted(timings)
    k = len(ordered)
    mid = k // 2
    if k % 2:
        median = ordered[mid]
    else:
        median = (ordered[mid - 1] + ordered[mid]) / 2.0

    return TimingStats(
        min=ordered[0],
        median=median,
        mean=math.fsum(ordered) / k,
        max=ordered[-1],
    )


@dataclass(frozen=True)
class OutputStats:
    """
    Summary of a strategy's simulated sample means. With standard normal
    draws the mean should sit near 0 and the std near 1/sqrt(n).
    """
    count: int
    mean: float
    std: float  # population stddev


def summarize_output(values: np.ndarray) -> OutputStats:
    x = np.asarray(values, dtype=np.float64)
    if x.size == 0:
        return OutputStats(count=0, mean=math.nan, std=math.nan)
    return OutputStats(count=int(x.size), mean=float(x.mean()), std=float(x.std()))


class Timer:
    """
    Tiny timing helper.
    Usage:
        with Timer() as t:
            ...
        elapsed = t.elapsed_s

    elapsed_s is recorded even when the block raises.
    """
    def __init__(self) -> None:
        self._start: Optional[float] = None
        self.elapsed_s: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._start is not None:
            self.elapsed_s = time.perf_counter() - self._start


def common_x_range(runs: List[StrategyRun]) -> Tuple[float, float]:
    """
    Compute a shared (xmin, xmax) over the timings of several runs for
    'same x-axis' histogram comparisons.
    """
    timings = [t for r in runs for t in r.timings]
    if not timings:
        raise ValueError("runs must contain at least one timing")
    return min(timings), max(timings)


def format_seconds(seconds: float) -> str:
    if seconds < 1e-3:
        return f"{seconds * 1e6:.1f}us"
    if seconds < 1.0:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds:.3f}s"


def format_run_line(run: StrategyRun) -> str:
    """
    Human-friendly one-liner for printing in compare tools.
    """
    if run.failed:
        return f"{run.name}: FAILED ({run.error})"
    t = summarize_timings(run.timings)
    o = summarize_output(run.output)
    return (
        f"{run.name}: min={format_seconds(t.min)}, median={format_seconds(t.median)}, "
        f"N={o.count}, mean={o.mean:.4f}, std={o.std:.4f}"
    )
