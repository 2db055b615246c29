# simulations/run.py

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from sample_means.errors import BudgetExceeded, StrategyExecutionFailure
from sample_means.random_source import RandomSource, SeedLike

from .common import (
    DEFAULT_SEED,
    BenchmarkConfig,
    StrategyRun,
    Timer,
    TrialResult,
    validate_params,
)
from .methods import Strategy, StrategyRegistry, default_registry
from .report import BenchmarkReport, build

logger = logging.getLogger(__name__)


class TimingHarness:
    """
    Runs strategies one at a time against a single RandomSource it owns.

    The source is reseeded immediately before every call, warm-up calls
    included, so each repetition of a strategy sees the same draws.
    """

    def __init__(self, source: Optional[RandomSource] = None) -> None:
        self.source = source if source is not None else RandomSource()

    def run(
        self,
        strategy: Strategy,
        n: int,
        reps: int,
        repetitions: int,
        seed: SeedLike = DEFAULT_SEED,
        budget_s: Optional[float] = None,
        warmup: int = 0,
    ) -> List[TrialResult]:
        """
        Time `repetitions` calls of strategy(n, N) and return every trial.

        Parameters
        ----------
        strategy:
            Registered strategy to call.
        n, reps:
            Sample size per replication and number of replications (N).
        repetitions:
            Number of timed calls.
        seed:
            Seed applied before each call.
        budget_s:
            Optional wall-clock limit per repetition; BudgetExceeded is raised
            after the first repetition that goes over it.
        warmup:
            Untimed calls made before the timed ones.

        Returns
        -------
        list of TrialResult, one per repetition, in order. Nothing is
        aggregated here.

        Errors raised by the strategy propagate unchanged.
        """
        validate_params(n, reps, repetitions)

        for _ in range(warmup):
            self.source.seed(seed)
            strategy(self.source, n, reps)

        trials: List[TrialResult] = []
        for i in range(repetitions):
            self.source.seed(seed)
            with Timer() as t:
                out = strategy(self.source, n, reps)
            elapsed = t.elapsed_s

            trials.append(
                TrialResult(strategy=strategy.name, repetition=i, output=out, elapsed_s=elapsed)
            )
            logger.debug("%s rep %d: %.6fs", strategy.name, i, elapsed)

            if budget_s is not None and elapsed > budget_s:
                raise BudgetExceeded(strategy.name, elapsed, budget_s)

        return trials


def run_strategy(
    harness: TimingHarness,
    strategy: Strategy,
    config: BenchmarkConfig,
) -> StrategyRun:
    """
    Benchmark one strategy, isolating its failure from everyone else's.
    """
    run = StrategyRun(name=strategy.name, order=strategy.order)
    try:
        run.trials = harness.run(
            strategy,
            n=config.n,
            reps=config.reps,
            repetitions=config.repetitions,
            seed=config.seed,
            budget_s=config.budget_s,
            warmup=config.warmup,
        )
    except Exception as exc:  # any strategy bug is reported per strategy
        run.error = StrategyExecutionFailure(strategy.name, exc)
        logger.error("%s", run.error)
    return run


def run_benchmark(
    registry: Optional[StrategyRegistry] = None,
    config: Optional[BenchmarkConfig] = None,
    harness: Optional[TimingHarness] = None,
    names: Optional[Sequence[str]] = None,
) -> List[StrategyRun]:
    """
    Run every strategy in the registry, in registration order, or only the
    given names in the given order.

    Anti-pattern strategies are skipped unless config.include_anti_patterns
    or they are named explicitly. The reference strategy is always included.
    """
    registry = registry if registry is not None else default_registry()
    config = config if config is not None else BenchmarkConfig()
    harness = harness if harness is not None else TimingHarness()

    # Fail on bad names before anything is timed.
    reference = registry.get(config.reference)

    if names is not None:
        strategies: List[Strategy] = []
        for name in names:
            s = registry.get(name)
            if s not in strategies:
                strategies.append(s)
        if reference not in strategies:
            strategies.insert(0, reference)
    else:
        strategies = [
            s for s in registry.list()
            if config.include_anti_patterns or not s.anti_pattern or s.name == reference.name
        ]

    logger.info(
        "benchmarking %d strategies (n=%d, N=%d, repetitions=%d, seed=%s)",
        len(strategies), config.n, config.reps, config.repetitions, config.seed,
    )
    return [run_strategy(harness, s, config) for s in strategies]


def run_and_report(
    registry: Optional[StrategyRegistry] = None,
    config: Optional[BenchmarkConfig] = None,
    harness: Optional[TimingHarness] = None,
    names: Optional[Sequence[str]] = None,
) -> BenchmarkReport:
    registry = registry if registry is not None else default_registry()
    config = config if config is not None else BenchmarkConfig()
    reference = registry.get(config.reference)
    runs = run_benchmark(registry, config, harness, names=names)
    return build(runs, reference.name, config.tolerance)


def run_pair(
    method_a: str,
    method_b: str,
    config: Optional[BenchmarkConfig] = None,
    registry: Optional[StrategyRegistry] = None,
) -> Tuple[StrategyRun, StrategyRun]:
    """
    Convenience helper: run two strategies under the same config and seed.

    Returns (run_a, run_b).
    """
    registry = registry if registry is not None else default_registry()
    config = config if config is not None else BenchmarkConfig()
    a = registry.get(method_a)
    b = registry.get(method_b)

    harness = TimingHarness()
    return run_strategy(harness, a, config), run_strategy(harness, b, config)
