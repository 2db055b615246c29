# simulations/methods.py

from __future__ import annotations

from dataclasses import dataclass
from itertools import chain
from typing import Callable, Dict, Iterator, List

import numpy as np

from sample_means.errors import DuplicateStrategyName, InvalidParameter
from sample_means.random_source import RandomSource


# A strategy maps (rng, n, N) -> float64 array of N sample means.
SimFn = Callable[[RandomSource, int, int], np.ndarray]

COLUMN_MAJOR = "F"
ROW_MAJOR = "C"


def one_to(count: int) -> range:
    """
    The indices 1..count, empty when count == 0 (never the two-element
    sequence [1, 0] a naive 1..count range would give).
    """
    return range(1, count + 1)


def replicate(count: int, expr: Callable[[], float]) -> np.ndarray:
    """
    Evaluate expr count times and collect the results.
    """
    return np.array([expr() for _ in one_to(count)], dtype=np.float64)


def draw_grid(rng: RandomSource, n: int, reps: int, order: str = COLUMN_MAJOR) -> np.ndarray:
    """
    Draw all n*N values in one call and arrange them as an n-by-N grid.

    With order='F' (the default) column j holds exactly the draws replication
    j would have made in a loop. order='C' fills rows first, so each column
    mixes draws from different replications: same shape, different means.
    """
    if order not in (COLUMN_MAJOR, ROW_MAJOR):
        raise InvalidParameter(f"order must be 'F' or 'C', got {order!r}")
    return rng.normal(size=n * reps).reshape((n, reps), order=order)


# --- Per-replication strategies -------------------------------------------

def simulate_batch_replicate(rng: RandomSource, n: int, reps: int) -> np.ndarray:
    """
    Evaluate "mean of n draws" N times through replicate().
    """
    return replicate(reps, lambda: rng.normal(size=n).mean())


def simulate_preallocated_loop(rng: RandomSource, n: int, reps: int) -> np.ndarray:
    """
    Allocate the N result slots up front, then fill them by index.
    """
    out = np.empty(reps, dtype=np.float64)
    for i in range(reps):
        out[i] = rng.normal(size=n).mean()
    return out


def simulate_growing_loop(rng: RandomSource, n: int, reps: int) -> np.ndarray:
    """
    Anti-pattern: start empty and grow by one slot per iteration.

    np.resize copies into a fresh buffer every time, so total work is
    quadratic in N.
    """
    out = np.empty(0, dtype=np.float64)
    for i in range(reps):
        out = np.resize(out, i + 1)
        out[i] = rng.normal(size=n).mean()
    return out


def simulate_concatenation_loop(rng: RandomSource, n: int, reps: int) -> np.ndarray:
    """
    Anti-pattern: concatenate a fresh singleton onto the result each
    iteration. Same quadratic copying as the growing loop.
    """
    out = np.empty(0, dtype=np.float64)
    for _ in range(reps):
        out = np.concatenate((out, [rng.normal(size=n).mean()]))
    return out


# --- Grid strategies --------------------------------------------------------

def simulate_matrix_reduce(rng: RandomSource, n: int, reps: int, order: str = COLUMN_MAJOR) -> np.ndarray:
    """
    One batched draw into an n-by-N grid, reduced per column by the
    vectorized mean along axis 0.
    """
    grid = draw_grid(rng, n, reps, order=order)
    return grid.mean(axis=0)


def simulate_axis_apply(rng: RandomSource, n: int, reps: int, order: str = COLUMN_MAJOR) -> np.ndarray:
    """
    Same grid as matrix_reduce, but reduced by calling np.mean once per
    column through np.apply_along_axis.
    """
    grid = draw_grid(rng, n, reps, order=order)
    if reps == 0:
        # apply_along_axis cannot probe the output shape of an empty axis
        return np.empty(0, dtype=np.float64)
    return np.apply_along_axis(np.mean, 0, grid).astype(np.float64, copy=False)


# --- Map strategies ---------------------------------------------------------

def simulate_map_simplify(rng: RandomSource, n: int, reps: int) -> np.ndarray:
    """
    Map a per-index function (the index is ignored) over 1..N and let
    np.asarray simplify the list of scalars into a vector.
    """
    def one(_i: int) -> float:
        return rng.normal(size=n).mean()

    return np.asarray(list(map(one, one_to(reps))), dtype=np.float64)


def simulate_map_flatten(rng: RandomSource, n: int, reps: int) -> np.ndarray:
    """
    Map to a nested list-of-lists, then flatten it explicitly.
    """
    def one(_i: int) -> List[float]:
        return [rng.normal(size=n).mean()]

    nested = list(map(one, one_to(reps)))
    return np.fromiter(chain.from_iterable(nested), dtype=np.float64)


def simulate_typed_map(rng: RandomSource, n: int, reps: int) -> np.ndarray:
    """
    Declare the element type and count up front so np.fromiter can
    preallocate the result.
    """
    def one(_i: int) -> float:
        return rng.normal(size=n).mean()

    return np.fromiter(map(one, one_to(reps)), dtype=np.float64, count=reps)


# --- Registry / dispatch -----------------------------------------------------

@dataclass(frozen=True)
class Strategy:
    name: str
    fn: SimFn
    anti_pattern: bool = False
    order: int = 0

    def __call__(self, rng: RandomSource, n: int, reps: int) -> np.ndarray:
        return self.fn(rng, n, reps)


class StrategyRegistry:
    """
    Named strategies in registration order. Entries are immutable once
    added and can never be replaced.
    """

    def __init__(self) -> None:
        self._strategies: Dict[str, Strategy] = {}

    def register(self, name: str, fn: SimFn, anti_pattern: bool = False) -> Strategy:
        key = name.strip().lower() if isinstance(name, str) else ""
        if not key:
            raise InvalidParameter("strategy name must be a non-empty string")
        if not callable(fn):
            raise InvalidParameter(f"strategy '{key}' is not callable")
        if key in self._strategies:
            raise DuplicateStrategyName(key)

        strategy = Strategy(name=key, fn=fn, anti_pattern=anti_pattern, order=len(self._strategies))
        self._strategies[key] = strategy
        return strategy

    def get(self, name: str) -> Strategy:
        if not isinstance(name, str):
            raise InvalidParameter(f"strategy name must be a string, got {type(name).__name__}")
        key = name.strip().lower()
        if key not in self._strategies:
            raise InvalidParameter(
                f"unknown strategy '{key}'. Available: {sorted(self._strategies.keys())}"
            )
        return self._strategies[key]

    def list(self, include_anti_patterns: bool = True) -> List[Strategy]:
        return [
            s for s in self._strategies.values()
            if include_anti_patterns or not s.anti_pattern
        ]

    def names(self) -> List[str]:
        return list(self._strategies.keys())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().lower() in self._strategies

    def __len__(self) -> int:
        return len(self._strategies)

    def __iter__(self) -> Iterator[Strategy]:
        return iter(self._strategies.values())


# METHODS lists the built-in strategies in the order they are registered.
# The boolean marks anti-patterns, kept for correctness tests and excluded
# from the timed table unless asked for.
METHODS: List[tuple] = [
    ("batch_replicate", simulate_batch_replicate, False),
    ("preallocated_loop", simulate_preallocated_loop, False),
    ("growing_loop", simulate_growing_loop, True),
    ("concatenation_loop", simulate_concatenation_loop, True),
    ("matrix_reduce", simulate_matrix_reduce, False),
    ("axis_apply", simulate_axis_apply, False),
    ("map_simplify", simulate_map_simplify, False),
    ("map_flatten", simulate_map_flatten, False),
    ("typed_map", simulate_typed_map, False),
]


def default_registry() -> StrategyRegistry:
    registry = StrategyRegistry()
    for name, fn, anti in METHODS:
        registry.register(name, fn, anti_pattern=anti)
    return registry


def get_method(name: str) -> Strategy:
    return default_registry().get(name)
