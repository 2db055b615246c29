from typing import Optional, Tuple, Union

import numpy as np

Size = Union[None, int, Tuple[int, ...]]
SeedLike = Union[int, np.random.SeedSequence]


class RandomSource:
    """
    RandomSource (Deterministic Random Stream)

    A thin, explicitly seeded wrapper around a numpy Generator (PCG64).
    Every strategy draws from one of these instead of the global numpy state,
    so two runs with the same seed and the same sequence of draw calls see
    exactly the same numbers.

    Draw-order convention:

        One call drawing n*N values consumes the stream exactly like N
        successive calls drawing n values each. Strategies that build an
        n-by-N grid must therefore fill it column by column (Fortran order)
        for column j to hold the same draws as replication j of a loop.

    This object is:
      - single-threaded
      - not thread-safe
      - owned by whoever is currently timing a strategy
    """

    def __init__(self, seed: Optional[SeedLike] = None):
        self._seed: Optional[SeedLike] = None
        self._gen = np.random.default_rng()
        if seed is not None:
            self.seed(seed)

    # ------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------

    def seed(self, value: SeedLike) -> None:
        """
        Reset the stream to a state fully determined by value.

        value is a non-negative int or an opaque np.random.SeedSequence;
        the same SeedSequence always rebuilds the same stream.
        """
        if isinstance(value, np.random.SeedSequence):
            self._seed = value
        else:
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise TypeError(f"seed must be an int or SeedSequence, got {type(value).__name__}")
            if value < 0:
                raise ValueError("seed must be >= 0")
            self._seed = int(value)

        self._gen = np.random.Generator(np.random.PCG64(self._seed))

    def reset(self) -> None:
        """
        Rewind to the last seed passed to seed().
        """
        if self._seed is None:
            raise RuntimeError("random source was never seeded")
        self.seed(self._seed)

    @property
    def current_seed(self) -> Optional[SeedLike]:
        return self._seed

    # ------------------------------------------------------------
    # Draws
    # ------------------------------------------------------------

    def normal(self, size: Size = None, loc: float = 0.0, scale: float = 1.0):
        return self._gen.normal(loc, scale, size)

    def uniform(self, size: Size = None, low: float = 0.0, high: float = 1.0):
        return self._gen.uniform(low, high, size)
