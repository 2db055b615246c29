from typing import Optional


class BenchmarkError(Exception):
    """
    Base class for everything the benchmark harness raises on purpose.
    """


class InvalidParameter(BenchmarkError, ValueError):
    """
    A run parameter (n, replications, repetitions, tolerance, ...) is out of
    range. Raised before any timing begins.
    """


class DuplicateStrategyName(BenchmarkError):
    def __init__(self, name: str):
        super().__init__(f"strategy '{name}' is already registered")
        self.name = name


DuplicateNameError = DuplicateStrategyName


class StrategyExecutionFailure(BenchmarkError):
    """
    Wraps any error raised inside a strategy, tagged with the strategy's name.
    """

    def __init__(self, strategy: str, cause: BaseException):
        super().__init__(f"strategy '{strategy}' failed: {type(cause).__name__}: {cause}")
        self.strategy = strategy
        self.cause = cause


class BudgetExceeded(BenchmarkError):
    """
    A single repetition ran longer than the caller's wall-clock budget.

    Strategies cannot be interrupted mid-call, so this is raised once the
    offending repetition returns and no further repetitions are attempted.
    """

    def __init__(self, strategy: str, elapsed_s: float, budget_s: float):
        super().__init__(
            f"strategy '{strategy}' took {elapsed_s:.4f}s, budget is {budget_s:.4f}s"
        )
        self.strategy = strategy
        self.elapsed_s = elapsed_s
        self.budget_s = budget_s


class EquivalenceMismatch(BenchmarkError, AssertionError):
    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        magnitude: Optional[float] = None,
    ):
        super().__init__(message)
        self.index = index
        self.magnitude = magnitude
