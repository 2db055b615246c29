# simulations/compare.py

from __future__ import annotations

import argparse
import logging
import sys

import matplotlib.pyplot as plt

from sample_means.equivalence import compare
from sample_means.errors import BenchmarkError

from .common import (
    DEFAULT_REFERENCE,
    DEFAULT_REPETITIONS,
    DEFAULT_REPLICATIONS,
    DEFAULT_SAMPLE_SIZE,
    DEFAULT_SEED,
    DEFAULT_TOLERANCE,
    BenchmarkConfig,
    StrategyRun,
    common_x_range,
    format_run_line,
)
from .methods import default_registry
from .report import format_table, plot_report, to_json
from .run import run_and_report, run_pair


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Benchmark ways of computing N simulated sample means of n normal draws."
    )
    parser.add_argument("--n", type=int, default=DEFAULT_SAMPLE_SIZE, help="draws per replication")
    parser.add_argument("--reps", "-N", type=int, default=DEFAULT_REPLICATIONS, help="number of replications (N)")
    parser.add_argument("--repetitions", type=int, default=DEFAULT_REPETITIONS, help="timed runs per strategy")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--tolerance", type=float, default=DEFAULT_TOLERANCE)
    parser.add_argument("--reference", default=DEFAULT_REFERENCE, help="strategy all others are checked against")
    parser.add_argument("--warmup", type=int, default=0, help="untimed calls before timing")
    parser.add_argument("--budget", type=float, default=None, help="max seconds per repetition")
    parser.add_argument("--include-anti-patterns", action="store_true",
                        help="also time growing_loop and concatenation_loop")
    parser.add_argument("--only", nargs="+", metavar="NAME", help="run just these strategies, in this order")
    parser.add_argument("--method-a", help="compare two strategies head to head (needs --method-b)")
    parser.add_argument("--method-b")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("--plot", action="store_true", help="show a chart of the results")
    parser.add_argument("--list", action="store_true", help="list registered strategies and exit")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def _plot_pair(ra: StrategyRun, rb: StrategyRun, config: BenchmarkConfig) -> None:
    # Same x-axis for both timing histograms
    xmin, xmax = common_x_range([ra, rb])
    scale = 1e3

    plt.figure(figsize=(12, 4))

    plt.subplot(1, 2, 1)
    plt.hist([t * scale for t in ra.timings], bins=30, range=(xmin * scale, xmax * scale))
    plt.title(ra.name)
    plt.xlabel("Elapsed (ms)")
    plt.ylabel("Repetitions")
    plt.xlim(xmin * scale, xmax * scale)

    plt.subplot(1, 2, 2)
    plt.hist([t * scale for t in rb.timings], bins=30, range=(xmin * scale, xmax * scale))
    plt.title(rb.name)
    plt.xlabel("Elapsed (ms)")
    plt.xlim(xmin * scale, xmax * scale)

    plt.suptitle(
        f"Compare: {ra.name} vs {rb.name}  "
        f"(n={config.n}, N={config.reps}, repetitions={config.repetitions}, seed={config.seed})"
    )
    plt.tight_layout(rect=[0, 0.02, 1, 0.92])
    plt.show()


def _compare_pair(args: argparse.Namespace, config: BenchmarkConfig) -> int:
    ra, rb = run_pair(args.method_a, args.method_b, config)

    print(format_run_line(ra))
    print(format_run_line(rb))
    if ra.failed or rb.failed:
        return 1

    result = compare(ra.output, rb.output, config.tolerance)
    if result.equal:
        print(f"equivalent within {config.tolerance:g}")
    else:
        print(f"NOT equivalent: {result.reason}")

    if args.plot:
        _plot_pair(ra, rb, config)
    return 0


def main(argv: list[str]) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    registry = default_registry()
    if args.list:
        for s in registry:
            print(s.name + (" (anti-pattern)" if s.anti_pattern else ""))
        return 0

    if bool(args.method_a) != bool(args.method_b):
        parser.error("--method-a and --method-b must be given together")

    try:
        config = BenchmarkConfig(
            n=args.n,
            reps=args.reps,
            repetitions=args.repetitions,
            seed=args.seed,
            tolerance=args.tolerance,
            reference=args.reference,
            include_anti_patterns=args.include_anti_patterns,
            budget_s=args.budget,
            warmup=args.warmup,
        )

        if args.method_a:
            return _compare_pair(args, config)

        report = run_and_report(registry, config, names=args.only)
    except BenchmarkError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(to_json(report) if args.json else format_table(report))

    if args.plot:
        plot_report(report, title=f"n={config.n}, N={config.reps}, repetitions={config.repetitions}")

    return 1 if any(r.failed or r.equivalent is False for r in report.rows) else 0


def cli() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(cli())
