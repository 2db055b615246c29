from __future__ import annotations

import json
import math

import numpy as np
import pytest

from sample_means.errors import InvalidParameter, StrategyExecutionFailure
from simulations.common import BenchmarkConfig, StrategyRun, TrialResult
from simulations.methods import default_registry
from simulations.report import FAILED, build, format_table, plot_report, to_json
from simulations.run import run_and_report


def _run(name: str, order: int, timings, output=(0.1, 0.2, 0.3)) -> StrategyRun:
    out = np.asarray(output, dtype=np.float64)
    return StrategyRun(
        name=name,
        order=order,
        trials=[
            TrialResult(strategy=name, repetition=i, output=out, elapsed_s=t)
            for i, t in enumerate(timings)
        ],
    )


def _failed(name: str, order: int) -> StrategyRun:
    return StrategyRun(
        name=name,
        order=order,
        error=StrategyExecutionFailure(name, RuntimeError("kaput")),
    )


def test_rows_sorted_by_min_time() -> None:
    runs = [
        _run("ref", 0, [0.30, 0.10, 0.20]),
        _run("fast", 1, [0.05, 0.06, 0.04]),
        _run("slow", 2, [0.90, 0.80, 1.00]),
    ]
    report = build(runs, "ref", 1e-9)

    assert [r.name for r in report.rows] == ["fast", "ref", "slow"]
    assert report.fastest.name == "fast"

    ref = report.row("ref")
    assert ref.min_s == pytest.approx(0.10)
    assert ref.median_s == pytest.approx(0.20)
    assert ref.relative == pytest.approx(0.10 / 0.04)
    assert report.row("fast").relative == pytest.approx(1.0)


def test_ties_broken_by_registration_order() -> None:
    runs = [
        _run("ref", 0, [0.5]),
        _run("b", 2, [0.1]),
        _run("a", 1, [0.1]),
    ]
    report = build(runs, "ref", 1e-9)
    assert [r.name for r in report.rows] == ["a", "b", "ref"]


def test_mismatch_flags_row_without_dropping_it() -> None:
    runs = [
        _run("ref", 0, [0.1]),
        _run("same", 1, [0.2], output=(0.1, 0.2, 0.3 + 1e-13)),
        _run("other", 2, [0.3], output=(0.1, 0.25, 0.3)),
        _run("short", 3, [0.4], output=(0.1, 0.2)),
    ]
    report = build(runs, "ref", 1e-9)

    assert report.row("ref").equivalent is True
    assert report.row("same").equivalent is True
    assert report.row("other").equivalent is False
    assert report.row("short").equivalent is False
    assert len(report.rows) == 4


def test_failed_strategies_listed_last() -> None:
    runs = [
        _failed("broken", 0),
        _run("ref", 1, [0.2]),
        _run("fast", 2, [0.1]),
    ]
    report = build(runs, "ref", 1e-9)

    assert [r.name for r in report.rows] == ["fast", "ref", "broken"]
    broken = report.row("broken")
    assert broken.failed
    assert broken.min_s is None
    assert broken.equivalent is None
    assert "kaput" in broken.error

    table = format_table(report)
    assert FAILED in table
    assert "kaput" in table


def test_failed_reference_leaves_flags_unknown() -> None:
    report = build([_failed("ref", 0), _run("a", 1, [0.1])], "ref", 1e-9)
    assert report.row("a").equivalent is None
    assert report.row("ref").failed


def test_unknown_reference() -> None:
    with pytest.raises(InvalidParameter):
        build([_run("a", 0, [0.1])], "ref", 1e-9)


def test_negative_tolerance() -> None:
    with pytest.raises(InvalidParameter):
        build([_run("ref", 0, [0.1])], "ref", -1.0)


def test_structured_output() -> None:
    report = build([_run("ref", 0, [0.2, 0.1]), _failed("bad", 1)], "ref", 1e-9)

    records = report.to_records()
    assert records[0]["name"] == "ref"
    assert set(records[0]) == {"name", "min_s", "median_s", "relative", "equivalent", "error"}

    payload = json.loads(to_json(report))
    assert payload["reference"] == "ref"
    assert payload["tolerance"] == 1e-9
    assert payload["rows"][1]["error"] is not None


def test_table_header_and_columns() -> None:
    table = format_table(build([_run("ref", 0, [0.002])], "ref", 1e-9))
    lines = table.splitlines()
    assert lines[0].split() == ["strategy", "min", "median", "relative", "equivalent"]
    assert lines[2].split() == ["ref", "2.000ms", "2.000ms", "1.00x", "yes"]
    assert "reference: ref" in table


def test_report_from_real_run() -> None:
    config = BenchmarkConfig(n=5, reps=50, repetitions=2, seed=11)
    report = run_and_report(default_registry(), config)
    names = {r.name for r in report.rows}
    assert names == {s.name for s in default_registry().list(include_anti_patterns=False)}
    assert all(r.equivalent for r in report.rows)


def test_plot_report() -> None:
    report = build([_run("ref", 0, [0.2]), _run("a", 1, [0.1]), _failed("bad", 2)], "ref", 1e-9)
    fig = plot_report(report, show=False)
    ax = fig.axes[0]
    assert len(ax.patches) == 2


def test_zero_fastest_time() -> None:
    """A fastest minimum below timer resolution makes slower rows infinitely slower."""
    runs = [
        _run("ref", 0, [0.0, 0.1]),
        _run("tied", 1, [0.0]),
        _run("slower", 2, [0.2]),
    ]
    report = build(runs, "ref", 1e-9)
    assert report.row("ref").relative == 1.0
    assert report.row("tied").relative == 1.0
    assert math.isinf(report.row("slower").relative)
    assert "infx" in format_table(report)
