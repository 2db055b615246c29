# simulations/report.py

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt

from sample_means.equivalence import compare
from sample_means.errors import InvalidParameter

from .common import StrategyRun, format_seconds, summarize_timings

logger = logging.getLogger(__name__)

FAILED = "FAILED"


@dataclass(frozen=True)
class ReportRow:
    name: str
    min_s: Optional[float]
    median_s: Optional[float]
    relative: Optional[float]      # min_s / fastest min_s
    equivalent: Optional[bool]     # None when either side failed
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class BenchmarkReport:
    """
    Strategies ranked by minimum elapsed time. Failed strategies come last,
    in registration order.
    """
    rows: Tuple[ReportRow, ...]
    reference: str
    tolerance: float

    @property
    def fastest(self) -> Optional[ReportRow]:
        for row in self.rows:
            if not row.failed:
                return row
        return None

    def row(self, name: str) -> ReportRow:
        for r in self.rows:
            if r.name == name:
                return r
        raise KeyError(name)

    def to_records(self) -> List[Dict[str, Any]]:
        return [asdict(r) for r in self.rows]


def build(runs: Sequence[StrategyRun], reference_name: str, tolerance: float) -> BenchmarkReport:
    """
    Aggregate raw trials into a ranked report.

    Every strategy's first-repetition output is checked against the
    reference strategy's within tolerance. A mismatch only flips the row's
    equivalent flag; it never drops the row.
    """
    if not float(tolerance) >= 0.0:
        raise InvalidParameter(f"tolerance must be >= 0, got {tolerance!r}")

    by_name = {r.name: r for r in runs}
    if reference_name not in by_name:
        raise InvalidParameter(
            f"reference strategy '{reference_name}' was not run. Available: {sorted(by_name)}"
        )
    ref = by_name[reference_name]
    ref_output = None if ref.failed else ref.output

    ok_runs = [r for r in runs if not r.failed and r.trials]
    failed_runs = [r for r in runs if r.failed or not r.trials]

    stats = {r.name: summarize_timings(r.timings) for r in ok_runs}
    fastest = min((s.min for s in stats.values()), default=None)

    rows: List[Tuple[Tuple[float, int], ReportRow]] = []
    for r in ok_runs:
        s = stats[r.name]
        if fastest is None or s.min == fastest:
            relative = 1.0
        elif fastest == 0.0:
            # below timer resolution; any measurable time is unboundedly slower
            relative = math.inf
        else:
            relative = s.min / fastest

        equivalent: Optional[bool] = None
        if ref_output is not None:
            result = compare(r.output, ref_output, tolerance)
            equivalent = result.equal
            if not equivalent:
                logger.warning("%s differs from %s: %s", r.name, reference_name, result.reason)

        rows.append((
            (s.min, r.order),
            ReportRow(
                name=r.name,
                min_s=s.min,
                median_s=s.median,
                relative=relative,
                equivalent=equivalent,
            ),
        ))
    rows.sort(key=lambda item: item[0])

    failed_rows = [
        ReportRow(
            name=r.name,
            min_s=None,
            median_s=None,
            relative=None,
            equivalent=None,
            error=str(r.error) if r.error is not None else "no trials recorded",
        )
        for r in sorted(failed_runs, key=lambda r: r.order)
    ]

    return BenchmarkReport(
        rows=tuple(row for _, row in rows) + tuple(failed_rows),
        reference=reference_name,
        tolerance=float(tolerance),
    )


def _flag(value: Optional[bool]) -> str:
    if value is None:
        return "-"
    return "yes" if value else "NO"


def format_table(report: BenchmarkReport) -> str:
    header = ("strategy", "min", "median", "relative", "equivalent")
    lines: List[Tuple[str, ...]] = [header]
    for r in report.rows:
        if r.failed:
            lines.append((r.name, FAILED, FAILED, "-", "-"))
        else:
            lines.append((
                r.name,
                format_seconds(r.min_s),
                format_seconds(r.median_s),
                f"{r.relative:.2f}x",
                _flag(r.equivalent),
            ))

    widths = [max(len(line[i]) for line in lines) for i in range(len(header))]
    out = []
    for k, line in enumerate(lines):
        cells = [line[0].ljust(widths[0])] + [c.rjust(w) for c, w in zip(line[1:], widths[1:])]
        out.append("  ".join(cells).rstrip())
        if k == 0:
            out.append("  ".join("-" * w for w in widths))

    out.append("")
    out.append(f"reference: {report.reference}, tolerance: {report.tolerance:g}")
    for r in report.rows:
        if r.failed:
            out.append(f"{r.name}: {r.error}")
    return "\n".join(out)


def to_json(report: BenchmarkReport, indent: Optional[int] = 2) -> str:
    return json.dumps(
        {
            "reference": report.reference,
            "tolerance": report.tolerance,
            "rows": report.to_records(),
        },
        indent=indent,
    )


def plot_report(report: BenchmarkReport, title: Optional[str] = None, show: bool = True):
    """
    Horizontal bar chart of minimum elapsed time per strategy, fastest on top.
    Failed strategies are left out of the chart.
    """
    rows = [r for r in report.rows if not r.failed]
    names = [r.name for r in rows]
    millis = [r.min_s * 1e3 for r in rows]
    colors = ["tab:green" if r.equivalent is not False else "tab:red" for r in rows]

    fig, ax = plt.subplots(figsize=(10, 0.5 * max(len(rows), 1) + 1.5))
    ax.barh(names, millis, color=colors)
    ax.invert_yaxis()
    ax.set_xlabel("Minimum elapsed time (ms)")
    ax.set_title(title or f"Strategies vs {report.reference}")
    for y, r in enumerate(rows):
        ax.annotate(f" {r.relative:.1f}x", (r.min_s * 1e3, y), va="center")

    plt.tight_layout()
    if show:
        plt.show()
    return fig
