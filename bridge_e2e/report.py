"""Rendering of test results as tables and a machine-readable summary."""

from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from bridge_e2e.models.result import Outcome, TestResult, Tier

OUTCOME_LABELS: Mapping[Outcome, str] = {
    "pass": "✓ PASS",
    "fail": "✗ FAIL",
    "skip": "- SKIP",
}

TIER_TITLES: Mapping[Tier, str] = {
    "testnet": "Testnet Results",
    "mainnet": "Mainnet Results",
}

STATUS_WIDTH = 6
DURATION_WIDTH = 8
MIN_COLUMN_WIDTH = 5
MAX_ERROR_WIDTH = 30


def format_duration(duration_ms: int) -> str:
    """Format milliseconds as "850ms" or "12.3s"."""
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    seconds = Decimal(duration_ms).scaleb(-3).quantize(Decimal("0.1"), ROUND_HALF_UP)
    return f"{seconds}s"


def render_table(title: str, results: Sequence[TestResult]) -> list[str]:
    """Render a bordered table of results; no lines when there are none.

    Error text longer than the error column is cut, not wrapped.
    """
    if not results:
        return []

    route_width = max(MIN_COLUMN_WIDTH, *(len(r.route) for r in results))
    error_width = max(
        MIN_COLUMN_WIDTH,
        *(min(len(r.error or ""), MAX_ERROR_WIDTH) for r in results),
    )
    widths = (route_width, STATUS_WIDTH, DURATION_WIDTH, error_width)

    def border(left: str, middle: str, right: str) -> str:
        return left + middle.join("─" * (width + 2) for width in widths) + right

    def row(*cells: str) -> str:
        padded = (cell.ljust(width) for cell, width in zip(cells, widths))
        return "│ " + " │ ".join(padded) + " │"

    lines = [
        f" {title}",
        border("┌", "┬", "┐"),
        row("Route", "Status", "Duration", "Error"),
        border("├", "┼", "┤"),
    ]
    for result in results:
        duration = (
            format_duration(result.duration_ms)
            if result.duration_ms is not None
            else "-"
        )
        lines.append(
            row(
                result.route,
                OUTCOME_LABELS[result.outcome],
                duration,
                (result.error or "")[:error_width],
            )
        )
    lines.append(border("└", "┴", "┘"))
    return lines


def count_outcomes(results: Sequence[TestResult]) -> Mapping[Outcome, int]:
    """Count results per outcome."""
    counts: dict[Outcome, int] = {"pass": 0, "fail": 0, "skip": 0}
    for result in results:
        counts[result.outcome] += 1
    return counts


def render_report(results: Sequence[TestResult]) -> str:
    """Render one table per non-empty tier followed by the summary line."""
    lines: list[str] = []
    for tier, title in TIER_TITLES.items():
        table = render_table(title, [r for r in results if r.tier == tier])
        if table:
            lines.append("")
            lines.extend(table)

    counts = count_outcomes(results)
    lines.append("")
    lines.append(
        f" Summary: {counts['pass']} passed, {counts['fail']} failed, "
        f"{counts['skip']} skipped"
    )
    return "\n".join(lines)


def format_output(results: Sequence[TestResult]) -> dict[str, Any]:
    """Format results for JSON output."""
    counts = count_outcomes(results)
    return {
        "total": len(results),
        "passed": counts["pass"],
        "failed": counts["fail"],
        "skipped": counts["skip"],
        "results": [
            {
                "tier": r.tier,
                "source_chain": r.source_chain,
                "source_asset": r.source_asset,
                "target_chain": r.target_chain,
                "target_asset": r.target_asset,
                "outcome": r.outcome,
                "duration_ms": r.duration_ms,
                "error": r.error,
            }
            for r in results
        ],
    }
