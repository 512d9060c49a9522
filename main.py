"""
Delivery Station — End-to-end reporting pipeline.

Runs the engine from the history store (or simulated history when none
exists) to dashboard-ready outputs and prints smoke-test summaries.

Usage:
    python main.py [--export]
"""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from station_dashboard.config import ALIASES_FILE, EXPORT_DIR, HISTORY_FILE
from station_dashboard.loaders import load_aliases, load_history
from station_dashboard.simulator import generate_aliases, generate_history
from station_dashboard.identity import rename
from station_dashboard.rollup import rollup
from station_dashboard.pivot import build_pivot
from station_dashboard.ranking import RankingPolicy, precision_threshold, top_performers
from station_dashboard.trends import analyze
from station_dashboard.exports import export_filename, rollup_to_frame, write_report_workbook

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the reporting pipeline and print smoke-test outputs."""

    print("=" * 70)
    print("  DELIVERY STATION — Performance Reporting")
    print("  Reporting Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load history
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING HISTORY")
    print("-" * 40)

    history = load_history(HISTORY_FILE)
    aliases = load_aliases(ALIASES_FILE)
    if not history:
        logger.warning("No stored history; using simulated data")
        history = generate_history("2026-01-01", 90)
        aliases = generate_aliases()

    print(f"\nHistory: {len(history)} days, {history[0].date} to {history[-1].date}")
    print(f"Aliases: {len(aliases)} entries")

    # ------------------------------------------------------------------
    # 2. Rollup & pivots
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] ROLLUP & PIVOTS")
    print("-" * 40)

    result = rollup(history, alias_map=aliases)
    print(f"\nRollup: {len(result.per_worker)} workers, station "
          f"{result.station_total.delivered}/{result.station_total.total} "
          f"({result.station_total.computed_success_rate:.1f}%)")
    print(rollup_to_frame(result.per_worker).to_string(index=False))

    yearly = build_pivot(history, aliases)
    print(f"\nFull-history pivot mode: {yearly.mode.value}")
    quarter_cols = ["name"] + [f"{b.label}_total" for b in yearly.layout.blocks] + ["total", "rate"]
    print(yearly.to_frame()[quarter_cols].to_string(index=False))

    last_month = [r for r in history if (r.date.year, r.date.month) == (history[-1].date.year, history[-1].date.month)]
    monthly = build_pivot(last_month, aliases)
    print(f"\nLast-month pivot mode: {monthly.mode.value}")
    period_cols = ["name"] + [f"{b.label}_total" for b in monthly.layout.blocks] + ["total", "rate"]
    print(monthly.to_frame()[period_cols].to_string(index=False))

    # ------------------------------------------------------------------
    # 3. Leaderboards & calendar
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] LEADERBOARDS & CALENDAR")
    print("-" * 40)

    threshold = precision_threshold(result.per_worker)
    precise = top_performers(result.per_worker, 5, RankingPolicy.PRECISION)
    simple = top_performers(result.per_worker, 5, RankingPolicy.SIMPLE)
    print(f"\nPrecision top 5 (volume >= {threshold:.1f}):")
    for i, a in enumerate(precise, 1):
        print(f"  {i}. {a.name:20s} {a.success_rate:6.2f}%  ({a.total} shipments)")
    print("\nSimple top 5 (volume > 5):")
    for i, a in enumerate(simple, 1):
        print(f"  {i}. {a.name:20s} {a.success_rate:6.2f}%  ({a.total} shipments)")

    summary = analyze(history)
    print(f"\nBest day:     {summary.best_day.date}")
    print(f"Worst day:    {summary.worst_day.date}")
    print(f"Busiest day:  {summary.busiest_day.date}")
    print(f"Best weekday: {summary.best_weekday}")
    print(f"Avg daily volume: {summary.avg_daily_volume}")

    # ------------------------------------------------------------------
    # 4. Acceptance criteria verification
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] ACCEPTANCE CRITERIA CHECKS")
    print("-" * 40)

    # Check 1: rollup matches a direct sum over the records
    direct = sum(w.total for rec in history for w in rec.workers)
    check1 = direct == result.station_total.total
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] Rollup total {result.station_total.total} == direct sum {direct}")

    # Check 2: pivot blocks sum to the grand total row
    grand = yearly.grand_total
    check2 = sum(b.total for b in grand.blocks) == grand.summary.total == direct
    print(f"  [{'PASS' if check2 else 'FAIL'}] Pivot block totals sum to {grand.summary.total}")

    # Check 3: precision leaderboard respects the threshold
    check3 = all(a.total >= threshold for a in precise)
    print(f"  [{'PASS' if check3 else 'FAIL'}] Precision leaderboard respects volume >= {threshold:.1f}")

    # Check 4: a rename merges history under one canonical name
    renamed = rename("Hany Adel", "Hany Adel Fawzy", aliases)
    merged = {a.name for a in rollup(history, alias_map=renamed).per_worker}
    check4 = "HANY ADEL" not in merged and "HANY ADEL FAWZY" in merged
    print(f"  [{'PASS' if check4 else 'FAIL'}] Rename merges history under the new name")

    if "--export" in sys.argv:
        path = EXPORT_DIR / export_filename("Station Report", yearly)
        write_report_workbook(path, result.per_worker, yearly)
        print(f"\n  Exported workbook: {path}")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
