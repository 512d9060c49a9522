"""
Tabular exports of rollups and pivot matrices.

Values are written unstyled; formatting belongs to the rendering layer.
Aggregate rates stay percentages (0-100), pivot rates stay fractions (0-1).
"""

import logging
import re
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from .models import AggregateRecord
from .pivot import PivotMatrix
from .rollup import ROLLUP_COLUMNS

logger = logging.getLogger(__name__)


def rollup_to_frame(aggregates: Sequence[AggregateRecord]) -> pd.DataFrame:
    """One row per worker, sorted by success rate (desc) then name."""
    if not aggregates:
        return pd.DataFrame(columns=ROLLUP_COLUMNS)
    df = pd.DataFrame(
        [{col: getattr(a, col) for col in ROLLUP_COLUMNS} for a in aggregates]
    )
    return df.sort_values(["success_rate", "name"], ascending=[False, True]).reset_index(drop=True)


def pivot_to_frame(pivot: PivotMatrix) -> pd.DataFrame:
    return pivot.to_frame()


def write_report_workbook(
    path: str | Path,
    aggregates: Sequence[AggregateRecord],
    pivot: PivotMatrix | None = None,
) -> Path:
    """Write a workbook with a 'Workers' sheet and, if given, a 'Matrix' sheet."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        rollup_to_frame(aggregates).to_excel(writer, sheet_name="Workers", index=False)
        if pivot is not None:
            pivot_to_frame(pivot).to_excel(writer, sheet_name="Matrix", index=False)

    logger.info("Wrote report workbook %s (%d workers)", path, len(aggregates))
    return path


def export_filename(title: str, pivot: PivotMatrix | None = None) -> str:
    """File name like ``Monthly_Report_-_3_2026_Monthly_Matrix.xlsx``."""
    stem = re.sub(r"[^\w.-]+", "_", title).strip("_")
    if pivot is None:
        return f"{stem}.xlsx"
    return f"{stem}_{pivot.mode.value.capitalize()}_Matrix.xlsx"
