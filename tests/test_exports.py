import pandas as pd

from station_dashboard.config import GRAND_TOTAL_LABEL
from station_dashboard.exports import export_filename, rollup_to_frame, write_report_workbook
from station_dashboard.pivot import build_pivot
from station_dashboard.rollup import rollup


def test_rollup_to_frame_sorted_by_rate(march_records):
    df = rollup_to_frame(rollup(march_records, alias_map={"JON": "JOHN"}).per_worker)
    assert df["name"].tolist() == ["SARA", "JOHN", "ALI"]
    assert df["success_rate"].max() <= 100


def test_rollup_to_frame_empty():
    assert rollup_to_frame([]).empty


def test_write_report_workbook(tmp_path, march_records):
    aggregates = rollup(march_records).per_worker
    pivot = build_pivot(march_records)
    path = write_report_workbook(tmp_path / "out" / "report.xlsx", aggregates, pivot)

    workers = pd.read_excel(path, sheet_name="Workers", engine="openpyxl")
    matrix = pd.read_excel(path, sheet_name="Matrix", engine="openpyxl")
    assert len(workers) == len(aggregates)
    assert matrix["name"].iloc[-1] == GRAND_TOTAL_LABEL
    assert matrix["total"].iloc[-1] == 250


def test_export_filename(march_records):
    pivot = build_pivot(march_records)
    assert export_filename("Monthly Report - 3/2026", pivot) == "Monthly_Report_-_3_2026_Monthly_Matrix.xlsx"
    assert export_filename("Station Report") == "Station_Report.xlsx"
