from datetime import date

import pytest

from station_dashboard.dashboard import (
    filter_report,
    get_advanced_report,
    get_available_years,
    get_overview,
    get_standup,
    get_worker_directory,
    get_worker_history,
    pending_counts,
    report_window,
    search_tracking,
)
from station_dashboard.pivot import PivotMode
from station_dashboard.simulator import generate_aliases, generate_history


def test_overview_stats(march_records):
    overview = get_overview(march_records, date(2026, 3, 1), date(2026, 3, 31), {"JON": "JOHN"})
    stats = overview["stats"]

    assert stats["total_volume"] == 250
    assert stats["total_delivered"] == 234
    assert stats["total_failed"] == 16
    assert stats["active_workers"] == 3
    assert stats["total_days"] == 5
    assert stats["overall_rate"] == pytest.approx(234 / 250 * 100)
    assert [a.name for a in overview["workers"]][0] == "SARA"
    assert len(overview["trend"]) == 5


def test_overview_search_filters_workers(march_records):
    overview = get_overview(march_records, search="sa")
    assert [a.name for a in overview["workers"]] == ["SARA"]


def test_report_window():
    assert report_window("monthly", 2026, 2)[:2] == (date(2026, 2, 1), date(2026, 2, 28))
    assert report_window("yearly", 2026)[:2] == (date(2026, 1, 1), date(2026, 12, 31))
    start, end, title = report_window("custom", start=date(2026, 1, 5), end=date(2026, 1, 9))
    assert (start, end) == (date(2026, 1, 5), date(2026, 1, 9))
    assert "Custom" in title
    with pytest.raises(ValueError):
        report_window("weekly")


def test_advanced_monthly_report_uses_monthly_pivot():
    history = generate_history("2026-01-01", 120, seed=5)
    report = get_advanced_report(history, "monthly", 2026, 2, alias_map=generate_aliases())

    assert report["pivot"].mode is PivotMode.MONTHLY
    assert all(r.date.month == 2 for r in report["records"])
    assert len(report["top10"]) <= 10
    assert report["stats"]["total_days"] == 28
    assert report["stats"]["best_weekday"] is not None


def test_advanced_yearly_report_uses_yearly_pivot():
    history = generate_history("2026-01-01", 120, seed=5)
    report = get_advanced_report(history, "yearly", 2026)
    assert report["pivot"].mode is PivotMode.YEARLY
    assert report["title"] == "Yearly Report - 2026"


def test_filter_report(march_records):
    report = get_overview(march_records, alias_map={"JON": "JOHN"})["workers"]
    assert [a.name for a in filter_report(report, min_volume=100)] == ["JOHN"]
    assert [a.name for a in filter_report(report, max_rate=90)] == ["ALI"]
    assert [a.name for a in filter_report(report, search="jo")] == ["JOHN"]


def test_worker_history_and_status_counts(shipment_record, march_records):
    detail = get_worker_history([shipment_record], "omar  khaled")
    assert detail["name"] == "OMAR KHALED"
    assert detail["status_counts"] == {"delivered": 1, "failed": 1, "ofd": 0, "rto": 1}
    assert detail["history"]["total"].tolist() == [3]

    john = get_worker_history(march_records, "John", {"JON": "JOHN"})
    assert len(john["history"]) == 4


def test_search_tracking_by_id_and_note(shipment_record):
    assert search_tracking([shipment_record], "trk002")["tracking_id"].tolist() == ["TRK002"]
    assert search_tracking([shipment_record], "refused")["status"].tolist() == ["rto"]
    assert len(search_tracking([shipment_record], "TRK", status="delivered")) == 1
    assert search_tracking([shipment_record], "nothing").empty


def test_available_years(march_records, record):
    records = march_records + [record(date(2025, 12, 31), ("A", 1, 1))]
    assert get_available_years(records) == [2026, 2025]


def test_worker_directory(march_records):
    directory = get_worker_directory(march_records, {"JON": "JOHN"})
    assert directory["name"].tolist() == ["JOHN", "SARA", "ALI"]
    john = directory.iloc[0]
    assert john["last_seen"] == date(2026, 3, 31)
    assert john["days_worked"] == 4


def test_overview_deltas_compare_previous_window(march_records):
    overview = get_overview(march_records, date(2026, 3, 11), date(2026, 3, 31), {"JON": "JOHN"})
    deltas = overview["deltas"]
    assert deltas["total_volume"] == pytest.approx((105 - 145) / 145 * 100)
    assert deltas["total_delivered"] == pytest.approx((101 - 133) / 133 * 100)
    assert get_overview(march_records)["deltas"] == {}


def test_pending_counts(march_records, shipment_record):
    assert pending_counts(march_records, {"JON": "JOHN"}) == {"JOHN": 10, "SARA": 2, "ALI": 4}
    assert pending_counts([shipment_record]) == {"OMAR KHALED": 1}


def test_standup(march_records):
    standup = get_standup(march_records, alias_map={"JON": "JOHN"}, target=95)
    assert [a.name for a in standup["opportunities"]] == ["ALI"]
    assert [a.name for a in standup["candidates"]] == ["JOHN", "ALI"]
    assert standup["pending"]["SARA"] == 2
