from datetime import datetime, timedelta, timezone
from decimal import Decimal

from leasecast.models.enums import Confidence, RiskLevel
from leasecast.schemas.forecast import ForecastReportOut
from leasecast.services.forecast_report import METHODOLOGY, compute_forecast_report
from leasecast.services.revenue_forecast import RevenuePoint
from leasecast.services.vacancy_risk import LeaseSnapshot
from leasecast.utils.decimal_math import money


NOW = datetime(2026, 6, 30, 23, 0, tzinfo=timezone.utc)


def _history() -> list[RevenuePoint]:
    amounts = ["41000000", "42500000", "40800000", "43900000", "45200000", "44100000",
               "46000000", "47350000", "46900000", "48800000", "49100000", "50250000"]
    points = []
    for offset, amount in enumerate(amounts):
        month = (6 + offset) % 12 + 1
        year = 2025 if month >= 7 else 2026
        points.append(RevenuePoint(month=month, year=year, amount=money(amount)))
    return points


def _leases() -> list[LeaseSnapshot]:
    return [
        LeaseSnapshot(
            lease_id=11,
            start_date=NOW - timedelta(days=400),
            end_date=NOW + timedelta(days=12),
            monthly_rent=money("3500000"),
            overdue_invoice_count=1,
            room_name="P201",
            room_floor=2,
            tenant_name="Tran Minh",
            tenant_phone="0900000001",
        ),
        LeaseSnapshot(
            lease_id=12,
            start_date=NOW - timedelta(days=10),
            end_date=NOW + timedelta(days=140),
            monthly_rent=money("2800000"),
            overdue_invoice_count=3,
        ),
        LeaseSnapshot(
            lease_id=13,
            start_date=NOW - timedelta(days=20),
            end_date=None,
            monthly_rent=money("3000000"),
        ),
        LeaseSnapshot(
            lease_id=14,
            start_date=NOW - timedelta(days=10),
            end_date=NOW + timedelta(days=200),
            monthly_rent=money("2600000"),
        ),
    ]


def test_report_rollups_match_forecast_points() -> None:
    report = compute_forecast_report(_history(), _leases(), NOW, 6)

    assert report.horizon == 6
    assert len(report.forecast) == 6
    assert report.next_month == report.forecast[0]
    assert report.next_quarter == sum(point.predicted_revenue for point in report.forecast[:3])
    assert report.next_half_year == report.total_forecast_revenue
    assert report.history == _history()
    assert report.growth_rate_percent > 0
    assert [(point.month, point.year) for point in report.forecast[:2]] == [(7, 2026), (8, 2026)]


def test_report_risk_section() -> None:
    report = compute_forecast_report(_history(), _leases(), NOW, 6, total_rooms=20)

    # 50 expiry + 10 overdue - 20 tenure; 30 overdue with under six months rented.
    assert [(item.lease_id, item.risk_score) for item in report.risks] == [(11, 40), (12, 30)]
    assert all(item.risk_level == RiskLevel.medium for item in report.risks)
    assert report.risk_summary.total_at_risk_revenue == money("6300000")
    assert report.risk_summary.rented_rooms == 4
    assert report.risk_summary.total_rooms == 20


def test_empty_history_report_uses_fallback_baseline() -> None:
    report = compute_forecast_report([], _leases(), NOW, 6, Decimal("11700000"))

    assert all(point.predicted_revenue == Decimal("11700000") for point in report.forecast)
    assert all(point.confidence == Confidence.low for point in report.forecast)
    assert report.avg_monthly_revenue == money("11700000")
    assert report.growth_rate_percent == 0
    assert report.next_quarter == money("35100000")


def test_short_horizon_keeps_quarter_rollup_exact() -> None:
    report = compute_forecast_report(_history()[:4], [], NOW, 2)
    assert report.next_quarter == report.next_half_year == report.total_forecast_revenue
    assert report.risks == []
    assert report.risk_summary.total_at_risk_revenue == money("0")


def test_report_is_deterministic() -> None:
    first = ForecastReportOut.from_report(compute_forecast_report(_history(), _leases(), NOW, 6)).model_dump_json()
    second = ForecastReportOut.from_report(compute_forecast_report(_history(), _leases(), NOW, 6)).model_dump_json()
    assert first == second


def test_serialized_report_shape() -> None:
    payload = ForecastReportOut.from_report(
        compute_forecast_report(_history(), _leases(), NOW, 6, total_rooms=20)
    ).model_dump(mode="json")

    revenue = payload["revenue_forecast"]
    assert len(revenue["history"]) == 12
    assert revenue["summary"]["next_month"] == revenue["forecast"][0]
    assert revenue["forecast"][0]["confidence"] in {"HIGH", "MEDIUM", "LOW"}

    risk = payload["vacancy_risk"]
    assert risk["risks"][0]["room_name"] == "P201"
    assert risk["risks"][0]["tenant_phone"] == "0900000001"
    assert risk["summary"]["medium_risk_count"] == 2
    assert risk["summary"]["high_risk_count"] == 0
    assert risk["summary"]["total_rooms"] == 20
    assert payload["methodology"] == METHODOLOGY
