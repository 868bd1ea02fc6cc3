from datetime import datetime, timezone
from decimal import Decimal

from leasecast.models.enums import Confidence
from leasecast.services.revenue_forecast import (
    RevenuePoint,
    classify_confidence,
    fit_trend,
    forecast_revenue,
    trailing_months,
)
from leasecast.utils.decimal_math import money


NOW = datetime(2026, 3, 15, 9, 30, tzinfo=timezone.utc)


def _history(amounts: list[int | str], *, start_year: int = 2025, start_month: int = 4) -> list[RevenuePoint]:
    points = []
    for offset, amount in enumerate(amounts):
        index = start_year * 12 + start_month - 1 + offset
        points.append(RevenuePoint(month=index % 12 + 1, year=index // 12, amount=money(amount)))
    return points


def test_fitted_line_passes_through_the_mean() -> None:
    series = [Decimal("100"), Decimal("150"), Decimal("130"), Decimal("170"), Decimal("210")]
    trend = fit_trend(series)
    mean_x = Decimal("3")
    mean_y = sum(series) / Decimal(len(series))
    assert abs(trend.slope * mean_x + trend.intercept - mean_y) < Decimal("1e-12")
    assert trend.slope > 0


def test_fit_trend_with_single_point_is_flat_through_it() -> None:
    trend = fit_trend([Decimal("500")])
    assert trend.slope == 0
    assert trend.intercept == Decimal("500")


def test_fit_trend_without_points_uses_baseline() -> None:
    trend = fit_trend([], baseline=Decimal("6500000"))
    assert trend.slope == 0
    assert trend.intercept == Decimal("6500000")


def test_empty_history_forecasts_flat_baseline_with_low_confidence() -> None:
    result = forecast_revenue([], horizon=6, now=NOW, baseline_monthly_revenue=Decimal("13000000"))
    assert len(result.points) == 6
    for point in result.points:
        assert point.predicted_revenue == Decimal("13000000")
        assert point.confidence == Confidence.low
        # 20% assumed std dev, band is 30% of it.
        assert point.min_revenue == money("12220000")
        assert point.max_revenue == money("13780000")
    assert result.avg_revenue == money("13000000")
    assert result.growth_rate_percent == 0
    assert result.total_forecast_revenue == money("78000000")


def test_empty_history_baseline_is_taken_at_cent_precision() -> None:
    result = forecast_revenue([], horizon=3, now=NOW, baseline_monthly_revenue=Decimal("1000.005"))
    assert result.trend.intercept == money("1000.01")
    assert result.avg_revenue == result.trend.intercept
    assert all(point.predicted_revenue == result.trend.intercept for point in result.points)
    assert result.total_forecast_revenue == money("3000.03")


def test_single_point_history_uses_twenty_percent_uncertainty() -> None:
    result = forecast_revenue(_history([500]), horizon=3, now=NOW)
    assert [point.predicted_revenue for point in result.points] == [money("500")] * 3
    assert result.std_dev == Decimal("100")
    assert all(point.min_revenue == money("470") for point in result.points)
    assert all(point.max_revenue == money("530") for point in result.points)
    assert all(point.confidence == Confidence.medium for point in result.points)


def test_step_change_history_shows_positive_growth() -> None:
    history = _history([1_000_000] * 5 + [2_000_000] * 5)
    result = forecast_revenue(history, horizon=3, now=NOW)

    assert result.trend.slope > 0
    assert result.growth_rate_percent > 0
    assert result.avg_revenue == money("1500000")
    assert result.points[0].predicted_revenue == money("2333333.33")
    assert result.points[0].predicted_revenue < result.points[1].predicted_revenue < result.points[2].predicted_revenue
    assert result.confidence == Confidence.medium


def test_declining_trend_is_clamped_and_reports_zero_growth() -> None:
    result = forecast_revenue(_history([300, 250, 200, 150, 100, 50]), horizon=4, now=NOW)

    assert result.trend.slope < 0
    assert result.growth_rate_percent == 0
    assert all(point.predicted_revenue == money("0") for point in result.points)
    for point in result.points:
        assert money("0") <= point.min_revenue <= point.predicted_revenue <= point.max_revenue
    assert result.confidence == Confidence.low


def test_stable_history_is_high_confidence() -> None:
    result = forecast_revenue(_history([1000, 1010, 990, 1000, 1005, 995]), horizon=2, now=NOW)
    assert all(point.confidence == Confidence.high for point in result.points)


def test_confidence_needs_six_points_for_grading() -> None:
    assert classify_confidence(0, Decimal("0"), Decimal("0")) == Confidence.low
    assert classify_confidence(5, Decimal("0"), Decimal("1000")) == Confidence.medium
    assert classify_confidence(6, Decimal("199"), Decimal("1000")) == Confidence.high
    assert classify_confidence(6, Decimal("200"), Decimal("1000")) == Confidence.medium
    assert classify_confidence(6, Decimal("399"), Decimal("1000")) == Confidence.medium
    assert classify_confidence(6, Decimal("400"), Decimal("1000")) == Confidence.low


def test_bands_never_invert_on_noisy_history() -> None:
    history = _history([0, 4_000_000, 100_000, 3_500_000, 0, 2_900_000, 50_000, 10, 3_000_000])
    result = forecast_revenue(history, horizon=6, now=NOW)
    for point in result.points:
        assert point.min_revenue >= 0
        assert point.min_revenue <= point.predicted_revenue <= point.max_revenue


def test_forecast_months_follow_now_across_year_end() -> None:
    now = datetime(2026, 11, 2, tzinfo=timezone.utc)
    result = forecast_revenue(_history([100, 200]), horizon=3, now=now)
    assert [(point.month, point.year) for point in result.points] == [(12, 2026), (1, 2027), (2, 2027)]


def test_trailing_months_end_with_current_month() -> None:
    now = datetime(2026, 2, 10, tzinfo=timezone.utc)
    assert trailing_months(now, 3) == [(12, 2025), (1, 2026), (2, 2026)]
    assert len(trailing_months(now, 12)) == 12
    assert trailing_months(now, 12)[0] == (3, 2025)
