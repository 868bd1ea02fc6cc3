from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
import logging
from typing import Sequence

from leasecast.models.enums import Confidence
from leasecast.utils.decimal_math import ZERO, money, pct, sum_money


logger = logging.getLogger("leasecast.forecast")

# Uncertainty assumed when there is too little history to measure variance.
SPARSE_HISTORY_STD_RATIO = Decimal("0.2")
# Band half-width as a fraction of the fitted standard deviation.
CONFIDENCE_BAND_RATIO = Decimal("0.3")

MIN_POINTS_FOR_GRADED_CONFIDENCE = 6
HIGH_CONFIDENCE_STD_RATIO = Decimal("0.2")
MEDIUM_CONFIDENCE_STD_RATIO = Decimal("0.4")


@dataclass(frozen=True)
class RevenuePoint:
    month: int
    year: int
    amount: Decimal


@dataclass(frozen=True)
class ForecastPoint:
    month: int
    year: int
    predicted_revenue: Decimal
    min_revenue: Decimal
    max_revenue: Decimal
    confidence: Confidence


@dataclass(frozen=True)
class TrendFit:
    slope: Decimal
    intercept: Decimal


@dataclass(frozen=True)
class RevenueForecast:
    history: list[RevenuePoint]
    points: list[ForecastPoint]
    trend: TrendFit
    avg_revenue: Decimal
    std_dev: Decimal
    confidence: Confidence
    total_forecast_revenue: Decimal
    growth_rate_percent: Decimal


def fit_trend(series: Sequence[Decimal], *, baseline: Decimal = ZERO) -> TrendFit:
    """Least-squares line over x = 1..n.

    One point gives a flat line through it, no points a flat line at ``baseline``.
    """
    n = len(series)
    if n == 0:
        return TrendFit(slope=ZERO, intercept=Decimal(baseline))
    if n == 1:
        return TrendFit(slope=ZERO, intercept=Decimal(series[0]))
    xs = range(1, n + 1)
    x_sum = Decimal(sum(xs))
    y_sum = sum((Decimal(value) for value in series), ZERO)
    xx_sum = Decimal(sum(x * x for x in xs))
    xy_sum = sum((Decimal(x) * Decimal(y) for x, y in zip(xs, series)), ZERO)
    denom = Decimal(n) * xx_sum - x_sum * x_sum
    if denom == 0:
        return TrendFit(slope=ZERO, intercept=y_sum / Decimal(n))
    slope = (Decimal(n) * xy_sum - x_sum * y_sum) / denom
    intercept = (y_sum - slope * x_sum) / Decimal(n)
    return TrendFit(slope=slope, intercept=intercept)


def _mean(values: Sequence[Decimal]) -> Decimal:
    return sum(values, ZERO) / Decimal(len(values))


def _std(values: Sequence[Decimal], mean: Decimal) -> Decimal:
    variance = sum(((value - mean) ** 2 for value in values), ZERO) / Decimal(len(values))
    return variance.sqrt() if variance > 0 else ZERO


def classify_confidence(n: int, std_dev: Decimal, avg_revenue: Decimal) -> Confidence:
    if n == 0:
        return Confidence.low
    if n < MIN_POINTS_FOR_GRADED_CONFIDENCE:
        return Confidence.medium
    if std_dev < avg_revenue * HIGH_CONFIDENCE_STD_RATIO:
        return Confidence.high
    if std_dev < avg_revenue * MEDIUM_CONFIDENCE_STD_RATIO:
        return Confidence.medium
    return Confidence.low


def add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def trailing_months(now: datetime, count: int) -> list[tuple[int, int]]:
    """(month, year) pairs for the ``count`` months ending with ``now``'s month, oldest first."""
    pairs: list[tuple[int, int]] = []
    for offset in range(count - 1, -1, -1):
        year, month = add_months(now.year, now.month, -offset)
        pairs.append((month, year))
    return pairs


def forecast_revenue(
    history: Sequence[RevenuePoint],
    *,
    horizon: int,
    now: datetime,
    baseline_monthly_revenue: Decimal = ZERO,
) -> RevenueForecast:
    """Project ``horizon`` months after ``now``.

    ``baseline_monthly_revenue`` is taken at cent precision and only used when
    ``history`` is empty.
    """
    amounts = [Decimal(point.amount) for point in history]
    n = len(amounts)
    trend = fit_trend(amounts, baseline=money(baseline_monthly_revenue))

    if n > 0:
        avg_revenue = _mean(amounts)
    else:
        avg_revenue = trend.intercept

    if n > 1:
        std_dev = _std(amounts, avg_revenue)
    else:
        # With n == 0 the average is the intercept, so both sparse cases share one rule.
        std_dev = avg_revenue * SPARSE_HISTORY_STD_RATIO

    confidence = classify_confidence(n, std_dev, avg_revenue)
    band = money(std_dev * CONFIDENCE_BAND_RATIO)

    points: list[ForecastPoint] = []
    for step in range(1, horizon + 1):
        if n > 0:
            raw = trend.slope * Decimal(n + step) + trend.intercept
        else:
            raw = trend.intercept
        predicted = money(max(ZERO, raw))
        year, month = add_months(now.year, now.month, step)
        points.append(
            ForecastPoint(
                month=month,
                year=year,
                predicted_revenue=predicted,
                min_revenue=max(money(0), predicted - band),
                max_revenue=predicted + band,
                confidence=confidence,
            )
        )

    total = sum_money(point.predicted_revenue for point in points)
    if avg_revenue > 0 and trend.slope > 0:
        growth_rate = pct(trend.slope / avg_revenue * Decimal("100"))
    else:
        # Flat and declining trends are reported as 0% growth, never negative.
        growth_rate = pct(0)

    logger.debug(
        "Revenue trend fitted over %d points: slope=%s intercept=%s std=%s confidence=%s",
        n,
        trend.slope,
        trend.intercept,
        std_dev,
        confidence.value,
    )
    return RevenueForecast(
        history=list(history),
        points=points,
        trend=trend,
        avg_revenue=money(avg_revenue),
        std_dev=std_dev,
        confidence=confidence,
        total_forecast_revenue=total,
        growth_rate_percent=growth_rate,
    )
