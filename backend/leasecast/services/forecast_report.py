from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Iterable, Sequence

from leasecast.services.revenue_forecast import (
    ForecastPoint,
    RevenueForecast,
    RevenuePoint,
    forecast_revenue,
)
from leasecast.services.vacancy_risk import (
    LeaseSnapshot,
    RiskAssessment,
    RiskSummary,
    score_vacancy_risk,
)
from leasecast.utils.decimal_math import ZERO, sum_money


logger = logging.getLogger("leasecast.report")

DEFAULT_HORIZON_MONTHS = 6
QUARTER_MONTHS = 3

METHODOLOGY: dict[str, dict[str, Any]] = {
    "revenue_forecast": {
        "method": "Linear regression trend",
        "description": (
            "Fits a least-squares trend to trailing monthly paid revenue and projects it forward. "
            "With no history the forecast is flat at a rent-based baseline."
        ),
        "factors": [
            "Trailing monthly paid revenue",
            "Revenue trend direction",
            "Revenue volatility (population standard deviation)",
            "Confidence band of +/-30% of the standard deviation",
        ],
    },
    "vacancy_risk": {
        "method": "Risk scoring",
        "description": "Weighted score of the factors that make an active lease likely to end in a vacancy.",
        "factors": [
            "Days until lease expiry (0-50 points)",
            "Overdue invoices (0-30 points)",
            "Lease length (0-20 point discount for long tenure)",
            "Score 0-100 (HIGH >= 50, MEDIUM 25-49, LOW < 25)",
        ],
    },
}


@dataclass(frozen=True)
class ForecastReport:
    generated_at: datetime
    horizon: int
    history: list[RevenuePoint]
    forecast: list[ForecastPoint]
    total_forecast_revenue: Decimal
    avg_monthly_revenue: Decimal
    growth_rate_percent: Decimal
    next_month: ForecastPoint | None
    next_quarter: Decimal
    next_half_year: Decimal
    risks: list[RiskAssessment]
    risk_summary: RiskSummary
    methodology: dict[str, dict[str, Any]]


def _sum_predicted(points: Sequence[ForecastPoint]) -> Decimal:
    return sum_money(point.predicted_revenue for point in points)


def assemble_report(
    revenue: RevenueForecast,
    risks: list[RiskAssessment],
    summary: RiskSummary,
    *,
    now: datetime,
    horizon: int,
) -> ForecastReport:
    points = revenue.points
    return ForecastReport(
        generated_at=now,
        horizon=horizon,
        history=revenue.history,
        forecast=points,
        total_forecast_revenue=revenue.total_forecast_revenue,
        avg_monthly_revenue=revenue.avg_revenue,
        growth_rate_percent=revenue.growth_rate_percent,
        next_month=points[0] if points else None,
        next_quarter=_sum_predicted(points[:QUARTER_MONTHS]),
        # Only a true half year when horizon is 6.
        next_half_year=_sum_predicted(points),
        risks=risks,
        risk_summary=summary,
        methodology=METHODOLOGY,
    )


def compute_forecast_report(
    history: Sequence[RevenuePoint],
    leases: Iterable[LeaseSnapshot],
    now: datetime,
    horizon: int = DEFAULT_HORIZON_MONTHS,
    fallback_baseline: Decimal = ZERO,
    *,
    total_rooms: int | None = None,
) -> ForecastReport:
    """Revenue forecast and vacancy risk for one snapshot of billing and lease data.

    ``now`` is injected so identical inputs always produce identical reports.
    ``fallback_baseline`` is only consulted when ``history`` is empty, at cent precision.
    """
    revenue = forecast_revenue(
        history,
        horizon=horizon,
        now=now,
        baseline_monthly_revenue=fallback_baseline,
    )
    vacancy = score_vacancy_risk(leases, now=now, total_rooms=total_rooms)
    logger.info(
        "Forecast report built: %d history points, %d forecast months, %d at-risk leases",
        len(revenue.history),
        len(revenue.points),
        len(vacancy.risks),
    )
    return assemble_report(revenue, vacancy.risks, vacancy.summary, now=now, horizon=horizon)
