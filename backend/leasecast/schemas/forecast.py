from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict

from leasecast.models.enums import Confidence, RiskLevel
from leasecast.services.forecast_report import ForecastReport
from leasecast.services.vacancy_risk import RiskSummary


class ReportModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class RevenuePointOut(ReportModel):
    month: int
    year: int
    amount: Decimal


class ForecastPointOut(ReportModel):
    month: int
    year: int
    predicted_revenue: Decimal
    min_revenue: Decimal
    max_revenue: Decimal
    confidence: Confidence


class ForecastSummaryOut(BaseModel):
    next_month: ForecastPointOut | None = None
    next_quarter: Decimal
    next_half_year: Decimal


class RevenueForecastOut(BaseModel):
    history: list[RevenuePointOut]
    forecast: list[ForecastPointOut]
    total_forecast_revenue: Decimal
    avg_monthly_revenue: Decimal
    growth_rate_percent: Decimal
    summary: ForecastSummaryOut


class RiskAssessmentOut(ReportModel):
    lease_id: int
    room_name: str | None = None
    room_floor: int | None = None
    tenant_name: str | None = None
    tenant_phone: str | None = None
    end_date: datetime
    days_until_expiry: int
    months_rented: int
    overdue_invoice_count: int
    risk_score: int
    risk_level: RiskLevel
    monthly_rent: Decimal


class RiskSummaryOut(BaseModel):
    total_rooms: int | None = None
    rented_rooms: int
    high_risk_count: int
    medium_risk_count: int
    low_risk_count: int
    high_risk_revenue: Decimal
    medium_risk_revenue: Decimal
    low_risk_revenue: Decimal
    total_at_risk_revenue: Decimal

    @classmethod
    def from_summary(cls, summary: RiskSummary) -> "RiskSummaryOut":
        return cls(
            total_rooms=summary.total_rooms,
            rented_rooms=summary.rented_rooms,
            high_risk_count=summary.counts[RiskLevel.high],
            medium_risk_count=summary.counts[RiskLevel.medium],
            low_risk_count=summary.counts[RiskLevel.low],
            high_risk_revenue=summary.revenue[RiskLevel.high],
            medium_risk_revenue=summary.revenue[RiskLevel.medium],
            low_risk_revenue=summary.revenue[RiskLevel.low],
            total_at_risk_revenue=summary.total_at_risk_revenue,
        )


class VacancyRiskOut(BaseModel):
    risks: list[RiskAssessmentOut]
    summary: RiskSummaryOut


class ForecastReportOut(BaseModel):
    generated_at: datetime
    revenue_forecast: RevenueForecastOut
    vacancy_risk: VacancyRiskOut
    methodology: dict[str, dict[str, Any]]

    @classmethod
    def from_report(cls, report: ForecastReport) -> "ForecastReportOut":
        return cls(
            generated_at=report.generated_at,
            revenue_forecast=RevenueForecastOut(
                history=[RevenuePointOut.model_validate(point) for point in report.history],
                forecast=[ForecastPointOut.model_validate(point) for point in report.forecast],
                total_forecast_revenue=report.total_forecast_revenue,
                avg_monthly_revenue=report.avg_monthly_revenue,
                growth_rate_percent=report.growth_rate_percent,
                summary=ForecastSummaryOut(
                    next_month=(
                        ForecastPointOut.model_validate(report.next_month)
                        if report.next_month is not None
                        else None
                    ),
                    next_quarter=report.next_quarter,
                    next_half_year=report.next_half_year,
                ),
            ),
            vacancy_risk=VacancyRiskOut(
                risks=[RiskAssessmentOut.model_validate(item) for item in report.risks],
                summary=RiskSummaryOut.from_summary(report.risk_summary),
            ),
            methodology=report.methodology,
        )
