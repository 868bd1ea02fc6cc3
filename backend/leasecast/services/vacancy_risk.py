from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Iterable

from leasecast.models.enums import RiskLevel
from leasecast.utils.decimal_math import ceil_days, money, sum_money


logger = logging.getLogger("leasecast.vacancy")

DAYS_PER_TENURE_MONTH = 30

# Expiry proximity: (days until expiry upper bound, points), checked in order.
EXPIRY_WINDOWS: tuple[tuple[int, int], ...] = ((30, 50), (60, 30), (90, 15))
EXPIRY_WATCH_DAYS = 90

OVERDUE_INVOICE_WEIGHT = 10
OVERDUE_SCORE_CAP = 30

# Tenure discount: (months rented lower bound, points removed), checked in order.
TENURE_DISCOUNTS: tuple[tuple[int, int], ...] = ((12, 20), (6, 10))

HIGH_RISK_THRESHOLD = 50
MEDIUM_RISK_THRESHOLD = 25
MAX_RISK_SCORE = 100


@dataclass(frozen=True)
class LeaseSnapshot:
    """One active lease as read from the source.

    Naive datetimes are read as UTC.
    """

    lease_id: int
    start_date: datetime
    end_date: datetime | None
    monthly_rent: Decimal
    overdue_invoice_count: int = 0
    room_name: str | None = None
    room_floor: int | None = None
    tenant_name: str | None = None
    tenant_phone: str | None = None


@dataclass(frozen=True)
class RiskAssessment:
    lease_id: int
    days_until_expiry: int
    months_rented: int
    overdue_invoice_count: int
    risk_score: int
    risk_level: RiskLevel
    monthly_rent: Decimal
    end_date: datetime
    room_name: str | None = None
    room_floor: int | None = None
    tenant_name: str | None = None
    tenant_phone: str | None = None


@dataclass(frozen=True)
class RiskSummary:
    counts: dict[RiskLevel, int]
    revenue: dict[RiskLevel, Decimal]
    total_at_risk_revenue: Decimal
    rented_rooms: int
    total_rooms: int | None = None


@dataclass(frozen=True)
class VacancyRiskResult:
    risks: list[RiskAssessment]
    summary: RiskSummary


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def days_until(end_date: datetime, now: datetime) -> int:
    return ceil_days(as_utc(end_date) - as_utc(now))


def tenure_months(start_date: datetime, end_date: datetime) -> int:
    # Partial days count as whole days before the month split.
    days = ceil_days(as_utc(end_date) - as_utc(start_date))
    return max(0, days // DAYS_PER_TENURE_MONTH)


def expiry_points(days_until_expiry: int) -> int:
    for upper_bound, points in EXPIRY_WINDOWS:
        if days_until_expiry <= upper_bound:
            return points
    return 0


def overdue_points(overdue_invoice_count: int) -> int:
    return min(OVERDUE_SCORE_CAP, overdue_invoice_count * OVERDUE_INVOICE_WEIGHT)


def tenure_discount(months_rented: int) -> int:
    for lower_bound, points in TENURE_DISCOUNTS:
        if months_rented >= lower_bound:
            return points
    return 0


def risk_score(*, days_until_expiry: int, overdue_invoice_count: int, months_rented: int) -> int:
    raw = expiry_points(days_until_expiry) + overdue_points(overdue_invoice_count)
    return min(MAX_RISK_SCORE, max(0, raw - tenure_discount(months_rented)))


def classify_risk(score: int) -> RiskLevel:
    if score >= HIGH_RISK_THRESHOLD:
        return RiskLevel.high
    if score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.medium
    return RiskLevel.low


def is_reportable(*, score: int, days_until_expiry: int) -> bool:
    return score > 0 or days_until_expiry <= EXPIRY_WATCH_DAYS


def score_lease(lease: LeaseSnapshot, *, now: datetime) -> RiskAssessment | None:
    """Score one lease; ``None`` for open-ended leases, which carry no expiry risk."""
    if lease.end_date is None:
        return None
    days = days_until(lease.end_date, now)
    months = tenure_months(lease.start_date, lease.end_date)
    score = risk_score(
        days_until_expiry=days,
        overdue_invoice_count=lease.overdue_invoice_count,
        months_rented=months,
    )
    return RiskAssessment(
        lease_id=lease.lease_id,
        days_until_expiry=days,
        months_rented=months,
        overdue_invoice_count=lease.overdue_invoice_count,
        risk_score=score,
        risk_level=classify_risk(score),
        monthly_rent=money(lease.monthly_rent),
        end_date=as_utc(lease.end_date),
        room_name=lease.room_name,
        room_floor=lease.room_floor,
        tenant_name=lease.tenant_name,
        tenant_phone=lease.tenant_phone,
    )


def assess_lease(lease: LeaseSnapshot, *, now: datetime) -> RiskAssessment | None:
    """Scored assessment if the lease belongs in the risk list, otherwise ``None``."""
    assessment = score_lease(lease, now=now)
    if assessment is None:
        return None
    if not is_reportable(score=assessment.risk_score, days_until_expiry=assessment.days_until_expiry):
        return None
    return assessment


def summarize_risks(
    risks: Iterable[RiskAssessment],
    *,
    rented_rooms: int,
    total_rooms: int | None = None,
) -> RiskSummary:
    items = list(risks)
    counts = {level: 0 for level in RiskLevel}
    for item in items:
        counts[item.risk_level] += 1
    revenue = {
        level: sum_money(item.monthly_rent for item in items if item.risk_level == level)
        for level in RiskLevel
    }
    return RiskSummary(
        counts=counts,
        revenue=revenue,
        total_at_risk_revenue=money(revenue[RiskLevel.high] + revenue[RiskLevel.medium]),
        rented_rooms=rented_rooms,
        total_rooms=total_rooms,
    )


def score_vacancy_risk(
    leases: Iterable[LeaseSnapshot],
    *,
    now: datetime,
    total_rooms: int | None = None,
) -> VacancyRiskResult:
    snapshots = list(leases)
    assessed = (assess_lease(lease, now=now) for lease in snapshots)
    # sorted() is stable, so equal scores keep their input order.
    risks = sorted(
        (item for item in assessed if item is not None),
        key=lambda item: -item.risk_score,
    )
    logger.debug("Scored %d leases, %d reported as at risk", len(snapshots), len(risks))
    return VacancyRiskResult(
        risks=risks,
        summary=summarize_risks(risks, rented_rooms=len(snapshots), total_rooms=total_rooms),
    )
