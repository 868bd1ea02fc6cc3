from __future__ import annotations

from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from leasecast.core.config import Settings, get_settings
from leasecast.core.errors import DataUnavailable
from leasecast.models.enums import InvoiceStatus, LeaseStatus
from leasecast.models.invoice import Invoice
from leasecast.models.lease import Lease
from leasecast.models.room import Room
from leasecast.services.forecast_report import ForecastReport, compute_forecast_report
from leasecast.services.revenue_forecast import RevenuePoint, trailing_months
from leasecast.services.vacancy_risk import LeaseSnapshot, as_utc
from leasecast.utils.decimal_math import money, sum_money


logger = logging.getLogger("leasecast.sources")


def _as_decimal(value: Any, *, default: Decimal = Decimal("0")) -> Decimal:
    if value is None:
        return default
    return Decimal(str(value))


def fetch_revenue_history(db: Session, *, now: datetime, window_months: int) -> list[RevenuePoint]:
    """Paid revenue per month for the trailing window ending at ``now``'s month.

    Months without payments are zero-filled. A window with no paid invoices at all
    returns an empty list so the caller falls back to a rent-based baseline.
    """
    window = trailing_months(now, window_months)
    years = sorted({year for _, year in window})
    rows = db.execute(
        select(Invoice.year, Invoice.month, func.sum(Invoice.total_amount))
        .where(Invoice.status == InvoiceStatus.paid, Invoice.year.in_(years))
        .group_by(Invoice.year, Invoice.month)
    ).all()
    totals = {(int(year), int(month)): _as_decimal(total) for year, month, total in rows}
    if not any(key in totals for key in ((year, month) for month, year in window)):
        return []
    return [
        RevenuePoint(month=month, year=year, amount=money(totals.get((year, month), 0)))
        for month, year in window
    ]


def fetch_active_leases(db: Session) -> list[LeaseSnapshot]:
    overdue_counts = dict(
        db.execute(
            select(Invoice.lease_id, func.count(Invoice.id))
            .where(Invoice.status == InvoiceStatus.overdue)
            .group_by(Invoice.lease_id)
        ).all()
    )
    leases = db.scalars(
        select(Lease)
        .where(Lease.status == LeaseStatus.active)
        .options(selectinload(Lease.room), selectinload(Lease.resident))
        .order_by(Lease.id)
    ).all()
    return [
        LeaseSnapshot(
            lease_id=lease.id,
            # SQLite drops tzinfo on the way back; stored values are UTC.
            start_date=as_utc(lease.start_date),
            end_date=as_utc(lease.end_date) if lease.end_date is not None else None,
            monthly_rent=money(lease.rent_price),
            overdue_invoice_count=int(overdue_counts.get(lease.id, 0)),
            room_name=lease.room.name if lease.room else None,
            room_floor=lease.room.floor if lease.room else None,
            tenant_name=lease.resident.full_name if lease.resident else None,
            tenant_phone=lease.resident.phone if lease.resident else None,
        )
        for lease in leases
    ]


def count_rooms(db: Session) -> int:
    return int(db.scalar(select(func.count(Room.id))) or 0)


def estimate_baseline_revenue(leases: Iterable[LeaseSnapshot], *, uplift_factor: Decimal) -> Decimal:
    return money(sum_money(lease.monthly_rent for lease in leases) * uplift_factor)


def build_forecast_report(
    db: Session,
    *,
    now: datetime,
    settings: Settings | None = None,
) -> ForecastReport:
    settings = settings or get_settings()
    try:
        history = fetch_revenue_history(db, now=now, window_months=settings.history_window_months)
        leases = fetch_active_leases(db)
        total_rooms = count_rooms(db)
    except SQLAlchemyError as exc:
        logger.exception("Billing data could not be loaded for the forecast report.")
        raise DataUnavailable("Billing or lease data is unavailable.") from exc

    baseline = Decimal("0")
    if not history:
        baseline = estimate_baseline_revenue(leases, uplift_factor=settings.baseline_uplift_factor)
        logger.info("No revenue history in window; using rent-based baseline %s", baseline)

    return compute_forecast_report(
        history,
        leases,
        now,
        settings.forecast_horizon_months,
        baseline,
        total_rooms=total_rooms,
    )
