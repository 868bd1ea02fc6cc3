from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leasecast.db.base import Base
from leasecast.models.enums import LeaseStatus


class Lease(Base):
    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False)
    resident_id: Mapped[int] = mapped_column(
        ForeignKey("residents.id", ondelete="RESTRICT"),
        nullable=False,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rent_price: Mapped[Decimal] = mapped_column(Numeric(24, 2), nullable=False)
    status: Mapped[LeaseStatus] = mapped_column(
        Enum(LeaseStatus, name="lease_status"),
        default=LeaseStatus.active,
        nullable=False,
        index=True,
    )

    room: Mapped["Room"] = relationship("Room", back_populates="leases")
    resident: Mapped["Resident"] = relationship("Resident", back_populates="leases")
    invoices: Mapped[list["Invoice"]] = relationship("Invoice", back_populates="lease")
