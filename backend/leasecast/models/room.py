from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leasecast.db.base import Base


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)

    leases: Mapped[list["Lease"]] = relationship("Lease", back_populates="room")
