# shipquote/models/pincode_zone.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from shipquote.db.base import Base


class PincodeZone(Base):
    __tablename__ = "pincode_zones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    pincode: Mapped[str] = mapped_column(String(6), nullable=False, unique=True, index=True)
    zone: Mapped[str] = mapped_column(String(1), nullable=False, index=True)

    city: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    region: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    is_metro: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    is_remote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    cod_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    expected_delivery_days: Mapped[int] = mapped_column(Integer, nullable=False, default=5, server_default="5")
    zone_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, default=Decimal("1.00"), server_default="1.00"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<PincodeZone id={self.id} pincode={self.pincode!r} zone={self.zone}>"
