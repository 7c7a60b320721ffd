# shipquote/models/shipping_zone_rate.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shipquote.db.base import Base


class ShippingZoneRate(Base):
    """
    Rate matrix row: (weight slab -> courier, zone) -> prices.

    - fwd_rate       : forward price for the slab
    - aw_rate        : additional-weight price per top-slab unit (overage); NULL = overage rejected
    - cod_charges    : flat COD minimum
    - cod_percentage : COD percentage of the collected amount
    """

    __tablename__ = "shipping_zone_rates"
    __table_args__ = (UniqueConstraint("weight_slab_id", "zone", name="uq_zone_rates_slab_zone"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    weight_slab_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("shipping_weight_slabs.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    zone: Mapped[str] = mapped_column(String(1), nullable=False)

    fwd_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    aw_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    cod_charges: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0"), server_default="0"
    )
    cod_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0"), server_default="0"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    weight_slab = relationship("ShippingWeightSlab", back_populates="rates")

    def __repr__(self) -> str:
        return f"<ShippingZoneRate id={self.id} slab_id={self.weight_slab_id} zone={self.zone} fwd={self.fwd_rate}>"
