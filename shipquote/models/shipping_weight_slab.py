# shipquote/models/shipping_weight_slab.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shipquote.db.base import Base


class ShippingWeightSlab(Base):
    __tablename__ = "shipping_weight_slabs"
    __table_args__ = (
        UniqueConstraint("courier_name", "base_weight", name="uq_weight_slabs_courier_weight"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    courier_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # upper boundary of the bracket (kg); slabs of one courier form an ascending ladder
    base_weight: Mapped[Decimal] = mapped_column(Numeric(8, 3), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    rates = relationship("ShippingZoneRate", back_populates="weight_slab", lazy="selectin")

    def __repr__(self) -> str:
        return f"<ShippingWeightSlab id={self.id} courier={self.courier_name!r} base_weight={self.base_weight}>"
