# shipquote/models/delivery_option.py
from __future__ import annotations

from datetime import datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String, Text, Time, func
from sqlalchemy.orm import Mapped, mapped_column

from shipquote.db.base import Base


class DeliveryOption(Base):
    __tablename__ = "delivery_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    delivery_days_min: Mapped[int] = mapped_column(Integer, nullable=False)
    delivery_days_max: Mapped[int] = mapped_column(Integer, nullable=False)

    price_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, default=Decimal("1.00"), server_default="1.00"
    )
    fixed_surcharge: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0"), server_default="0"
    )

    # NULL / [] = every zone
    availability_zones: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    # tagged list, e.g. [{"type": "metro_only"}, {"type": "remote_surcharge", "amount": 100}]
    availability_conditions: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON, nullable=True)

    cutoff_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    # weekday ints, 0 = Sunday .. 6 = Saturday
    restricted_days: Mapped[Optional[List[int]]] = mapped_column(JSON, nullable=True)
    min_order_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<DeliveryOption id={self.id} code={self.code!r} active={self.is_active}>"
