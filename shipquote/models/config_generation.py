# shipquote/models/config_generation.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from shipquote.db.base import Base


class ConfigGeneration(Base):
    """One counter per cache partition, bumped in the same transaction as the admin write."""

    __tablename__ = "config_generations"

    partition: Mapped[str] = mapped_column(String(32), primary_key=True)
    generation: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<ConfigGeneration {self.partition}={self.generation}>"
