# shipquote/db/generations.py
"""
Shared cache generations.

Every admin write bumps the counter of the partitions it touched before it
commits, so the bump becomes visible together with the data. Readers compare
the stored counter with what their process-local cache last saw and drop the
partition when they differ.
"""
from __future__ import annotations

from sqlalchemy import insert, select, update
from sqlalchemy.orm import Session

from shipquote.core.cache import PARTITIONS
from shipquote.models.config_generation import ConfigGeneration


def bump_generation(db: Session, *partitions: str) -> None:
    for partition in partitions:
        res = db.execute(
            update(ConfigGeneration)
            .where(ConfigGeneration.partition == partition)
            .values(generation=ConfigGeneration.generation + 1)
            .execution_options(synchronize_session=False)
        )
        if not res.rowcount:
            db.execute(insert(ConfigGeneration).values(partition=partition, generation=1))


def current_generation(db: Session, partition: str) -> int:
    value = db.execute(
        select(ConfigGeneration.generation).where(ConfigGeneration.partition == partition)
    ).scalar_one_or_none()
    return int(value or 0)


def seed_generations(db: Session) -> None:
    """Insert a zero row for every partition that has none yet."""
    have = set(db.execute(select(ConfigGeneration.partition)).scalars())
    missing = [p for p in PARTITIONS if p not in have]
    if missing:
        db.execute(insert(ConfigGeneration), [{"partition": p, "generation": 0} for p in missing])
    db.commit()
