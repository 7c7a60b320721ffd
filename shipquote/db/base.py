# shipquote/db/base.py
from __future__ import annotations

import importlib
import logging
import pkgutil
from typing import Iterable, Iterator, List, Set

from sqlalchemy.orm import DeclarativeBase, configure_mappers

log = logging.getLogger("shipquote.models")


class Base(DeclarativeBase):
    """Single ORM Base for every model."""

    pass


_INITIALIZED: bool = False


def _iter_model_modules(pkg_name: str = "shipquote.models") -> Iterator[str]:
    """Walk shipquote.models.* (modules starting with '_' are skipped)."""
    pkg = importlib.import_module(pkg_name)
    paths = list(getattr(pkg, "__path__", []))
    for _, name, _ in pkgutil.walk_packages(paths, prefix=pkg_name + "."):
        short = name.rsplit(".", 1)[-1]
        if short.startswith("_"):
            continue
        yield name


def init_models(*, exclude: Iterable[str] | None = None, force: bool = False) -> None:
    """
    Import every model module so Base.metadata is complete, then configure mappers.
    """
    global _INITIALIZED
    if _INITIALIZED and not force:
        return

    ex: Set[str] = set(exclude or [])
    loaded: List[str] = []
    for mod in _iter_model_modules():
        if mod in ex:
            continue
        importlib.import_module(mod)
        loaded.append(mod)

    configure_mappers()
    _INITIALIZED = True
    log.info("ORM models initialized & mappers configured (loaded %d modules)", len(loaded))
