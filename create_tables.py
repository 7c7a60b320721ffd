# create_tables.py
from shipquote.core.config import get_settings
from shipquote.core.logging import setup_logging
from shipquote.db.session import create_all

settings = get_settings()
setup_logging(settings.LOG_LEVEL, json=settings.JSON_LOG)

print("creating shipquote tables...")

# registers every model on Base.metadata, then CREATE TABLE IF NOT EXISTS
create_all()

print("done.")
