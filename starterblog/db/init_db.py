import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from starterblog.db.base import Base

logger = logging.getLogger("app")


def create_all_tables(engine: Engine) -> None:
    """Create any missing tables, logging the ones that are new."""
    existing_tables = inspect(engine).get_table_names()

    Base.metadata.create_all(bind=engine)

    new_tables = set(inspect(engine).get_table_names()) - set(existing_tables)
    if new_tables:
        logger.info(f"Created new tables: {new_tables}")
