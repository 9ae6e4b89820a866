#!/usr/bin/env python3
import os
import sys
import time
import logging

from sqlalchemy import text
from sqlalchemy.exc import OperationalError

UVICORN_CMD = os.environ.get("UVICORN_CMD", "uvicorn main:app --host 0.0.0.0 --port 8080")

logger = logging.getLogger("prestart")


def wait_for_database(engine, max_retries: int = 10, delay: float = 2.0) -> bool:
    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except OperationalError as e:
            logger.warning("database not ready (attempt %d/%d): %s", attempt, max_retries, e)
            time.sleep(delay * attempt)
    return False


def run_migrations():
    from alembic import command
    from alembic.config import Config

    command.upgrade(Config(os.path.join(os.path.dirname(__file__), "alembic.ini")), "head")


def seed():
    import models.index  # noqa: F401
    from api.achievements.achievements_service import seed_achievements
    from config.database import SessionLocal

    db = SessionLocal()
    try:
        seed_achievements(db)
    finally:
        db.close()


def main():
    from config.database import engine
    from config.logging_config import configure_logging

    configure_logging()
    if not wait_for_database(engine):
        logger.error("database unreachable, giving up")
        sys.exit(1)
    run_migrations()
    seed()

    # Exec uvicorn (replace this process)
    args = UVICORN_CMD.split()
    logger.info("exec: %s", args)
    os.execvp(args[0], args)


if __name__ == "__main__":
    main()
