# worker_main.py
"""
Worker helper that:
 - closes challenges whose end_date has passed
 - runs once from the CLI or on an APScheduler interval
"""

import sys
import logging
import argparse

from apscheduler.schedulers.blocking import BlockingScheduler

from config.logging_config import configure_logging
from config.settings import settings

logger = logging.getLogger("worker")


def complete_expired_challenges(session_factory=None, cache=None, clock=None) -> int:
    """
    Mark every active challenge past its end_date as completed and drop the
    affected crews' cached challenge lists. Returns the number closed.
    """
    import models.index  # noqa: F401  registers every mapper
    from api.challenges.challenges_service import ChallengeService
    from config.database import SessionLocal
    from utils.clock import utcnow
    from utils.deps import get_cache

    db = (session_factory or SessionLocal)()
    try:
        service = ChallengeService(db, cache or get_cache(), clock or utcnow)
        closed = service.complete_expired()
        logger.info("closed %d expired challenge(s)", closed)
        return closed
    except Exception:
        db.rollback()
        logger.exception("failed to close expired challenges")
        raise
    finally:
        db.close()


def build_scheduler(minutes: int) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        complete_expired_challenges,
        "interval",
        minutes=minutes,
        id="complete_expired_challenges",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def main(argv=None):
    parser = argparse.ArgumentParser(description="Challenge maintenance worker")
    parser.add_argument("--run-sweep", action="store_true", help="Run complete_expired_challenges() once and exit")
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help=f"Minutes between sweeps (default {settings.CHALLENGE_SWEEP_MINUTES})",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.debug else None)

    if args.run_sweep:
        complete_expired_challenges()
        return 0

    minutes = args.interval or settings.CHALLENGE_SWEEP_MINUTES
    logger.info("worker started, sweeping every %d minute(s)", minutes)
    scheduler = build_scheduler(minutes)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("worker stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
