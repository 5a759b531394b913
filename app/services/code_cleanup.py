"""Periodic maintenance: expired verification codes and idle rate-limit keys."""
import logging

from sqlalchemy.orm import Session, sessionmaker

from app.services.rate_limit import SlidingWindowRateLimiter
from app.services.verification import purge_expired_codes

CLEANUP_INTERVAL_SECONDS = 60


def run_code_cleanup_job(session_factory: sessionmaker) -> None:
    """Delete verification codes whose expiry has passed."""
    db: Session = session_factory()
    try:
        deleted = purge_expired_codes(db)
        db.commit()
        if deleted:
            logging.getLogger("uvicorn.error").info("[Cleanup] Deleted %d expired verification code(s).", deleted)
    finally:
        db.close()


def start_scheduler(session_factory: sessionmaker, rate_limiter: SlidingWindowRateLimiter):
    from apscheduler.schedulers.background import BackgroundScheduler

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_code_cleanup_job,
        "interval",
        seconds=CLEANUP_INTERVAL_SECONDS,
        args=[session_factory],
        id="verification_code_cleanup",
    )
    scheduler.add_job(rate_limiter.prune, "interval", seconds=CLEANUP_INTERVAL_SECONDS, id="rate_limit_prune")
    scheduler.start()
    return scheduler
