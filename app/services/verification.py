"""Verification code store: at most one active code per email."""
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.models.verification_code import VerificationCode
from app.services.validation import VERIFICATION_CODE_LENGTH


def generate_verification_code() -> str:
    """Uniformly random 5-digit code (10000-99999)."""
    low = 10 ** (VERIFICATION_CODE_LENGTH - 1)
    return str(low + secrets.randbelow(9 * low))


def issue_code(db: Session, email: str, expire_minutes: int) -> VerificationCode:
    """Replace every code row for email with one fresh code. Commit is left to the caller."""
    db.query(VerificationCode).filter(VerificationCode.email == email).delete()
    row = VerificationCode(
        email=email,
        code=generate_verification_code(),
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=expire_minutes),
    )
    db.add(row)
    db.flush()
    return row


def find_valid_code(db: Session, email: str, code: str) -> VerificationCode | None:
    now = datetime.now(timezone.utc)
    return (
        db.query(VerificationCode)
        .filter(
            VerificationCode.email == email,
            VerificationCode.code == code,
            VerificationCode.expires_at > now,
        )
        .first()
    )


def consume_codes(db: Session, email: str) -> int:
    """Delete all codes for email once it is verified."""
    return db.query(VerificationCode).filter(VerificationCode.email == email).delete()


def purge_expired_codes(db: Session) -> int:
    now = datetime.now(timezone.utc)
    return db.query(VerificationCode).filter(VerificationCode.expires_at <= now).delete()
