"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
"""
from app.models.user import User
from app.models.verification_code import VerificationCode
from app.models.memory import Memory

__all__ = [
    "User",
    "VerificationCode",
    "Memory",
]
