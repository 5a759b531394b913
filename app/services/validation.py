"""Signup input rules: email provider, password policy, name and username formats."""
from __future__ import annotations

import re
from dataclasses import dataclass, field

COMMON_PASSWORDS = frozenset({
    "123456", "password", "12345678", "qwerty", "123456789", "1234", "111111", "admin", "123123", "secret",
})

ALLOWED_EMAIL_DOMAINS = frozenset({
    "gmail.com", "yahoo.com", "outlook.com", "hotmail.com", "icloud.com", "aol.com",
    "mail.com", "protonmail.com", "live.com", "msn.com", "yandex.com", "zoho.com", "gmx.com", "me.com",
})

BLOCKED_EMAIL_DOMAINS = frozenset({
    "mailinator.com", "temp-mail.org", "10minutemail.com", "guerrillamail.com",
})

PASSWORD_MIN_LENGTH = 8
EMAIL_LOCAL_PART_MIN_CHECK = 3
FULL_NAME_MIN = 3
FULL_NAME_MAX = 50
USERNAME_MIN = 3
USERNAME_MAX = 20
VERIFICATION_CODE_LENGTH = 5

_FULL_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")
_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
_CODE_RE = re.compile(rf"^\d{{{VERIFICATION_CODE_LENGTH}}}$")


@dataclass
class PasswordValidationResult:
    is_valid: bool
    messages: list[str] = field(default_factory=list)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_email(email: str) -> str | None:
    """Returns an error message, or None when the address may register."""
    if not email or "@" not in email:
        return "Please enter a valid email address."
    domain = email.rsplit("@", 1)[1].lower()
    if domain in BLOCKED_EMAIL_DOMAINS:
        return "Temporary email addresses are not allowed."
    if domain not in ALLOWED_EMAIL_DOMAINS:
        return "Sorry, only popular email providers are allowed at this time."
    return None


def validate_password(password: str, email: str = "") -> PasswordValidationResult:
    """Collects every policy failure for password.

    The email local part is only checked when it is at least
    EMAIL_LOCAL_PART_MIN_CHECK (3) characters long; shorter local parts are ignored.
    """
    messages: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        messages.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.")
    if not re.search(r"\d", password) or not re.search(r"[a-zA-Z]", password):
        messages.append("Password must include both letters and numbers.")
    if password.lower() in COMMON_PASSWORDS:
        messages.append("Password is too common. Please choose a stronger one.")
    local_part = email.split("@", 1)[0] if email else ""
    if len(local_part) >= EMAIL_LOCAL_PART_MIN_CHECK and local_part.lower() in password.lower():
        messages.append("Password should not contain your email address.")
    return PasswordValidationResult(is_valid=not messages, messages=messages)


def validate_full_name(name: str) -> str | None:
    name = (name or "").strip()
    if len(name) < FULL_NAME_MIN:
        return f"Full name must be at least {FULL_NAME_MIN} characters."
    if len(name) > FULL_NAME_MAX:
        return f"Full name cannot exceed {FULL_NAME_MAX} characters."
    if not _FULL_NAME_RE.match(name):
        return "Full name can only contain letters, spaces, hyphens, and apostrophes."
    return None


def validate_username(username: str) -> str | None:
    username = (username or "").strip()
    if len(username) < USERNAME_MIN:
        return f"Username must be at least {USERNAME_MIN} characters."
    if len(username) > USERNAME_MAX:
        return f"Username cannot exceed {USERNAME_MAX} characters."
    if not _USERNAME_RE.match(username):
        return "Username can only contain letters, numbers, and underscores."
    return None


def validate_verification_code(code: str) -> str | None:
    if not _CODE_RE.match((code or "").strip()):
        return f"Please enter a valid {VERIFICATION_CODE_LENGTH}-digit code."
    return None
