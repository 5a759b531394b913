"""Password hashing and session tokens (JWT in an httpOnly cookie)."""
from datetime import datetime, timedelta, timezone
import bcrypt
import jwt
from fastapi import Response
from app.config import Settings
from app.models.user import User


def _pwd_bytes(password: str, max_len: int = 72) -> bytes:
    return password.encode("utf-8")[:max_len]


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_pwd_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt()).decode("utf-8")


def public_user(user: User) -> dict:
    """Fields of a user that may leave the server (and that the token carries)."""
    return {
        "id": str(user.id),
        "email": user.email,
        "fullName": user.full_name,
        "username": user.username,
    }


def create_session_token(user: User, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.session_expire_days)
    payload = {"user": public_user(user), "exp": expire}
    raw = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return raw if isinstance(raw, str) else raw.decode("utf-8")


def decode_session_token(token: str | None, settings: Settings) -> tuple[dict | None, str | None]:
    """Decode the session JWT; returns (user claims, error_message)."""
    if not token or not isinstance(token, str):
        return None, "empty token"
    try:
        payload = jwt.decode(token.strip(), settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        return None, str(e)
    except jwt.PyJWTError as e:
        return None, str(e)
    claims = payload.get("user")
    if not isinstance(claims, dict) or not claims.get("id"):
        return None, "token carries no user"
    return claims, None


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )
