"""Shared dependencies: settings, DB session, current user from the session cookie."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from app.config import Settings
from app.database import get_db
from app.errors import Unauthorized
from app.models.user import User
from app.services.auth import decode_session_token


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_claims(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """Protect gate: the request must carry a valid, signature-checked session cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise Unauthorized("Not authorized, no token provided")
    claims, _ = decode_session_token(token, settings)
    if not claims:
        raise Unauthorized("Not authorized, token failed")
    return claims


def get_current_user(
    db: Session = Depends(get_db),
    claims: dict = Depends(get_session_claims),
) -> User:
    try:
        user_id = int(claims.get("id"))
    except (TypeError, ValueError):
        raise Unauthorized("Not authorized, token failed")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise Unauthorized("Not authorized, user not found")
    return user
