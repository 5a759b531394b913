"""Account flow: signup -> email code -> verified session cookie."""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import Settings
from app.database import get_db
from app.dependencies import get_app_settings
from app.errors import (
    AlreadyVerified,
    ConflictError,
    InvalidCredentials,
    InvalidOrExpiredCode,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    MessageResponse,
    ResendVerificationRequest,
    SignupRequest,
    UserEnvelope,
    VerificationRequiredResponse,
    VerifyEmailRequest,
)
from app.services.auth import (
    clear_session_cookie,
    create_session_token,
    decode_session_token,
    get_password_hash,
    public_user,
    set_session_cookie,
    verify_password,
)
from app.services.notifications import dispatch_verification_email
from app.services.rate_limit import auth_rate_limit
from app.services.validation import normalize_email, validate_verification_code
from app.services.verification import consume_codes, find_valid_code, issue_code

log = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api/auth", tags=["auth"], dependencies=[Depends(auth_rate_limit)])


def _start_session(response: Response, user: User, settings: Settings) -> dict:
    set_session_cookie(response, create_session_token(user, settings), settings)
    return {"user": public_user(user)}


@router.post("/signup", status_code=201, response_model=MessageResponse)
def signup(
    data: SignupRequest,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    existing = db.query(User).filter(or_(User.email == data.email, User.username == data.username)).first()
    if existing:
        raise ConflictError()

    user = User(
        email=data.email,
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name,
        username=data.username,
        email_verified=False,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email/username.
        db.rollback()
        raise ConflictError()
    row = issue_code(db, user.email, settings.verification_code_expire_minutes)
    db.commit()
    log.info("[Auth] Signup user_id=%s; verification code issued", user.id)

    background.add_task(dispatch_verification_email, user.email, row.code, settings, "signup")
    return MessageResponse(message="User created. Please check your email for a verification code.")


@router.post("/verify-email", response_model=UserEnvelope)
def verify_email(
    data: VerifyEmailRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    email = normalize_email(data.email)
    code = (data.code or "").strip()
    if not email or not code:
        raise ValidationError("Email and verification code are required.")
    if validate_verification_code(code):
        raise InvalidOrExpiredCode()

    row = find_valid_code(db, email, code)
    if not row:
        raise InvalidOrExpiredCode()
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise InvalidOrExpiredCode()

    user.email_verified = True
    consume_codes(db, email)
    db.commit()
    db.refresh(user)
    log.info("[Auth] Email verified user_id=%s", user.id)
    return _start_session(response, user, settings)


@router.post(
    "/login",
    response_model=UserEnvelope,
    responses={403: {"model": VerificationRequiredResponse}},
)
def login(
    data: LoginRequest,
    response: Response,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    email = normalize_email(data.email)
    if not email or not data.password:
        raise ValidationError("Email and password are required.")

    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(data.password, user.hashed_password):
        raise InvalidCredentials()

    if not user.email_verified:
        row = issue_code(db, user.email, settings.verification_code_expire_minutes)
        db.commit()
        background.add_task(dispatch_verification_email, user.email, row.code, settings, "login")
        body = VerificationRequiredResponse(email=user.email)
        return JSONResponse(status_code=403, content=body.model_dump(by_alias=True), background=background)

    return _start_session(response, user, settings)


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    data: ResendVerificationRequest,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    email = normalize_email(data.email)
    if not email:
        raise ValidationError("Email is required.")
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise NotFound("User not found.")
    if user.email_verified:
        raise AlreadyVerified()

    row = issue_code(db, user.email, settings.verification_code_expire_minutes)
    db.commit()
    background.add_task(dispatch_verification_email, user.email, row.code, settings, "resend")
    return MessageResponse(message="A new verification code has been sent to your email.")


@router.get("/session", response_model=UserEnvelope)
def session(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise Unauthenticated("Not authenticated.")
    claims, _ = decode_session_token(token, settings)
    if not claims:
        raise Unauthenticated("Invalid token.")
    try:
        user_id = int(claims["id"])
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid token.")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found.")
    return {"user": public_user(user)}


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_app_settings)):
    clear_session_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")
