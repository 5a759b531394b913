"""Email dispatch (Mailgun over HTTP). Sending happens after the response, see dispatch_verification_email."""
import logging
from datetime import datetime, timezone

import httpx

from app.config import Settings

log = logging.getLogger("uvicorn.error")

MAILGUN_US_BASE = "https://api.mailgun.net"
MAILGUN_EU_BASE = "https://api.eu.mailgun.net"


def mailgun_configured(settings: Settings) -> bool:
    return bool(settings.mailgun_api_key and settings.mailgun_domain)


def send_email(
    to_email: str,
    subject: str,
    html_content: str,
    settings: Settings,
    text_content: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> bool:
    """Send email via Mailgun. Returns True if Mailgun accepted the message."""
    if not mailgun_configured(settings):
        log.warning(
            "[Email] NOT SENT: to=%s subject=%s. MAILGUN_API_KEY=%s MAILGUN_DOMAIN=%s.",
            to_email,
            subject,
            "set" if settings.mailgun_api_key else "MISSING",
            "set" if settings.mailgun_domain else "MISSING",
        )
        return False

    base = (settings.mailgun_base_url or MAILGUN_US_BASE).rstrip("/")
    domain = settings.mailgun_domain.lower()
    from_addr = settings.mailgun_from_email
    from_domain = from_addr.split("@")[-1].lower() if "@" in from_addr else ""
    if from_domain != domain:
        # Mailgun drops mail whose sender domain differs from the sending domain.
        from_addr = f"noreply@{domain}"
    data = {
        "from": f"{settings.mailgun_from_name} <{from_addr}>",
        "to": to_email,
        "subject": subject,
        "text": text_content or "",
        "html": html_content or "",
    }
    auth = ("api", settings.mailgun_api_key)
    try:
        with httpx.Client(timeout=10.0, transport=transport) as client:
            r = client.post(f"{base}/v3/{domain}/messages", auth=auth, data=data)
            if 200 <= r.status_code < 300:
                log.info("[Mailgun] API success: to=%s status=%s", to_email, r.status_code)
                return True
            if r.status_code == 401 and base == MAILGUN_US_BASE:
                log.info("[Mailgun] 401 with US endpoint. Retrying with EU endpoint...")
                r = client.post(f"{MAILGUN_EU_BASE}/v3/{domain}/messages", auth=auth, data=data)
                if 200 <= r.status_code < 300:
                    log.info("[Mailgun] API success (EU): to=%s", to_email)
                    return True
            log.error("[Mailgun] API failed: status=%s to=%s body=%s", r.status_code, to_email, r.text[:500])
            return False
    except httpx.HTTPError as e:
        log.error("[Mailgun] Exception: to=%s error=%s: %s", to_email, type(e).__name__, e)
        return False


def render_verification_email(code: str, expire_minutes: int) -> tuple[str, str, str]:
    """Returns (subject, text, html)."""
    year = datetime.now(timezone.utc).year
    subject = "Your Vivimap Verification Code"
    text = f"Your Vivimap verification code is: {code}. It expires in {expire_minutes} minutes."
    html = f"""
    <div style="font-family: Arial, sans-serif; color: #333; line-height: 1.6;">
      <div style="max-width: 600px; margin: 20px auto; padding: 20px; border: 1px solid #ddd; border-radius: 10px;">
        <h1 style="color: #10B981; margin: 0; font-size: 28px; text-align: center;">Vivimap</h1>
        <h2 style="font-size: 24px;">Confirm Your Email Address</h2>
        <p>Welcome to Vivimap! To complete your registration, please use the verification code below.</p>
        <p style="text-align: center; font-size: 36px; font-weight: bold; letter-spacing: 8px; color: #10B981;">{code}</p>
        <p>This code will expire in <strong>{expire_minutes} minutes</strong>. If you did not request this code, you can safely ignore this email.</p>
        <p style="font-size: 12px; color: #888; text-align: center;">&copy; {year} Vivimap. All rights reserved.</p>
      </div>
    </div>
    """
    return subject, text, html


def send_verification_email(to_email: str, code: str, settings: Settings) -> bool:
    subject, text, html = render_verification_email(code, settings.verification_code_expire_minutes)
    log.info("[Verification] Sending code to %s code_len=%d", to_email, len(code))
    return send_email(to_email, subject, html, settings, text_content=text)


def dispatch_verification_email(to_email: str, code: str, settings: Settings, reason: str) -> None:
    """Background task run after the response has been sent.

    The request has already succeeded, so a failure here is only logged.
    """
    try:
        sent = send_verification_email(to_email, code, settings)
    except Exception:
        log.critical("[CRITICAL_EMAIL_FAILURE] Failed to send verification email (%s) to %s", reason, to_email, exc_info=True)
        return
    if not sent:
        log.critical("[CRITICAL_EMAIL_FAILURE] Failed to send verification email (%s) to %s", reason, to_email)
