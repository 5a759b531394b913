import logging

import httpx

from app.config import Settings
from app.services import notifications
from app.services.notifications import dispatch_verification_email, render_verification_email, send_email


def _settings(**overrides):
    values = dict(
        jwt_secret_key="s",
        mailgun_api_key="key-123",
        mailgun_domain="mg.vivimap.test",
        mailgun_from_email="hello@other.test",
    )
    values.update(overrides)
    return Settings(**values)


def test_send_email_posts_to_mailgun_with_matching_sender():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "<msg@mg>"})

    ok = send_email("a@gmail.com", "Hi", "<p>Hi</p>", _settings(), transport=httpx.MockTransport(handler))
    assert ok
    assert seen[0].url == "https://api.mailgun.net/v3/mg.vivimap.test/messages"
    body = seen[0].content.decode()
    assert "noreply%40mg.vivimap.test" in body
    assert "a%40gmail.com" in body


def test_send_email_retries_eu_endpoint_on_401():
    hosts = []

    def handler(request):
        hosts.append(request.url.host)
        return httpx.Response(401 if request.url.host == "api.mailgun.net" else 200)

    assert send_email("a@gmail.com", "Hi", "", _settings(), transport=httpx.MockTransport(handler))
    assert hosts == ["api.mailgun.net", "api.eu.mailgun.net"]


def test_send_email_failure_and_unconfigured_return_false():
    failing = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    assert not send_email("a@gmail.com", "Hi", "", _settings(mailgun_base_url="https://eu.test"), transport=failing)
    assert not send_email("a@gmail.com", "Hi", "", _settings(mailgun_api_key=""))


def test_verification_email_mentions_code_and_expiry():
    subject, text, html = render_verification_email("12345", 5)
    assert "Verification Code" in subject
    assert "12345" in text and "12345" in html
    assert "5 minutes" in html


def test_dispatch_logs_critical_when_not_sent(monkeypatch, caplog):
    monkeypatch.setattr(notifications, "send_verification_email", lambda *a, **k: False)
    with caplog.at_level(logging.INFO, logger="uvicorn.error"):
        dispatch_verification_email("a@gmail.com", "12345", _settings(), "signup")
    critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
    assert len(critical) == 1
    assert "[CRITICAL_EMAIL_FAILURE]" in critical[0].getMessage()
