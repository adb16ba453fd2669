# tests/test_mailer.py
import functools

import httpx
import pytest

from jobboard.core.config import settings
from jobboard.core.errors import ServerError
from jobboard.repositories import users as users_repo
from jobboard.services import mailer
from jobboard.services.mail_adapters import http_adapter, mock_adapter


@pytest.fixture(autouse=True)
def fresh_adapter(monkeypatch):
    monkeypatch.setattr(mailer, "_adapter", None)
    mock_adapter.OUTBOX.clear()
    yield
    mock_adapter.OUTBOX.clear()


def use_transport(monkeypatch, handler):
    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        http_adapter.httpx, "AsyncClient",
        functools.partial(real_client, transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_mock_adapter_records_messages():
    assert mailer.load_adapter("mock") is mock_adapter
    await mailer.send_email("a@example.com", "Hi", "<p>hello</p>")
    assert mock_adapter.OUTBOX == [
        {"from": settings.EMAIL_FROM, "to": "a@example.com", "subject": "Hi", "html": "<p>hello</p>"}
    ]


@pytest.mark.asyncio
async def test_http_adapter_without_url_falls_back_to_mock_in_development(monkeypatch):
    monkeypatch.setattr(settings, "APP_ENV", "development")
    monkeypatch.setattr(settings, "EMAIL_HTTP_URL", None)
    assert mailer.load_adapter("http") is mock_adapter
    assert mailer.load_adapter("no.such.module") is mock_adapter


@pytest.mark.asyncio
async def test_unusable_adapter_is_an_error_outside_development(monkeypatch):
    monkeypatch.setattr(settings, "APP_ENV", "production")
    monkeypatch.setattr(settings, "EMAIL_HTTP_URL", None)
    with pytest.raises(RuntimeError):
        mailer.load_adapter("http")

    monkeypatch.setattr(settings, "EMAIL_ADAPTER", "http")
    with pytest.raises(RuntimeError):
        await mailer.send_email("a@example.com", "Hi", "<p>hello</p>")
    assert mock_adapter.OUTBOX == []


@pytest.mark.asyncio
async def test_reset_request_rolls_back_when_mail_is_misconfigured(monkeypatch, identity, make_user):
    principal, _ = await make_user(role="employer", email="ops@example.com")
    monkeypatch.setattr(settings, "APP_ENV", "production")
    monkeypatch.setattr(settings, "EMAIL_ADAPTER", "http")
    monkeypatch.setattr(settings, "EMAIL_HTTP_URL", None)

    with pytest.raises(ServerError):
        await identity.request_password_reset("ops@example.com", "http://testserver/api/v1/auth/resetpassword")

    user = await users_repo.get_user(principal.user_id)
    assert user["reset_password_token"] is None
    assert mock_adapter.OUTBOX == []


@pytest.mark.asyncio
async def test_http_adapter_posts_json(monkeypatch):
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(202, json={"id": "msg-1"})

    monkeypatch.setattr(settings, "EMAIL_HTTP_URL", "https://mail.example.com/send")
    monkeypatch.setattr(settings, "EMAIL_API_KEY", "k-123")
    use_transport(monkeypatch, handler)

    assert mailer.load_adapter("http") is http_adapter
    result = await mailer.send_email("a@example.com", "Reset", "<b>x</b>")
    assert result == {"id": "msg-1"}
    assert len(seen) == 1
    assert seen[0].headers["authorization"] == "Bearer k-123"
    assert seen[0].url == "https://mail.example.com/send"


@pytest.mark.asyncio
async def test_http_adapter_retries_then_raises(monkeypatch):
    calls = []

    def handler(request: httpx.Request):
        calls.append(request)
        return httpx.Response(503)

    monkeypatch.setattr(settings, "EMAIL_HTTP_URL", "https://mail.example.com/send")
    monkeypatch.setattr(settings, "EMAIL_RETRIES", 2)
    monkeypatch.setattr(settings, "EMAIL_BACKOFF_FACTOR", 0)
    use_transport(monkeypatch, handler)
    mailer.load_adapter("http")

    # send failures are never masked by a fallback
    with pytest.raises(httpx.HTTPStatusError):
        await mailer.send_email("a@example.com", "Reset", "<b>x</b>")
    assert len(calls) == 3
    assert mock_adapter.OUTBOX == []
