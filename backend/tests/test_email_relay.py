"""
Unit tests for the Resend email relay (HTTP faked)
"""

import pytest

import email_relay
from email_relay import ResendEmailRelay, split_recipients


class FakeResponse:
    def __init__(self, status, payload):
        self.status = status
        self._payload = payload

    async def json(self, content_type=None):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    calls = []

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error

    def post(self, url, json=None, headers=None, timeout=None):
        FakeSession.calls.append({"url": url, "json": json, "headers": headers})
        if self.error is not None:
            raise self.error
        return self.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def fake_http(monkeypatch):
    FakeSession.calls = []

    def install(response=None, error=None):
        monkeypatch.setattr(email_relay.aiohttp, "ClientSession",
                            lambda *a, **kw: FakeSession(response, error))
        return FakeSession.calls

    return install


MESSAGE = {"to": "a@x.io, b@x.io", "subject": "Digest", "body": "Hello", "provider": "Resend"}


def test_split_recipients():
    assert split_recipients(" a@x.io ,, b@x.io ") == ["a@x.io", "b@x.io"]
    assert split_recipients(None) == []


def test_build_payload():
    relay = ResendEmailRelay(api_key="k", default_from="bot@x.io")
    payload = relay.build_payload({**MESSAGE, "cc": "c@x.io", "useHtml": True})
    assert payload == {
        "from": "bot@x.io",
        "to": ["a@x.io", "b@x.io"],
        "subject": "Digest",
        "html": "Hello",
        "cc": ["c@x.io"],
    }


@pytest.mark.asyncio
async def test_missing_fields():
    result = await ResendEmailRelay(api_key="k").send({"to": "a@x.io", "subject": "s"})
    assert result == {"success": False, "error": "Missing required fields: to, subject, body"}


@pytest.mark.asyncio
async def test_unsupported_provider():
    result = await ResendEmailRelay(api_key="k").send({**MESSAGE, "provider": "SendGrid"})
    assert result == {"success": False, "error": "Unsupported provider: SendGrid"}


@pytest.mark.asyncio
async def test_dry_run_without_api_key(fake_http):
    calls = fake_http()
    result = await ResendEmailRelay(api_key="").send(MESSAGE)
    assert result == {"success": True, "id": "dry_run", "dryRun": True}
    assert calls == []


@pytest.mark.asyncio
async def test_live_send_without_api_key_fails():
    result = await ResendEmailRelay(api_key="").send({**MESSAGE, "dryRun": False})
    assert result["success"] is False
    assert "RESEND_API_KEY" in result["error"]


@pytest.mark.asyncio
async def test_missing_sender():
    result = await ResendEmailRelay(api_key="k", default_from="").send(MESSAGE)
    assert result["success"] is False
    assert result["error"].startswith("Sender email not set")


@pytest.mark.asyncio
async def test_send(fake_http):
    calls = fake_http(FakeResponse(200, {"id": "msg_123"}))
    result = await ResendEmailRelay(api_key="k", default_from="bot@x.io").send(MESSAGE)

    assert result == {"success": True, "id": "msg_123", "dryRun": False}
    assert calls[0]["headers"]["Authorization"] == "Bearer k"
    assert calls[0]["json"]["to"] == ["a@x.io", "b@x.io"]
    assert calls[0]["json"]["text"] == "Hello"


@pytest.mark.asyncio
async def test_http_error_is_reported(fake_http):
    fake_http(FakeResponse(422, {"message": "Invalid `from` field"}))
    result = await ResendEmailRelay(api_key="k", default_from="bot").send(MESSAGE)
    assert result == {"success": False, "error": "Invalid `from` field"}


@pytest.mark.asyncio
async def test_transport_error_is_reported(fake_http):
    fake_http(error=ConnectionError("connection reset"))
    result = await ResendEmailRelay(api_key="k", default_from="bot@x.io").send(MESSAGE)
    assert result == {"success": False, "error": "connection reset"}
