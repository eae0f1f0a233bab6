import logging

import pytest

from config.settings import Settings, settings
from messaging.dispatcher import ConfigurationError, MessageDispatcher, _dest_hint, sms_client_from_settings
from messaging.sms import SMS_SEND_URL, USER_INFO_URL, SendResult


class FakeSms:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def send(self, to, from_, message):
        self.calls.append((to, from_, message))
        return self.result


def test_dest_hint():
    assert _dest_hint("+32.470000001") == "...0001"
    assert _dest_hint("123") == "123"
    assert _dest_hint("") == ""


@pytest.mark.asyncio
async def test_send_sms_uses_default_from_number(monkeypatch):
    monkeypatch.setattr(settings, "SMS_FROM_NUMBER", "+32.470000001")
    sms = FakeSms(SendResult.success())
    resp = await MessageDispatcher(sms=sms).send_sms(to_number="+32.470000000", text="Hello world!")
    assert resp["ok"] is True
    assert sms.calls == [("+32.470000000", "+32.470000001", "Hello world!")]


@pytest.mark.asyncio
async def test_send_sms_logs_masked_destination(caplog):
    sms = FakeSms(SendResult(ok=False, kind="provider", error_type="provider_rejected", message="HTTP 401 Unauthorized", status_code=401))
    with caplog.at_level(logging.INFO, logger="tigron.dispatcher"):
        resp = await MessageDispatcher(sms=sms).send_sms("+32.470000000", "hi", from_number="+32.470000001")

    assert resp["ok"] is False
    assert resp["message"] == "HTTP 401 Unauthorized"
    events = [r.getMessage() for r in caplog.records]
    assert events == ["message_send_attempt", "message_send_result", "message_send_failed"]
    for r in caplog.records:
        assert "+32.470000000" not in str(r.extra)
    assert caplog.records[0].extra["dest"] == "...0000"


@pytest.mark.asyncio
async def test_send_sms_without_from_number_skips_send(monkeypatch):
    monkeypatch.setattr(settings, "SMS_FROM_NUMBER", "")
    sms = FakeSms(SendResult.success())
    resp = await MessageDispatcher(sms=sms).send_sms("+32.470000000", "hi")
    assert resp == {"ok": False, "error_type": "missing_from_number", "message": "SMS_FROM_NUMBER is not configured"}
    assert sms.calls == []


def test_client_from_settings_requires_credentials(monkeypatch):
    monkeypatch.setattr(settings, "TIGRON_USERNAME", "")
    monkeypatch.setattr(settings, "TIGRON_PASSWORD", "")
    with pytest.raises(ConfigurationError):
        sms_client_from_settings()


def test_client_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "TIGRON_USERNAME", "user1")
    monkeypatch.setattr(settings, "TIGRON_PASSWORD", "pass1")
    client = sms_client_from_settings()
    assert client.credentials.username == "user1"
    assert client.url == settings.TIGRON_SMS_URL
    assert client.http_client is None


@pytest.mark.asyncio
async def test_send_sms_log_fields(caplog):
    sms = FakeSms(SendResult.success(202))
    with caplog.at_level(logging.INFO, logger="tigron.dispatcher"):
        await MessageDispatcher(sms=sms).send_sms("+32.470000000", "hi", from_number="+32.470000001")
    result = caplog.records[-1].extra
    assert result["ok"] is True
    assert result["status_code"] == 202
    assert "revision" not in result


def test_settings_default_urls_match_client(monkeypatch):
    monkeypatch.delenv("TIGRON_SMS_URL", raising=False)
    monkeypatch.delenv("TIGRON_USER_INFO_URL", raising=False)
    defaults = Settings(_env_file=None)
    assert defaults.TIGRON_SMS_URL == SMS_SEND_URL
    assert defaults.TIGRON_USER_INFO_URL == USER_INFO_URL
