from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from config.settings import settings
from messaging.sms import Credentials, SmsClient

log = logging.getLogger("tigron.dispatcher")


class ConfigurationError(RuntimeError):
    pass


def _dest_hint(v: str, keep: int = 4) -> str:
    v = (v or "").strip()
    if not v:
        return ""
    if len(v) <= keep:
        return v
    return f"...{v[-keep:]}"


def sms_client_from_settings() -> SmsClient:
    if not settings.TIGRON_USERNAME or not settings.TIGRON_PASSWORD:
        raise ConfigurationError("Tigron credentials are not configured (TIGRON_USERNAME / TIGRON_PASSWORD)")
    return SmsClient(
        Credentials(settings.TIGRON_USERNAME, settings.TIGRON_PASSWORD),
        url=settings.TIGRON_SMS_URL,
        info_url=settings.TIGRON_USER_INFO_URL,
    )


class MessageDispatcher:
    def __init__(self, sms: Optional[SmsClient] = None):
        self.sms = sms

    async def send_sms(self, to_number: str, text: str, from_number: Optional[str] = None) -> Dict[str, Any]:
        from_number = from_number or settings.SMS_FROM_NUMBER
        if not from_number:
            log.warning(
                "message_send_skipped",
                extra={"extra": {"event": "message_send_skipped", "channel": "sms", "dest": _dest_hint(to_number)}},
            )
            return {"ok": False, "error_type": "missing_from_number", "message": "SMS_FROM_NUMBER is not configured"}

        if not self.sms:
            self.sms = sms_client_from_settings()

        t0 = time.time()
        log.info(
            "message_send_attempt",
            extra={"extra": {"event": "message_send_attempt", "channel": "sms", "dest": _dest_hint(to_number)}},
        )
        result = await self.sms.send(to_number, from_number, text)
        dt_ms = int((time.time() - t0) * 1000)
        log.info(
            "message_send_result",
            extra={
                "extra": {
                    "event": "message_send_result",
                    "channel": "sms",
                    "dest": _dest_hint(to_number),
                    "ok": result.ok,
                    "status_code": result.status_code,
                    "latency_ms": dt_ms,
                }
            },
        )
        if not result.ok:
            log.warning(
                "message_send_failed",
                extra={
                    "extra": {
                        "event": "message_send_failed",
                        "channel": "sms",
                        "kind": result.kind,
                        "error_type": result.error_type,
                        "message": result.message,
                        "status_code": result.status_code,
                    }
                },
            )
        return result.to_dict()
