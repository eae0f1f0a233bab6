from __future__ import annotations

# Tigron SMS API client. Credentials travel as HTTP basic auth; the send call
# form-encodes to/from/message and judges the outcome on the status code only.

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from xml.etree import ElementTree as ET

import httpx

SMS_SEND_URL = "https://api.tigron.net/soap/sms"
USER_INFO_URL = "https://api.tigron.net/soap/user"

KIND_TRANSPORT = "transport"
KIND_PROVIDER = "provider"


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class SendResult:
    ok: bool
    kind: str = ""
    error_type: str = ""
    message: str = ""
    status_code: int = 0

    @classmethod
    def success(cls, status_code: int = 200) -> "SendResult":
        return cls(ok=True, status_code=status_code)

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "status_code": self.status_code}
        return {
            "ok": False,
            "kind": self.kind,
            "error_type": self.error_type,
            "message": self.message,
            "status_code": self.status_code,
        }


def _local(tag: str) -> str:
    # "{https://www.tigron.net/ns/}key" -> "key"
    return tag.rsplit("}", 1)[-1]


def parse_info_items(xml: str) -> Dict[str, str]:
    """
    Flatten the <return><item><key/><value/></item>...</return> reply of an
    info call into a dict. The first value seen for a key wins, so nested
    items cannot shadow the top-level ones. Malformed XML gives an empty dict.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError:
        return {}

    items: Dict[str, str] = {}
    for ret in root.iter():
        if _local(ret.tag) != "return":
            continue
        for item in ret.iter():
            key = None
            value = None
            for child in item:
                name = _local(child.tag)
                if name == "key":
                    key = (child.text or "").strip()
                elif name == "value":
                    value = child.text or ""
            if key is not None and value is not None:
                items.setdefault(key, value)
    return items


def _rejection_message(r: httpx.Response) -> str:
    body = (r.text or "").strip()[:500]
    head = f"HTTP {r.status_code} {r.reason_phrase}".strip()
    return f"{head}: {body}" if body else head


class SmsClient:
    def __init__(
        self,
        credentials: Credentials,
        http_client: Optional[httpx.AsyncClient] = None,
        url: str = SMS_SEND_URL,
        info_url: str = USER_INFO_URL,
    ):
        self.credentials = credentials
        self.http_client = http_client
        self.url = url
        self.info_url = info_url

    @property
    def _auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.credentials.username, self.credentials.password)

    async def _post(self, url: str, data: Optional[Dict[str, str]] = None) -> httpx.Response:
        if self.http_client is not None:
            return await self.http_client.post(url, data=data, auth=self._auth)
        async with httpx.AsyncClient() as client:
            return await client.post(url, data=data, auth=self._auth)

    async def send(self, to: str, from_: str, message: str) -> SendResult:
        """
        Send one text message.

        :param to: destination number, e.g. +32.470000000 (not validated)
        :param from_: source number, same format (not validated)
        :param message: message body (length and encoding not checked)

        Never raises for network, encoding or provider errors; those come
        back as a failed SendResult.
        """
        payload = {"to": to, "from": from_, "message": message}
        try:
            r = await self._post(self.url, data=payload)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            # UnicodeEncodeError: text that cannot be form-encoded (lone surrogates)
            return SendResult(
                ok=False,
                kind=KIND_TRANSPORT,
                error_type=type(e).__name__,
                message=str(e) or type(e).__name__,
            )

        if r.is_success:
            return SendResult.success(r.status_code)
        return SendResult(
            ok=False,
            kind=KIND_PROVIDER,
            error_type="provider_rejected",
            message=_rejection_message(r),
            status_code=r.status_code,
        )

    async def user_info(self) -> Dict[str, str]:
        # Account lookup; unlike send() this raises on failure.
        r = await self._post(self.info_url)
        r.raise_for_status()
        return parse_info_items(r.text)

    async def user_id(self) -> str:
        return (await self.user_info()).get("id", "")
