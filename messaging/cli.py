from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import httpx

from config.settings import settings
from messaging.dispatcher import ConfigurationError, MessageDispatcher, sms_client_from_settings
from ops.structured_logger import setup_logging

log = logging.getLogger("tigron.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tigron-sms", description="Send text messages through the Tigron SMS API.")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="send one message")
    send.add_argument("to", type=str, help="destination number, e.g. +32.470000000")
    send.add_argument("message", type=str)
    send.add_argument("--from", dest="from_number", default=None, help="source number (default: SMS_FROM_NUMBER)")

    sub.add_parser("info", help="print the account info returned by the API")
    return parser


async def _send(args: argparse.Namespace) -> int:
    resp = await MessageDispatcher().send_sms(to_number=args.to, text=args.message, from_number=args.from_number)
    if resp.get("ok"):
        print("sent")
        return 0
    print(f"send failed: {resp.get('message') or resp.get('error_type')}", file=sys.stderr)
    return 1


async def _info() -> int:
    client = sms_client_from_settings()
    try:
        items = await client.user_info()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        log.error("user_info_failed", extra={"extra": {"event": "user_info_failed", "error_type": type(e).__name__, "message": str(e)}})
        print(f"info failed: {e}", file=sys.stderr)
        return 1
    for key, value in items.items():
        print(f"{key}: {value}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.LOG_LEVEL)
    try:
        if args.command == "send":
            return asyncio.run(_send(args))
        return asyncio.run(_info())
    except ConfigurationError as e:
        print(str(e), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
