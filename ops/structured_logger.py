from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, IO, Optional

# Keys never written out as-is, whatever a caller puts in extra.
REDACTED_KEYS = frozenset({"password", "authorization", "credentials", "tigron_password"})


def _redact(extra: Dict[str, Any]) -> Dict[str, Any]:
    return {k: ("***" if k.lower() in REDACTED_KEYS else v) for k, v in extra.items()}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: severity, logger, message, UTC time, then the record's extra."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        }
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            payload.update(_redact(record.extra))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    # httpx logs every request at INFO; keep the API traffic out of the CLI output
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    root.handlers[:] = [handler]
