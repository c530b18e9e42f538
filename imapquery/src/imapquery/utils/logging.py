"""Structured JSON logging with redaction of message content.

What:
  Offer a tiny facade over Python streams so every imapquery component can
  emit JSON log lines with consistent fields and automatic removal of
  sensitive payloads.

Why:
  Search and watch loops run unattended. A structured layout keeps log
  parsing trivial, and mailbox content (subjects, bodies) must never end up in
  log files just because a developer attached a message to a log call.

How:
  :class:`JsonLogger` accepts a target stream and a component label. ``extra``
  dictionaries are copied and scrubbed via a recursive redaction helper before
  being serialised with ``json.dump``.

Interfaces:
  :class:`JsonLogger`, :func:`get_logger`.

Invariants & Safety:
  - Every payload includes an ISO8601 timestamp, severity, and component name.
  - Keys in :data:`SENSITIVE_KEYS` are replaced with ``[redacted]``, also
    inside nested dictionaries.
  - Streams are flushed after every write.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset({"subject", "body", "preview", "snippet", "password"})


@dataclass
class JsonLogger:
    """Structured JSON logger with automatic redaction.

    What:
      Emits single-line JSON entries with timestamp, severity, component tag,
      and optional supplemental fields.

    How:
      :meth:`log` merges a canonical payload with a redacted copy of the extras
      and writes it to :attr:`stream`. The level helpers forward keyword
      arguments as extras.
    """

    stream: Any = field(default_factory=lambda: sys.stdout)
    component: str = "imapquery"

    def log(self, level: str, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit a structured JSON log entry.

        Args:
          level: Human-readable severity (e.g. ``"info"``).
          message: Event name or short description.
          extra: Optional context dictionary, redacted recursively.
        """

        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "lvl": level.upper(),
            "msg": message,
            "component": self.component,
        }
        if extra:
            payload.update(self._redact(extra))
        json.dump(payload, self.stream, separators=(",", ":"), default=str)
        self.stream.write("\n")
        self.stream.flush()

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log("DEBUG", message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARN", message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, extra=kwargs)

    @staticmethod
    def _redact(data: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``data`` with sensitive keys masked."""

        result: Dict[str, Any] = {}
        for key, value in data.items():
            if key in SENSITIVE_KEYS:
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = JsonLogger._redact(value)
            else:
                result[key] = value
        return result


def get_logger(component: str) -> JsonLogger:
    """Construct a :class:`JsonLogger` bound to ``component`` writing to stdout."""

    return JsonLogger(component=component)
