"""MIME helpers used by :class:`~imapquery.imap.message.Message`.

What:
  Turn raw RFC822 payloads returned by ``FETCH`` into header mappings, bounded
  text/HTML bodies, and attachment descriptors.

Why:
  MIME semantics are outside the query engine's concern, yet a message handle
  still has to expose something readable. Keeping the parsing in one module
  lets the handle stay a thin data holder.

How:
  Use the ``email`` package's :class:`~email.parser.BytesParser` with the
  default policy, walk the MIME tree once, and truncate decoded text to
  :data:`MAX_BODY_BYTES`.

Interfaces:
  :class:`Attachment`, :class:`ParsedMessage`, :func:`parse_headers`,
  :func:`parse_message`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import Dict, List, Optional


MAX_BODY_BYTES = 1_000_000


@dataclass(frozen=True)
class Attachment:
    """One non-inline MIME part."""

    filename: Optional[str]
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return (
            f"Attachment(filename={self.filename!r}, "
            f"content_type={self.content_type!r}, size={self.size} bytes)"
        )


@dataclass
class ParsedMessage:
    """Result of :func:`parse_message`."""

    headers: Dict[str, str]
    text: str = ""
    html: str = ""
    attachments: List[Attachment] = field(default_factory=list)


def parse_headers(raw: bytes) -> Dict[str, str]:
    """Parse a header block into a mapping keyed by lowercase header name.

    Repeated headers keep their first occurrence.
    """

    message = BytesParser(policy=policy.default).parsebytes(raw, headersonly=True)
    headers: Dict[str, str] = {}
    for name, value in message.items():
        headers.setdefault(name.lower(), str(value))
    return headers


def parse_message(raw: bytes, *, include_attachments: bool = True) -> ParsedMessage:
    """Parse a full RFC822 message.

    Args:
      raw: Message bytes from a ``BODY[]``/``BODY.PEEK[]`` fetch.
      include_attachments: Whether attachment payloads are decoded and kept.

    Returns:
      :class:`ParsedMessage` with headers, first ``text/plain`` and
      ``text/html`` bodies, and attachments.
    """

    message = BytesParser(policy=policy.default).parsebytes(raw)
    headers: Dict[str, str] = {}
    for name, value in message.items():
        headers.setdefault(name.lower(), str(value))
    parsed = ParsedMessage(headers=headers)
    for part in message.walk():
        if part.is_multipart():
            continue
        disposition = part.get_content_disposition()
        content_type = part.get_content_type()
        if disposition == "attachment" or (disposition == "inline" and part.get_filename()):
            if include_attachments:
                payload = part.get_payload(decode=True) or b""
                parsed.attachments.append(
                    Attachment(filename=part.get_filename(), content_type=content_type, data=payload)
                )
            continue
        if content_type == "text/plain" and not parsed.text:
            parsed.text = _truncate(_text_content(part))
        elif content_type == "text/html" and not parsed.html:
            parsed.html = _truncate(_text_content(part))
    return parsed


def _text_content(part: EmailMessage) -> str:
    payload = part.get_content()
    if isinstance(payload, bytes):
        return payload.decode(part.get_content_charset("utf-8"), errors="ignore")
    return str(payload)


def _truncate(text: str) -> str:
    """Clamp ``text`` to :data:`MAX_BODY_BYTES` of UTF-8 without splitting code points."""

    encoded = text.encode("utf-8")
    if len(encoded) <= MAX_BODY_BYTES:
        return text
    return encoded[:MAX_BODY_BYTES].decode("utf-8", errors="ignore")
