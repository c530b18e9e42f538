"""Message handle built from one matched UID.

What:
  :class:`Message` fetches the header block (and, depending on the fetch
  configuration, flags and the full body) of a single message and exposes the
  identifiers the query layer keys collections by.

Why:
  The mapper needs a sequence number and a protocol ``Message-ID`` for every
  matched UID. Fetching them eagerly in the constructor means a missing or
  unreadable message fails while the result collection is being built, where
  the failure is reported as :class:`~imapquery.errors.FetchFailed`.

How:
  One ``FETCH`` per message requests ``BODY.PEEK[HEADER]`` plus ``FLAGS``
  when flags are wanted and ``BODY.PEEK[]`` (peek mode) or ``BODY[]``
  (consume mode) when the body or attachments are wanted.

Invariants & Safety:
  - Peek mode never sets ``\\Seen`` on the server.
  - A UID missing from the ``FETCH`` response raises :class:`LookupError`.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ..config.schema import FetchMode
from ..utils.mime import Attachment, parse_headers, parse_message
from .client import ImapClient

HEADER_PART = "BODY.PEEK[HEADER]"


class Message:
    """Addressable handle for one message of the selected mailbox.

    Attributes:
      uid: Server UID the handle was built from.
      position: Index of the UID in the server listing it came from.
      number: Message sequence number (falls back to the UID when the server
        does not report one).
      message_id: ``Message-ID`` header without surrounding whitespace, or
        ``None``.
    """

    def __init__(
        self,
        uid: int,
        position: int,
        client: ImapClient,
        fetch_options: FetchMode = FetchMode.PEEK,
        fetch_body: bool = True,
        fetch_attachments: bool = True,
        fetch_flags: bool = True,
    ) -> None:
        self.uid = int(uid)
        self.position = position
        self.fetch_options = FetchMode(fetch_options)
        self.fetch_body = fetch_body
        self.fetch_attachments = fetch_attachments
        self.fetch_flags = fetch_flags
        self._client = client

        self.number: int = self.uid
        self.headers: Dict[str, str] = {}
        self.flags: Tuple[str, ...] = ()
        self.text: str = ""
        self.html: str = ""
        self.attachments: List[Attachment] = []
        self._load()

    @property
    def message_id(self) -> Optional[str]:
        value = self.headers.get("message-id", "").strip()
        return value or None

    @property
    def subject(self) -> str:
        return self.headers.get("subject", "")

    @property
    def sender(self) -> str:
        return self.headers.get("from", "")

    @property
    def is_seen(self) -> bool:
        return "\\Seen" in self.flags

    def _parts(self) -> List[str]:
        parts = [HEADER_PART]
        if self.fetch_flags:
            parts.append("FLAGS")
        if self.fetch_body or self.fetch_attachments:
            parts.append("BODY.PEEK[]" if self.fetch_options is FetchMode.PEEK else "BODY[]")
        return parts

    def _load(self) -> None:
        response = self._client.fetch([self.uid], self._parts())
        data: Optional[Dict[bytes, Any]] = response.get(self.uid)
        if data is None:
            raise LookupError(f"UID {self.uid} not returned by FETCH")
        self.number = int(data.get(b"SEQ", self.uid))
        header_bytes = data.get(b"BODY[HEADER]") or b""
        self.headers = parse_headers(header_bytes)
        if self.fetch_flags:
            self.flags = tuple(
                flag.decode() if isinstance(flag, bytes) else str(flag)
                for flag in data.get(b"FLAGS", ())
            )
        body = data.get(b"BODY[]")
        if body is not None:
            parsed = parse_message(body, include_attachments=self.fetch_attachments)
            if self.fetch_body:
                self.text = parsed.text
                self.html = parsed.html
            self.attachments = parsed.attachments

    def __repr__(self) -> str:
        return f"Message(uid={self.uid}, number={self.number}, message_id={self.message_id!r})"
