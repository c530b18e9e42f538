"""Pydantic models describing the imapquery configuration document."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FetchMode(str, Enum):
    """Whether fetching a message marks it as read."""

    PEEK = "peek"
    CONSUME = "consume"


class FetchOrder(str, Enum):
    """Order applied to a match set before pagination."""

    ASC = "asc"
    DESC = "desc"


class MessageKey(str, Enum):
    """Strategy used to key messages inside a result collection."""

    NUMBER = "number"
    LIST = "list"
    MESSAGE_ID = "message_id"


class ImapSettings(BaseModel):
    """Connection parameters for the IMAP server."""

    model_config = ConfigDict(extra="forbid")

    host: str
    port: int = Field(default=993, gt=0)
    ssl: bool = True
    username: str
    password: str
    mailbox: str = "INBOX"
    timeout: Optional[float] = Field(default=None, gt=0)


class QueryOptions(BaseModel):
    """Defaults applied to every :class:`~imapquery.query.query.Query`."""

    model_config = ConfigDict(extra="forbid")

    fetch: FetchMode = FetchMode.PEEK
    fetch_body: bool = True
    fetch_attachments: bool = True
    fetch_flags: bool = True
    fetch_order: FetchOrder = FetchOrder.ASC
    message_key: MessageKey = MessageKey.MESSAGE_ID
    date_format: str = "%d-%b-%Y"

    @field_validator("fetch_order", "message_key", "fetch", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("date_format")
    @classmethod
    def _non_empty_format(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("date_format must not be empty")
        return value


class IdleSettings(BaseModel):
    """Polling parameters for the idle watcher."""

    model_config = ConfigDict(extra="forbid")

    interval_s: float = Field(default=10, gt=0)


class RuntimeConfig(BaseModel):
    """Root configuration loaded from ``config.yaml``."""

    model_config = ConfigDict(extra="forbid")

    version: int = 1
    imap: ImapSettings
    options: QueryOptions = Field(default_factory=QueryOptions)
    idle: IdleSettings = Field(default_factory=IdleSettings)
