"""Encode search criterion values into SEARCH tokens.

What:
  Define the tagged union of criterion values (:class:`DateValue`,
  :class:`TextValue`), the pure :func:`encode` function that renders them, and
  :func:`parse_date`, which validates user-supplied dates.

Why:
  Dates must be rendered with the configured pattern while every other value
  is sent as its plain string form. Tagging values explicitly keeps that
  decision out of runtime type probing in the builder.

How:
  :func:`encode` dispatches on the tag. :func:`parse_date` accepts
  :class:`~datetime.date` objects unchanged and tries a fixed list of string
  formats; when all fail it raises
  :class:`~imapquery.errors.ValidationError` chained to the last parse error.

Interfaces:
  :class:`DateValue`, :class:`TextValue`, :data:`CriterionValue`,
  :func:`as_value`, :func:`encode`, :func:`parse_date`.

Invariants & Safety:
  - :func:`encode` is side-effect free: the same value and pattern always
    produce the same token.
  - :func:`parse_date` is idempotent for ``date``/``datetime`` inputs.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple, Union

from ..errors import ValidationError, ValidationKind

DEFAULT_DATE_FORMAT = "%d-%b-%Y"

# RFC 3501 date-month
_MONTHS: Tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_DATE_FORMATS: Tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y%m%d",
    "%d-%b-%Y",
    "%d %b %Y",
    "%d %b %y",
)


@dataclass(frozen=True)
class DateValue:
    """A calendar date criterion argument (``SINCE``, ``BEFORE``, ``ON``...)."""

    value: date


@dataclass(frozen=True)
class TextValue:
    """Any non-date criterion argument, rendered with ``str()``."""

    value: object


CriterionValue = Union[DateValue, TextValue]


def as_value(value: object) -> CriterionValue:
    """Tag ``value``: dates become :class:`DateValue`, anything else :class:`TextValue`."""

    if isinstance(value, (DateValue, TextValue)):
        return value
    if isinstance(value, date):
        return DateValue(value)
    return TextValue(value)


def encode(value: CriterionValue, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Render ``value`` as the text placed inside a quoted SEARCH argument.

    ``%b`` always renders the English month abbreviation IMAP dates require,
    whatever ``LC_TIME`` the host process has set.
    """

    if isinstance(value, DateValue):
        return value.value.strftime(_fixed_month(date_format, value.value.month))
    return str(value.value)


def _fixed_month(date_format: str, month: int) -> str:
    parts = date_format.split("%%")
    return "%%".join(part.replace("%b", _MONTHS[month - 1]) for part in parts)


def parse_date(value: Union[date, str]) -> date:
    """Validate that ``value`` denotes a calendar date.

    Args:
      value: A ``date``/``datetime`` (returned unchanged) or a date string in
        ISO-8601 or one of :data:`_DATE_FORMATS`.

    Returns:
      The parsed date; ``datetime`` inputs keep their time component.

    Raises:
      ValidationError: ``kind=INVALID_DATE`` when the value cannot be parsed.
    """

    if isinstance(value, date):
        return value
    last_error: Optional[Exception] = None
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text)
        except ValueError as exc:
            last_error = exc
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError as exc:
                last_error = exc
    else:
        last_error = TypeError(f"expected date or str, got {type(value).__name__}")
    raise ValidationError(
        f"Invalid date provided: {value!r}", kind=ValidationKind.INVALID_DATE
    ) from last_error
