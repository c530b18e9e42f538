"""Query pipeline: criteria encoding, search, pagination, mapping, idle.

Interfaces:
  ``Query`` (the facade most callers need), ``QueryBuilder``, ``Statement``,
  ``DateValue``/``TextValue`` with ``encode``/``parse_date``,
  ``MessageCollection``/``LengthAwarePage``, ``IdleWatcher``.
"""

from .builder import QueryBuilder, Statement
from .collection import LengthAwarePage, MessageCollection
from .criteria import DateValue, TextValue, encode, parse_date
from .idle import IdleWatcher
from .query import Query

__all__ = [
    "Query",
    "QueryBuilder",
    "Statement",
    "DateValue",
    "TextValue",
    "encode",
    "parse_date",
    "LengthAwarePage",
    "MessageCollection",
    "IdleWatcher",
]
