"""Parse bracketed IMAP response codes out of server response text.

What:
  Extract RFC 3501 ``resp-text-code`` elements such as
  ``[BADCHARSET (UTF-8 US-ASCII)]`` or ``[TRYCREATE]`` from the text of a
  tagged server response.

Why:
  ``imapclient`` surfaces ``NO``/``BAD`` responses as exceptions whose
  message embeds the untouched response text. The search executor must react
  to ``BADCHARSET`` specifically; parsing the code and its argument list is
  less brittle than probing the message for substrings.

How:
  A regular expression locates every ``[ATOM args]`` group. Arguments wrapped
  in parentheses are split into a list of atoms/quoted strings; other
  arguments are kept as a single string.

Interfaces:
  :class:`ResponseCode`, :func:`parse_response_codes`,
  :func:`find_response_code`, :func:`badcharset_suggestions`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

_CODE_RE = re.compile(r"\[(?P<name>[A-Za-z][A-Za-z0-9.\-]*)(?:\s+(?P<args>[^\]]*))?\]")
_ARG_RE = re.compile(r'"((?:[^"\\]|\\.)*)"|([^\s()"]+)')

BADCHARSET = "BADCHARSET"


@dataclass(frozen=True)
class ResponseCode:
    """One ``[NAME args]`` element of a server response."""

    name: str
    arguments: Tuple[str, ...] = field(default_factory=tuple)


def _split_arguments(raw: str) -> Tuple[str, ...]:
    raw = raw.strip()
    if raw.startswith("(") and raw.endswith(")"):
        raw = raw[1:-1]
    values: List[str] = []
    for quoted, atom in _ARG_RE.findall(raw):
        if quoted:
            values.append(re.sub(r"\\(.)", r"\1", quoted))
        elif atom:
            values.append(atom)
    return tuple(values)


def parse_response_codes(text: str) -> List[ResponseCode]:
    """Return every response code found in ``text`` in order of appearance."""

    codes: List[ResponseCode] = []
    for match in _CODE_RE.finditer(text or ""):
        args = match.group("args")
        codes.append(
            ResponseCode(
                name=match.group("name").upper(),
                arguments=_split_arguments(args) if args else (),
            )
        )
    return codes


def find_response_code(text: str, name: str) -> Optional[ResponseCode]:
    """Return the first response code called ``name`` in ``text``, if any."""

    wanted = name.upper()
    for code in parse_response_codes(text):
        if code.name == wanted:
            return code
    return None


def badcharset_suggestions(text: str) -> List[str]:
    """Return the charsets a ``BADCHARSET`` response suggests, possibly empty."""

    code = find_response_code(text, BADCHARSET)
    if code is None:
        return []
    return list(code.arguments)
