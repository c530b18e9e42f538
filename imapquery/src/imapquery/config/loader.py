"""Locate, parse, and cache the imapquery runtime configuration.

What:
  Provide helpers to discover ``config.yaml``, parse it with PyYAML, validate
  it against :class:`~imapquery.config.schema.RuntimeConfig`, and cache the
  result for the lifetime of the process.

Why:
  Query defaults (fetch order, message key, date format) and connection
  settings live outside the code. Centralising the parsing enforces consistent
  validation and error messages for every entry point (CLI, library users,
  tests).

How:
  Resolve candidate file locations from an explicit argument, the
  ``IMAPQUERY_CONFIG_PATH`` environment variable, and well-known defaults.
  Parse the first existing file with ``yaml.safe_load`` and validate the
  mapping through pydantic. Failures are re-raised as
  :class:`RuntimeConfigError` carrying the file path.

Interfaces:
  :func:`load_runtime_config`, :func:`get_runtime_config`,
  :func:`reset_runtime_config`, :func:`get_query_options`, and the
  :class:`ConfigLoadError` / :class:`RuntimeConfigError` /
  :class:`ConfigNotFoundError` hierarchy.

Invariants:
  - Only validated models leave this module.
  - The cache is replaced on every explicit :func:`load_runtime_config` call
    and cleared by :func:`reset_runtime_config`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import yaml
from pydantic import ValidationError as _PydanticValidationError

from .schema import QueryOptions, RuntimeConfig


class ConfigLoadError(Exception):
    """Base error for configuration parsing or validation failures."""


class RuntimeConfigError(ConfigLoadError):
    """Raised when ``config.yaml`` cannot be located, parsed, or validated."""


class ConfigNotFoundError(RuntimeConfigError):
    """Raised when none of the candidate configuration paths exists."""


_CONFIG_ENV = "IMAPQUERY_CONFIG_PATH"
_DEFAULT_LOCATIONS: Tuple[Path, ...] = (
    Path("config.yaml"),
    Path("~/.config/imapquery/config.yaml"),
    Path("/etc/imapquery/config.yaml"),
)
_RUNTIME_CACHE: Optional[Tuple[Path, RuntimeConfig]] = None


def _candidate_paths(path: Optional[Path]) -> Iterable[Path]:
    """Yield configuration file locations in priority order, deduplicated."""

    seen: set[Path] = set()
    if path is not None:
        candidate = path.expanduser()
        seen.add(candidate)
        yield candidate
    env_path = os.environ.get(_CONFIG_ENV)
    if env_path:
        candidate = Path(env_path).expanduser()
        if candidate not in seen:
            seen.add(candidate)
            yield candidate
    for default in _DEFAULT_LOCATIONS:
        candidate = default.expanduser()
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def _parse_config_payload(text: str, source: Path) -> dict[str, Any]:
    """Parse ``config.yaml`` text into a mapping.

    Raises:
      RuntimeConfigError: If the YAML is invalid or not a mapping.
    """

    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise RuntimeConfigError(f"Invalid YAML in {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise RuntimeConfigError(f"{source} must contain a mapping at the top-level")
    return payload


def _load_runtime_from_path(path: Path) -> RuntimeConfig:
    """Load and validate ``config.yaml`` from a specific path.

    What:
      Read the file, parse it, and validate the result as a
      :class:`RuntimeConfig`.

    How:
      OS errors and schema violations are both converted into
      :class:`RuntimeConfigError` so callers have a single type to catch.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RuntimeConfigError(f"Configuration file missing: {path}") from exc
    except OSError as exc:
        raise RuntimeConfigError(f"Unable to read configuration file {path}: {exc}") from exc
    payload = _parse_config_payload(text, path)
    try:
        return RuntimeConfig.model_validate(payload)
    except _PydanticValidationError as exc:
        raise RuntimeConfigError(f"Invalid configuration in {path}: {exc}") from exc


def load_runtime_config(path: Optional[Path | str] = None, *, reload: bool = False) -> RuntimeConfig:
    """Locate, load, and cache the runtime configuration.

    What:
      Returns the validated :class:`RuntimeConfig` from the first existing
      candidate path.

    Why:
      Entry points need one call that honours the precedence chain (explicit
      argument, environment variable, defaults) and reuses the parsed model.

    How:
      When a cached model exists for the same path and ``reload`` is false the
      cache is returned. Otherwise every candidate is checked in order and the
      first existing file is loaded and cached.

    Args:
      path: Optional explicit location of ``config.yaml``.
      reload: Force re-reading the file even if it is cached.

    Returns:
      The validated runtime configuration.

    Raises:
      RuntimeConfigError: When no candidate exists or the file is invalid.
    """

    global _RUNTIME_CACHE
    explicit = Path(path) if path is not None else None
    if _RUNTIME_CACHE is not None and not reload:
        cached_path, cached = _RUNTIME_CACHE
        if explicit is None or explicit.expanduser() == cached_path:
            return cached
    searched = []
    for candidate in _candidate_paths(explicit):
        searched.append(str(candidate))
        if candidate.exists():
            config = _load_runtime_from_path(candidate)
            _RUNTIME_CACHE = (candidate, config)
            return config
    raise ConfigNotFoundError(f"Unable to locate config.yaml (searched: {', '.join(searched)})")


def get_runtime_config() -> RuntimeConfig:
    """Return the cached runtime configuration, loading it on first use."""

    if _RUNTIME_CACHE is not None:
        return _RUNTIME_CACHE[1]
    return load_runtime_config()


def reset_runtime_config() -> None:
    """Drop the cached runtime configuration (used by tests and reloads)."""

    global _RUNTIME_CACHE
    _RUNTIME_CACHE = None


def get_query_options() -> QueryOptions:
    """Return the configured query options, or defaults when no config exists.

    Library users frequently build a :class:`~imapquery.query.query.Query`
    without any ``config.yaml``; missing configuration therefore falls back to
    :class:`QueryOptions` defaults while invalid configuration still raises.
    """

    try:
        return get_runtime_config().options
    except ConfigNotFoundError:
        return QueryOptions()
