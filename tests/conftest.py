"""Pytest configuration shared by every suite.

What:
  Put the in-repo ``imapquery/src`` tree on ``sys.path`` and point the runtime
  configuration at the canned ``tests/data/config.yaml`` for every test.

Why:
  Configuration is cached module-wide by :mod:`imapquery.config.loader`.
  Without an explicit reset, one test loading a different file would leak its
  options (fetch order, key strategy) into the next.

How:
  Insert the source directory once at import time, then use an autouse
  fixture that sets ``IMAPQUERY_CONFIG_PATH`` and clears the cache before and
  after each test.

Interfaces:
  :func:`runtime_config` (autouse pytest fixture), :data:`CONFIG_PATH`.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "imapquery" / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

import pytest

from imapquery.config.loader import reset_runtime_config

CONFIG_PATH = Path(__file__).resolve().parent / "data" / "config.yaml"


@pytest.fixture(autouse=True)
def runtime_config(monkeypatch: pytest.MonkeyPatch):
    """Apply the canned configuration file for every test."""

    monkeypatch.setenv("IMAPQUERY_CONFIG_PATH", str(CONFIG_PATH))
    reset_runtime_config()
    try:
        yield CONFIG_PATH
    finally:
        reset_runtime_config()
