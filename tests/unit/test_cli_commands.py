"""
Module: tests/unit/test_cli_commands.py

What:
    Invoke the Typer commands with :class:`typer.testing.CliRunner` against
    the fake backend and check their output and exit codes.

Why:
    The CLI is the operator-facing surface; option parsing and error mapping
    regress easily when commands gain options.

How:
    ``imapquery.imap.client.IMAPClient`` is monkeypatched to return the fake
    backend; configuration comes from ``tests/data/config.yaml`` via the
    autouse fixture. Structured log lines share stdout with command output,
    so assertions filter them out.
"""

import pytest
from typer.testing import CliRunner

from imapquery.cli import app

runner = CliRunner()


def _plain_lines(output: str):
    return [line for line in output.splitlines() if line and not line.startswith("{")]


@pytest.fixture
def patched_backend(monkeypatch, backend):
    monkeypatch.setattr("imapquery.imap.client.IMAPClient", lambda *args, **kwargs: backend)
    return backend


def test_count_prints_number_of_matches(patched_backend):
    for subject in ("a", "b", "c"):
        patched_backend.add_message(subject)
    patched_backend.matches = [1, 3]

    result = runner.invoke(app, ["count", "--unseen", "--subject", "a"])
    assert result.exit_code == 0, result.output
    assert _plain_lines(result.output) == ["2"]
    assert patched_backend.search_calls[-1] == ('UNSEEN SUBJECT "a"', "UTF-8")


def test_count_without_criteria_selects_all(patched_backend):
    patched_backend.add_message()
    result = runner.invoke(app, ["count"])
    assert result.exit_code == 0, result.output
    assert _plain_lines(result.output) == ["1"]
    assert patched_backend.search_calls[-1] == ("ALL", "UTF-8")


def test_search_prints_page(patched_backend):
    for index in range(1, 6):
        patched_backend.add_message(f"subject {index}", message_id=f"<{index}@x>")

    result = runner.invoke(app, ["search", "--desc", "--limit", "2", "--page", "2"])
    assert result.exit_code == 0, result.output
    assert _plain_lines(result.output) == [
        "<3@x>\tsubject 3",
        "<2@x>\tsubject 2",
        "page 2/3 (5 total)",
    ]
    assert all("BODY.PEEK[]" not in parts for _, parts in patched_backend.fetch_calls)


def test_invalid_date_exits_with_error(patched_backend):
    result = runner.invoke(app, ["count", "--since", "someday"])
    assert result.exit_code == 1


def test_missing_config_exits_with_error(monkeypatch, tmp_path):
    monkeypatch.setenv("IMAPQUERY_CONFIG_PATH", str(tmp_path / "absent.yaml"))
    monkeypatch.setattr("imapquery.config.loader._DEFAULT_LOCATIONS", ())
    result = runner.invoke(app, ["count"])
    assert result.exit_code == 1


def test_watch_announces_new_messages(patched_backend):
    patched_backend.add_message("old")
    patched_backend.expunge_hooks.append(
        lambda b: b.add_message("brand new") if len(b.messages) == 1 else None
    )

    result = runner.invoke(app, ["watch", "--interval", "0", "--iterations", "1"])
    assert result.exit_code == 0, result.output
    assert _plain_lines(result.output) == ["new\t2\tbrand new"]


def test_connection_failure_exits_with_error(monkeypatch):
    def _refuse(*args, **kwargs):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr("imapquery.imap.client.IMAPClient", _refuse)
    result = runner.invoke(app, ["search"])
    assert result.exit_code == 1
