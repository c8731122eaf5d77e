"""Tests for settings resolution and the audit log."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from campuslife.audit_log import (
    format_audit_entry,
    get_audit_log_path,
    log_operation,
    read_audit_log,
)
from campuslife.config import ENV_HOME, ENV_LOG_LEVEL, Settings, load_settings
from campuslife.errors import ValidationError
from campuslife.lifecycle import RemovalSummary


def test_defaults_without_config(tmp_path: Path) -> None:
    settings = load_settings(tmp_path, environ={})

    assert settings == Settings(home=tmp_path)
    assert settings.data_path == tmp_path / "campus_life_data.json"
    assert get_audit_log_path(settings.home) == tmp_path / "audit.log"


def test_config_file_section(tmp_path: Path) -> None:
    (tmp_path / "campuslife.toml").write_text(
        '[campuslife]\ndata_file = "club.json"\ndefault_pin = "1234"\nlog_level = "info"\naudit = false\n',
        encoding="utf-8",
    )

    settings = load_settings(tmp_path, environ={})

    assert settings.data_file == "club.json"
    assert settings.default_pin == "1234"
    assert settings.log_level == "INFO"
    assert settings.audit is False


def test_environment_overrides(tmp_path: Path) -> None:
    (tmp_path / "campuslife.toml").write_text('log_level = "ERROR"\n', encoding="utf-8")

    settings = load_settings(environ={ENV_HOME: str(tmp_path), ENV_LOG_LEVEL: "debug"})

    assert settings.home == tmp_path
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "content",
    [
        "not = [valid toml",
        '[campuslife]\ndefault_pin = "12a4"\n',
        '[campuslife]\nlog_level = "LOUD"\n',
    ],
)
def test_bad_config_is_rejected(tmp_path: Path, content: str) -> None:
    (tmp_path / "campuslife.toml").write_text(content, encoding="utf-8")

    with pytest.raises(ValidationError):
        load_settings(tmp_path, environ={})


def test_audit_log_roundtrip(tmp_path: Path) -> None:
    log_operation(tmp_path, "data.init", None)
    log_operation(tmp_path, "clubs.delete", "1", removed=RemovalSummary(clubs=1, events=2), metadata={"club": "7"})

    entries = read_audit_log(tmp_path)

    assert [e.operation for e in entries] == ["data.init", "clubs.delete"]
    assert entries[1].removed.events == 2
    assert entries[1].metadata == {"club": "7"}
    assert [e.operation for e in read_audit_log(tmp_path, last_n=1)] == ["clubs.delete"]
    assert read_audit_log(tmp_path, last_n=0) == []


def test_missing_audit_log(tmp_path: Path) -> None:
    assert read_audit_log(tmp_path / "nowhere") == []


def test_malformed_lines_are_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    log_operation(tmp_path, "users.create", "1")
    with get_audit_log_path(tmp_path).open("a", encoding="utf-8") as f:
        f.write("{not json\n\n")
    log_operation(tmp_path, "users.delete", "1")

    with caplog.at_level(logging.WARNING, logger="campuslife.audit_log"):
        entries = read_audit_log(tmp_path)

    assert [e.operation for e in entries] == ["users.create", "users.delete"]
    assert any("malformed audit line 2" in r.getMessage() for r in caplog.records)


def test_format_entry(tmp_path: Path) -> None:
    entry = log_operation(tmp_path, "users.delete", "1", removed=RemovalSummary(users=1, memberships=2))

    text = format_audit_entry(entry)

    assert "users.delete by 1" in text
    assert "Removed: 1 users, 2 memberships" in text
    assert "anonymous" in format_audit_entry(log_operation(tmp_path, "auth.signup", None))
