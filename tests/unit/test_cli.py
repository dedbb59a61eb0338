"""Tests for the command-line entry point."""

from __future__ import annotations

import json

import pytest

from sqli.cli import build_parser, main


@pytest.fixture
def launched(monkeypatch):
    """Capture the connections the app would be started with."""
    from sqli.app import SqliApp

    captured = []

    def fake_run(self, *args, **kwargs):
        captured.append(self.controller.tab.connections)

    monkeypatch.setattr(SqliApp, "run", fake_run)
    return captured


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.connect == []
    assert not args.save
    assert not args.debug
    assert args.config is None


def test_version(capsys):
    with pytest.raises(SystemExit):
        main(["--version"])
    assert "sqli" in capsys.readouterr().out


def test_missing_config_file(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "missing.json")]) == 1
    assert "Config file not found" in capsys.readouterr().err


def test_invalid_url(capsys):
    assert main(["--connect", "nosuchdb://localhost"]) == 1
    assert "invalid connection URL" in capsys.readouterr().err


def test_connect_url_is_listed_first(tmp_path, launched):
    config = tmp_path / "connections.json"
    config.write_text(json.dumps([{"name": "saved", "db_type": "mysql"}]))

    assert main(["--config", str(config), "--connect", "sq:///data/shop.db"]) == 0
    assert [c.name for c in launched[0]] == ["shop.db", "saved"]
    # Not persisted without --save
    assert [entry["name"] for entry in json.loads(config.read_text())] == ["saved"]


def test_save_persists_connections(tmp_path, launched):
    config = tmp_path / "connections.json"
    config.write_text(json.dumps([{"name": "saved", "db_type": "mysql"}]))

    assert main(["--config", str(config), "--connect", "pg://alice@db/app", "--save"]) == 0
    saved = json.loads(config.read_text())
    assert [entry["name"] for entry in saved] == ["alice@db/app", "saved"]


def test_debug_flag_is_passed_to_logging(tmp_path, monkeypatch, launched):
    calls = []
    monkeypatch.setattr("sqli.cli.setup_logging", lambda debug: calls.append(debug))
    config = tmp_path / "connections.json"
    config.write_text("[]")
    assert main(["--config", str(config), "--debug"]) == 0
    assert calls == [True]
