"""Tests for connection URL parsing."""

from __future__ import annotations

import pytest

from sqli.domains.connections.app.url_parser import is_connection_url, parse_connection_url


class TestParseConnectionUrl:
    def test_postgres_full(self):
        config = parse_connection_url("pg://alice:s3cret@db.example.com:6543/app")
        assert config.db_type == "postgresql"
        assert (config.host, config.port, config.user, config.password) == ("db.example.com", 6543, "alice", "s3cret")
        assert config.database == "app"
        assert config.name == "alice@db.example.com/app"
        assert not config.tls

    def test_tls_scheme(self):
        assert parse_connection_url("pgs://alice@secure.example.com/app").tls
        assert parse_connection_url("mys://root@localhost").tls

    def test_default_user_per_backend(self):
        assert parse_connection_url("my://localhost").user == "root"
        assert parse_connection_url("ch://localhost").user == "default"
        assert parse_connection_url("pg://localhost").user == "postgres"

    def test_no_database(self):
        config = parse_connection_url("my://root@localhost:3306")
        assert config.database is None
        assert config.name == "root@localhost"
        assert config.configured_database is None

    def test_percent_encoded_credentials(self):
        config = parse_connection_url("pg://us%40er:p%3Ass@localhost/app")
        assert config.user == "us@er"
        assert config.password == "p:ss"

    def test_explicit_name(self):
        assert parse_connection_url("pg://localhost/app", name="local").name == "local"

    def test_sqlite_absolute_path(self):
        config = parse_connection_url("sq:///var/data/shop.db")
        assert config.db_type == "sqlite"
        assert config.path == "/var/data/shop.db"
        assert config.name == "shop.db"
        assert config.configured_database == "shop.db"

    def test_sqlite_relative_path(self):
        assert parse_connection_url("sqlite://./local.db").path == "./local.db"

    def test_unknown_scheme(self):
        with pytest.raises(ValueError, match="Unknown database type"):
            parse_connection_url("oracle://localhost")

    def test_missing_separator(self):
        with pytest.raises(ValueError, match="missing"):
            parse_connection_url("localhost:5432")

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="Invalid port"):
            parse_connection_url("pg://localhost:notaport/app")


def test_is_connection_url():
    assert is_connection_url("pg://localhost")
    assert is_connection_url("SQ:///tmp/x.db")
    assert not is_connection_url("/tmp/x.db")
    assert not is_connection_url("ftp://example.com")
