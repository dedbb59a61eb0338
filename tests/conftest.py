"""Pytest fixtures for sqli tests."""

from __future__ import annotations

import os
import sqlite3
import tempfile
from pathlib import Path

import pytest

_TEST_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="sqli-test-config-"))
os.environ.setdefault("SQLI_CONFIG_DIR", str(_TEST_CONFIG_DIR))


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Ensure store singletons do not leak between tests."""
    from sqli.domains.connections.store.connections import ConnectionStore
    from sqli.domains.templates.store import TemplateStore

    ConnectionStore.reset_instance()
    TemplateStore.reset_instance()
    yield
    ConnectionStore.reset_instance()
    TemplateStore.reset_instance()


@pytest.fixture
def sqlite_db_path(tmp_path: Path) -> Path:
    """A SQLite database with a small users/orders schema."""
    db_path = tmp_path / "shop.db"
    conn = sqlite3.connect(db_path)
    conn.executescript(
        """
        CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT);
        CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, total REAL);
        INSERT INTO users (id, name, email) VALUES
            (1, 'Alice', 'alice@example.com'),
            (2, 'Bob', NULL),
            (3, 'Carol', 'carol@example.com');
        INSERT INTO orders (id, user_id, total) VALUES (1, 1, 9.5), (2, 3, 20.0);
        """
    )
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def template_store(tmp_path: Path):
    from sqli.domains.templates.store import TemplateStore

    return TemplateStore(tmp_path / "templates.sql")
