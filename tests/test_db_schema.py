"""Tests for database schema and default seeding."""

import sqlite3
import tempfile
from pathlib import Path

import pytest

from bagline.data.db import DEFAULT_PRODUCTS, DEFAULT_TEAM_MEMBERS, Db


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    tmpdir = tempfile.mkdtemp()
    db_path = Path(tmpdir) / "test.db"
    db = Db(db_path)
    yield db, db_path

    try:
        for f in Path(tmpdir).glob("test.db*"):
            f.unlink(missing_ok=True)
        Path(tmpdir).rmdir()
    except OSError:
        pass


def test_ensure_schema_creates_all_tables(temp_db):
    db, _ = temp_db
    db.ensure_schema()

    with db.connect() as con:
        tables = {r[0] for r in con.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        indexes = {r[0] for r in con.execute("SELECT name FROM sqlite_master WHERE type='index'")}

    assert {"products", "team_members", "production_records", "packaging_records", "stop_records"} <= tables
    assert "ux_stop_records_active_sector" in indexes


def test_ensure_schema_is_idempotent_and_seeds_once(temp_db):
    db, _ = temp_db
    db.ensure_schema()
    db.ensure_schema()

    with db.connect() as con:
        products = con.execute("SELECT COUNT(*) FROM products").fetchone()[0]
        members = con.execute("SELECT COUNT(*) FROM team_members").fetchone()[0]

    assert products == len(DEFAULT_PRODUCTS)
    assert members == len(DEFAULT_TEAM_MEMBERS)


def test_seeding_can_be_disabled(temp_db):
    db, _ = temp_db
    db.ensure_schema(seed_defaults=False)

    with db.connect() as con:
        assert con.execute("SELECT COUNT(*) FROM products").fetchone()[0] == 0


def test_check_constraints_reject_bad_rows(temp_db):
    db, _ = temp_db
    db.ensure_schema(seed_defaults=False)

    with pytest.raises(sqlite3.IntegrityError):
        with db.connect() as con:
            con.execute(
                "INSERT INTO production_records(id, date, time, box_number, product_id, quantity, timestamp) "
                "VALUES('x', '2024-03-01', '09:00', 3, 'p1', 5, 0)"
            )

    with pytest.raises(sqlite3.IntegrityError):
        with db.connect() as con:
            con.execute("INSERT INTO team_members(id, name, role, box_number) VALUES('m', 'João', 'bagging', NULL)")


def test_only_one_active_stop_per_sector(temp_db):
    db, _ = temp_db
    db.ensure_schema(seed_defaults=False)
    insert = (
        "INSERT INTO stop_records(id, sector, date, start_time, reason, is_active, timestamp) "
        "VALUES(?, 'box1', '2024-03-01', '08:00', 'x', ?, 0)"
    )

    with db.connect() as con:
        con.execute(insert, ("s1", 1))
        con.execute(insert, ("s2", 0))  # ended stops do not count

    with pytest.raises(sqlite3.IntegrityError):
        with db.connect() as con:
            con.execute(insert, ("s3", 1))
