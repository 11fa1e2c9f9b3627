from __future__ import annotations

import sqlite3
from pathlib import Path

from bagline.core.validation import new_id

DEFAULT_PRODUCTS: list[tuple[str, int]] = [
    ("Ração Bovina", 30),
    ("Proteinado", 25),
]

DEFAULT_TEAM_MEMBERS: list[tuple[str, str, int | None]] = [
    ("Maria Silva", "packaging", None),
    ("Ana Costa", "packaging", None),
    ("João Santos", "bagging", 1),
    ("Pedro Lima", "bagging", 2),
]


class Db:
    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.path)
        con.row_factory = sqlite3.Row
        return con

    def ensure_schema(self, *, seed_defaults: bool = True) -> None:
        with self.connect() as con:
            con.execute("PRAGMA journal_mode=WAL;")

            con.executescript(
                """
                CREATE TABLE IF NOT EXISTS products (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    weight_per_bag INTEGER NOT NULL CHECK (weight_per_bag > 0)
                );

                CREATE TABLE IF NOT EXISTS team_members (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    role TEXT NOT NULL CHECK (role IN ('packaging', 'bagging')),
                    box_number INTEGER,
                    CHECK (
                        (role = 'bagging' AND box_number IN (1, 2))
                        OR (role = 'packaging' AND box_number IS NULL)
                    )
                );

                CREATE TABLE IF NOT EXISTS production_records (
                    id TEXT PRIMARY KEY,
                    date TEXT NOT NULL,
                    time TEXT NOT NULL,
                    box_number INTEGER NOT NULL CHECK (box_number IN (1, 2)),
                    product_id TEXT NOT NULL,
                    quantity INTEGER NOT NULL CHECK (quantity > 0),
                    observations TEXT,
                    timestamp INTEGER NOT NULL
                );

                CREATE TABLE IF NOT EXISTS packaging_records (
                    id TEXT PRIMARY KEY,
                    date TEXT NOT NULL,
                    collaborator_id TEXT NOT NULL,
                    quantity INTEGER NOT NULL CHECK (quantity > 0),
                    product_id TEXT,
                    timestamp INTEGER NOT NULL
                );

                CREATE TABLE IF NOT EXISTS stop_records (
                    id TEXT PRIMARY KEY,
                    sector TEXT NOT NULL CHECK (sector IN ('box1', 'box2', 'packaging')),
                    date TEXT NOT NULL,
                    start_time TEXT NOT NULL,
                    end_date TEXT,
                    end_time TEXT,
                    reason TEXT NOT NULL,
                    duration INTEGER CHECK (duration IS NULL OR duration >= 0),
                    is_active INTEGER NOT NULL DEFAULT 1,
                    timestamp INTEGER NOT NULL
                );

                CREATE INDEX IF NOT EXISTS ix_production_records_date ON production_records(date);
                CREATE INDEX IF NOT EXISTS ix_packaging_records_date ON packaging_records(date);
                CREATE INDEX IF NOT EXISTS ix_stop_records_date ON stop_records(date);
                """
            )

            # One active stop per sector, enforced at write time across clients.
            con.execute(
                "CREATE UNIQUE INDEX IF NOT EXISTS ux_stop_records_active_sector "
                "ON stop_records(sector) WHERE is_active = 1"
            )

            if not seed_defaults:
                return

            # Seed the default catalog only if it is empty, so user edits persist.
            products_count = int(con.execute("SELECT COUNT(*) FROM products").fetchone()[0])
            if products_count == 0:
                con.executemany(
                    "INSERT INTO products(id, name, weight_per_bag) VALUES(?, ?, ?)",
                    [(new_id(), name, weight) for name, weight in DEFAULT_PRODUCTS],
                )

            members_count = int(con.execute("SELECT COUNT(*) FROM team_members").fetchone()[0])
            if members_count == 0:
                con.executemany(
                    "INSERT INTO team_members(id, name, role, box_number) VALUES(?, ?, ?, ?)",
                    [(new_id(), name, role, box) for name, role, box in DEFAULT_TEAM_MEMBERS],
                )
