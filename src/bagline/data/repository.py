from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from bagline.core.errors import StoreError, ValidationError
from bagline.core.models import Collections, PackagingRecord, Product, ProductionRecord, StopRecord, TeamMember
from bagline.core.stops import ACTIVE_STOP_EXISTS
from bagline.data.db import Db

logger = logging.getLogger(__name__)

Listener = Callable[[list], None]


def _product_from_row(r: sqlite3.Row) -> Product:
    return Product(id=str(r["id"]), name=str(r["name"]), weight_per_bag=int(r["weight_per_bag"]))


def _member_from_row(r: sqlite3.Row) -> TeamMember:
    box = r["box_number"]
    return TeamMember(
        id=str(r["id"]),
        name=str(r["name"]),
        role=str(r["role"]),
        box_number=int(box) if box is not None else None,
    )


def _production_from_row(r: sqlite3.Row) -> ProductionRecord:
    return ProductionRecord(
        id=str(r["id"]),
        date=str(r["date"]),
        time=str(r["time"]),
        box_number=int(r["box_number"]),
        product_id=str(r["product_id"]),
        quantity=int(r["quantity"]),
        observations=r["observations"],
        timestamp=int(r["timestamp"]),
    )


def _packaging_from_row(r: sqlite3.Row) -> PackagingRecord:
    return PackagingRecord(
        id=str(r["id"]),
        date=str(r["date"]),
        collaborator_id=str(r["collaborator_id"]),
        quantity=int(r["quantity"]),
        product_id=r["product_id"],
        timestamp=int(r["timestamp"]),
    )


def _stop_from_row(r: sqlite3.Row) -> StopRecord:
    duration = r["duration"]
    return StopRecord(
        id=str(r["id"]),
        sector=str(r["sector"]),
        date=str(r["date"]),
        start_time=str(r["start_time"]),
        end_date=r["end_date"],
        end_time=r["end_time"],
        reason=str(r["reason"]),
        duration=int(duration) if duration is not None else None,
        is_active=bool(r["is_active"]),
        timestamp=int(r["timestamp"]),
    )


# collection -> (table, ORDER BY, row converter)
_COLLECTIONS: dict[str, tuple[str, str, Callable[[sqlite3.Row], Any]]] = {
    "products": ("products", "name COLLATE NOCASE, id", _product_from_row),
    "team_members": ("team_members", "name COLLATE NOCASE, id", _member_from_row),
    "production_records": ("production_records", "timestamp DESC, rowid DESC", _production_from_row),
    "packaging_records": ("packaging_records", "timestamp DESC, rowid DESC", _packaging_from_row),
    "stop_records": ("stop_records", "timestamp DESC, rowid DESC", _stop_from_row),
}

DELETABLE = ("production_records", "packaging_records", "stop_records")


class Repository:
    """sqlite-backed record store.

    One table per collection. Every successful write pushes the full, ordered
    collection to the listeners registered with :meth:`subscribe`.
    """

    def __init__(self, db: Db):
        self.db = db
        self._listeners: dict[str, list[Listener]] = {name: [] for name in _COLLECTIONS}
        self._lock = threading.Lock()

    # ---------- Plumbing ----------
    @staticmethod
    def _collection_info(collection: str) -> tuple[str, str, Callable[[sqlite3.Row], Any]]:
        try:
            return _COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"coleção não suportada: {collection!r}") from None

    @contextmanager
    def _writing(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            with self.db.connect() as con:
                yield con
        except (sqlite3.Error, OverflowError) as e:
            raise StoreError(f"{action} failed: {e}") from e

    def list_collection(self, collection: str) -> list:
        table, order_by, convert = self._collection_info(collection)
        try:
            with self.db.connect() as con:
                rows = con.execute(f"SELECT * FROM {table} ORDER BY {order_by}").fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"reading {collection} failed: {e}") from e
        return [convert(r) for r in rows]

    def _insert(self, collection: str, values: dict[str, Any]) -> str:
        table, _, _ = self._collection_info(collection)
        cols = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        with self._writing(f"insert into {collection}") as con:
            con.execute(f"INSERT INTO {table}({cols}) VALUES({marks})", tuple(values.values()))
        self._notify(collection)
        return str(values["id"])

    def _update(self, collection: str, record_id: str, patch: dict[str, Any], *, allowed: set[str]) -> bool:
        table, _, _ = self._collection_info(collection)
        unknown = set(patch) - allowed
        if unknown:
            raise ValueError(f"campos não editáveis em {collection}: {sorted(unknown)}")
        if not patch:
            return False
        assignments = ", ".join(f"{k} = ?" for k in patch)
        with self._writing(f"update {collection}") as con:
            cur = con.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*patch.values(), str(record_id)),
            )
            changed = cur.rowcount > 0
        if changed:
            self._notify(collection)
        return changed

    def delete_record(self, *, collection: str, record_id: str) -> bool:
        if collection not in DELETABLE:
            raise ValueError(f"coleção não permite exclusão: {collection!r}")
        table, _, _ = self._collection_info(collection)
        with self._writing(f"delete from {collection}") as con:
            cur = con.execute(f"DELETE FROM {table} WHERE id = ?", (str(record_id),))
            removed = cur.rowcount > 0
        if removed:
            logger.info("Deleted %s/%s", collection, record_id)
            self._notify(collection)
        return removed

    # ---------- Subscriptions ----------
    def subscribe(self, collection: str, listener: Listener) -> Callable[[], None]:
        """Deliver the current collection now and after every change.

        Returns a callable that removes the listener.
        """
        self._collection_info(collection)
        with self._lock:
            self._listeners[collection].append(listener)
        self._deliver(listener, collection, self.list_collection(collection))

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners[collection]:
                    self._listeners[collection].remove(listener)

        return _unsubscribe

    def _notify(self, collection: str) -> None:
        with self._lock:
            listeners = list(self._listeners[collection])
        if not listeners:
            return
        try:
            items = self.list_collection(collection)
        except StoreError:
            logger.exception("Could not reload %s for listeners", collection)
            return
        for listener in listeners:
            self._deliver(listener, collection, items)

    @staticmethod
    def _deliver(listener: Listener, collection: str, items: list) -> None:
        try:
            listener(list(items))
        except Exception:
            # Listener errors never reach the writer.
            logger.exception("Listener for %s failed", collection)

    # ---------- Products ----------
    def list_products(self) -> list[Product]:
        return self.list_collection("products")

    def add_product(self, product: Product) -> str:
        return self._insert(
            "products",
            {"id": product.id, "name": product.name, "weight_per_bag": int(product.weight_per_bag)},
        )

    def update_product(self, *, product_id: str, patch: dict[str, Any]) -> bool:
        return self._update("products", product_id, patch, allowed={"name", "weight_per_bag"})

    # ---------- Team ----------
    def list_team_members(self) -> list[TeamMember]:
        return self.list_collection("team_members")

    def add_team_member(self, member: TeamMember) -> str:
        return self._insert(
            "team_members",
            {"id": member.id, "name": member.name, "role": member.role, "box_number": member.box_number},
        )

    # ---------- Production / packaging ----------
    def list_production_records(self) -> list[ProductionRecord]:
        return self.list_collection("production_records")

    def add_production_record(self, record: ProductionRecord) -> str:
        return self._insert(
            "production_records",
            {
                "id": record.id,
                "date": record.date,
                "time": record.time,
                "box_number": int(record.box_number),
                "product_id": record.product_id,
                "quantity": int(record.quantity),
                "observations": record.observations,
                "timestamp": int(record.timestamp),
            },
        )

    def list_packaging_records(self) -> list[PackagingRecord]:
        return self.list_collection("packaging_records")

    def add_packaging_record(self, record: PackagingRecord) -> str:
        return self._insert(
            "packaging_records",
            {
                "id": record.id,
                "date": record.date,
                "collaborator_id": record.collaborator_id,
                "quantity": int(record.quantity),
                "product_id": record.product_id,
                "timestamp": int(record.timestamp),
            },
        )

    # ---------- Stops ----------
    def list_stop_records(self) -> list[StopRecord]:
        return self.list_collection("stop_records")

    def get_stop_record(self, *, stop_id: str) -> StopRecord | None:
        try:
            with self.db.connect() as con:
                row = con.execute("SELECT * FROM stop_records WHERE id = ?", (str(stop_id),)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"reading stop {stop_id} failed: {e}") from e
        return _stop_from_row(row) if row is not None else None

    def add_stop_record(self, stop: StopRecord) -> str:
        with self._writing("insert into stop_records") as con:
            try:
                con.execute(
                    "INSERT INTO stop_records(id, sector, date, start_time, end_date, end_time, reason, "
                    "duration, is_active, timestamp) VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        stop.id,
                        stop.sector,
                        stop.date,
                        stop.start_time,
                        stop.end_date,
                        stop.end_time,
                        stop.reason,
                        stop.duration,
                        1 if stop.is_active else 0,
                        int(stop.timestamp),
                    ),
                )
            except sqlite3.IntegrityError as e:
                # Another client opened a stop for this sector after our snapshot was taken.
                if "stop_records.sector" in str(e):
                    raise ValidationError(ACTIVE_STOP_EXISTS) from e
                raise
        self._notify("stop_records")
        return stop.id

    def end_stop_record(self, *, stop: StopRecord) -> bool:
        """Persist an ended stop. Only applies while the stored row is still active."""
        with self._writing("end stop") as con:
            cur = con.execute(
                "UPDATE stop_records SET end_date = ?, end_time = ?, duration = ?, is_active = 0 "
                "WHERE id = ? AND is_active = 1",
                (stop.end_date, stop.end_time, stop.duration, stop.id),
            )
            changed = cur.rowcount > 0
        if changed:
            self._notify("stop_records")
        return changed

    # ---------- Snapshot ----------
    def snapshot(self) -> Collections:
        return Collections(
            products=self.list_products(),
            team_members=self.list_team_members(),
            production_records=self.list_production_records(),
            packaging_records=self.list_packaging_records(),
            stop_records=self.list_stop_records(),
        )
