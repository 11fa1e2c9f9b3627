from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from bagline.core.models import PackagingRecord, Product, ProductionRecord, StopRecord, TeamMember

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "N/A"
UNSPECIFIED_LABEL = "Não especificado"

SECTOR_LABELS: dict[str, str] = {
    "box1": "Caixa 01",
    "box2": "Caixa 02",
    "packaging": "Embalagem",
}

HOURS: tuple[str, ...] = tuple(f"{h:02d}:00" for h in range(24))


@dataclass(frozen=True)
class DailyProduction:
    box1: int
    box2: int
    total: int


@dataclass(frozen=True)
class HourlyBucket:
    hour: str
    box1: int
    box2: int

    @property
    def total(self) -> int:
        return self.box1 + self.box2


@dataclass(frozen=True)
class CollaboratorTotal:
    member_id: str
    name: str
    total: int


@dataclass(frozen=True)
class StopSummary:
    total_stops: int
    total_minutes: int
    active_stops: int
    average_minutes: int


def get_daily_production(day: str, records: Iterable[ProductionRecord]) -> DailyProduction:
    box1 = 0
    box2 = 0
    for r in records:
        if r.date != day:
            continue
        if r.box_number == 1:
            box1 += int(r.quantity)
        elif r.box_number == 2:
            box2 += int(r.quantity)
    return DailyProduction(box1=box1, box2=box2, total=box1 + box2)


def get_hourly_production(day: str, records: Iterable[ProductionRecord]) -> list[HourlyBucket]:
    """Per-hour production for ``day``.

    Always returns the 24 buckets 00:00..23:00 in order, including idle hours.
    The bucket is the record's stored time truncated to the hour, no rounding.
    """
    box1 = {h: 0 for h in HOURS}
    box2 = {h: 0 for h in HOURS}

    for r in records:
        if r.date != day:
            continue
        hour = f"{str(r.time)[:2]}:00"
        if hour not in box1:
            logger.warning("Skipping production record %s with unusable time %r", r.id, r.time)
            continue
        if r.box_number == 1:
            box1[hour] += int(r.quantity)
        elif r.box_number == 2:
            box2[hour] += int(r.quantity)

    return [HourlyBucket(hour=h, box1=box1[h], box2=box2[h]) for h in HOURS]


def get_active_stops(stops: Iterable[StopRecord]) -> list[StopRecord]:
    return [s for s in stops if s.is_active]


def get_stops_for_day(day: str, stops: Iterable[StopRecord]) -> list[StopRecord]:
    """Stops started on ``day``, newest first."""
    return sorted((s for s in stops if s.date == day), key=lambda s: s.timestamp, reverse=True)


def get_packaging_total(records: Iterable[PackagingRecord], day: str | None = None) -> int:
    return sum(int(r.quantity) for r in records if day is None or r.date == day)


def get_packaging_by_collaborator(
    records: Iterable[PackagingRecord],
    members: Iterable[TeamMember],
    day: str | None = None,
) -> list[CollaboratorTotal]:
    """Totals per packaging-role member, in member order.

    Records pointing at unknown or non-packaging members are grouped in a
    trailing N/A row, so the rows always add up to the packaging total.
    """
    totals: dict[str, int] = {}
    for r in records:
        if day is not None and r.date != day:
            continue
        totals[r.collaborator_id] = totals.get(r.collaborator_id, 0) + int(r.quantity)

    rows = [
        CollaboratorTotal(member_id=m.id, name=m.name, total=totals.pop(m.id, 0))
        for m in members
        if m.role == "packaging"
    ]
    unattributed = sum(totals.values())
    if unattributed:
        rows.append(CollaboratorTotal(member_id="", name=UNKNOWN_LABEL, total=unattributed))
    return rows


def summarize_stops(stops: Iterable[StopRecord]) -> StopSummary:
    stops = list(stops)
    ended = [s for s in stops if not s.is_active]
    ended_minutes = sum(int(s.duration or 0) for s in ended)
    average = round(ended_minutes / len(ended)) if ended else 0
    return StopSummary(
        total_stops=len(stops),
        total_minutes=sum(int(s.duration or 0) for s in stops),
        active_stops=len(stops) - len(ended),
        average_minutes=int(average),
    )


# ---------- Reference resolution ----------


def find_product(product_id: str | None, products: Iterable[Product]) -> Product | None:
    if not product_id:
        return None
    return next((p for p in products if p.id == product_id), None)


def product_name(product_id: str | None, products: Iterable[Product], *, missing: str = UNKNOWN_LABEL) -> str:
    if not product_id:
        return UNSPECIFIED_LABEL
    p = find_product(product_id, products)
    return p.name if p is not None else missing


def product_label(product_id: str | None, products: Iterable[Product]) -> str:
    p = find_product(product_id, products)
    if p is None:
        return product_name(product_id, [])
    return f"{p.name} ({p.weight_per_bag}kg)"


def member_name(member_id: str | None, members: Iterable[TeamMember]) -> str:
    m = next((m for m in members if m.id == member_id), None) if member_id else None
    return m.name if m is not None else UNKNOWN_LABEL


def sector_label(sector: str) -> str:
    return SECTOR_LABELS.get(sector, sector)


def box_label(box_number: int) -> str:
    return f"Caixa {int(box_number):02d}"
