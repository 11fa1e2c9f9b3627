from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from bagline.core.aggregation import (
    CollaboratorTotal,
    StopSummary,
    find_product,
    get_packaging_by_collaborator,
    summarize_stops,
)
from bagline.core.errors import ValidationError
from bagline.core.models import Collections, PackagingRecord, ProductionRecord, SECTORS, StopRecord
from bagline.core.validation import parse_date

REPORT_MODES: tuple[str, ...] = ("daily", "weekly", "custom")
ALL = "all"


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str

    def contains(self, day: str) -> bool:
        # Canonical YYYY-MM-DD strings are fixed-width, so string order is date order.
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (date.fromisoformat(self.end) - date.fromisoformat(self.start)).days + 1


@dataclass(frozen=True)
class ProductionSummary:
    box1_total: int
    box2_total: int
    total_bags: int
    total_kg: int


@dataclass(frozen=True)
class ReportRecords:
    production: list[ProductionRecord] = field(default_factory=list)
    packaging: list[PackagingRecord] = field(default_factory=list)
    stops: list[StopRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ReportData:
    date_range: DateRange
    sector: str
    product_id: str
    production: ProductionSummary
    packaging: list[CollaboratorTotal]
    packaging_total: int
    stops: StopSummary
    records: ReportRecords


def resolve_date_range(
    mode: str,
    *,
    today: date | None = None,
    start=None,
    end=None,
) -> DateRange:
    """Resolve a report mode to an inclusive date range.

    - daily: today only
    - weekly: the last 7 calendar days, today included
    - custom: explicit start/end, both inclusive
    """
    m = str(mode or "").strip().lower()
    today = today or date.today()

    if m == "daily":
        return DateRange(start=today.isoformat(), end=today.isoformat())
    if m == "weekly":
        return DateRange(start=(today - timedelta(days=6)).isoformat(), end=today.isoformat())
    if m == "custom":
        s = parse_date(start, field="Data início")
        e = parse_date(end, field="Data fim")
        if s > e:
            raise ValidationError("Data início posterior à data fim")
        return DateRange(start=s, end=e)

    raise ValidationError(f"Tipo de relatório não suportado: {mode!r}")


def _normalize_filter(value) -> str:
    s = str(value or ALL).strip()
    return s or ALL


def generate_report_data(
    date_range: DateRange,
    collections: Collections,
    *,
    sector: str = ALL,
    product_id: str = ALL,
) -> ReportData:
    """Summarize every collection over ``date_range``.

    Sector and product filters narrow the record sets before any totals are
    computed; ``"all"`` leaves a dimension unfiltered.
    """
    sector = _normalize_filter(sector).lower()
    product_id = _normalize_filter(product_id)
    if sector != ALL and sector not in SECTORS:
        raise ValidationError(f"Setor inválido: {sector!r}")

    production = [r for r in collections.production_records if date_range.contains(r.date)]
    packaging = [r for r in collections.packaging_records if date_range.contains(r.date)]
    stops = [s for s in collections.stop_records if date_range.contains(s.date)]

    if sector == "packaging":
        production = []
    elif sector in ("box1", "box2"):
        box = 1 if sector == "box1" else 2
        production = [r for r in production if r.box_number == box]
        packaging = []
    if sector != ALL:
        stops = [s for s in stops if s.sector == sector]

    if product_id != ALL:
        production = [r for r in production if r.product_id == product_id]
        packaging = [r for r in packaging if r.product_id == product_id]

    box1 = sum(int(r.quantity) for r in production if r.box_number == 1)
    box2 = sum(int(r.quantity) for r in production if r.box_number == 2)

    total_kg = 0
    for r in production:
        p = find_product(r.product_id, collections.products)
        if p is not None:
            total_kg += int(r.quantity) * int(p.weight_per_bag)

    return ReportData(
        date_range=date_range,
        sector=sector,
        product_id=product_id,
        production=ProductionSummary(box1_total=box1, box2_total=box2, total_bags=box1 + box2, total_kg=total_kg),
        packaging=get_packaging_by_collaborator(packaging, collections.team_members),
        packaging_total=sum(int(r.quantity) for r in packaging),
        stops=summarize_stops(stops),
        records=ReportRecords(production=production, packaging=packaging, stops=stops),
    )
