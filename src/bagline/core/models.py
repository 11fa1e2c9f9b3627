from __future__ import annotations

from dataclasses import dataclass, field

# Literal domain values, kept as plain strings so rows round-trip through sqlite unchanged.
SECTORS: tuple[str, ...] = ("box1", "box2", "packaging")
ROLES: tuple[str, ...] = ("packaging", "bagging")
BOX_NUMBERS: tuple[int, ...] = (1, 2)


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    weight_per_bag: int  # kg


@dataclass(frozen=True)
class TeamMember:
    id: str
    name: str
    role: str
    box_number: int | None = None  # bagging team only


@dataclass(frozen=True)
class ProductionRecord:
    id: str
    date: str
    time: str
    box_number: int
    product_id: str
    quantity: int
    timestamp: int
    observations: str | None = None


@dataclass(frozen=True)
class PackagingRecord:
    id: str
    date: str
    collaborator_id: str
    quantity: int
    timestamp: int
    product_id: str | None = None


@dataclass(frozen=True)
class StopRecord:
    id: str
    sector: str
    date: str  # day the stop started
    start_time: str
    reason: str
    is_active: bool
    timestamp: int
    end_date: str | None = None
    end_time: str | None = None
    duration: int | None = None  # minutes, set once ended

    @property
    def started_label(self) -> str:
        """Display variant used by the stops history and exports: DD/MM/YYYY HH:MM."""
        y, m, d = self.date.split("-")
        return f"{d}/{m}/{y} {self.start_time}"


@dataclass(frozen=True)
class Collections:
    """Point-in-time snapshot of every collection in the store."""

    products: list[Product] = field(default_factory=list)
    team_members: list[TeamMember] = field(default_factory=list)
    production_records: list[ProductionRecord] = field(default_factory=list)
    packaging_records: list[PackagingRecord] = field(default_factory=list)
    stop_records: list[StopRecord] = field(default_factory=list)
