from __future__ import annotations

import re
import time as _time
from datetime import date, datetime, time
from uuid import uuid4

from bagline.core.errors import ValidationError
from bagline.core.models import BOX_NUMBERS, ROLES, SECTORS, PackagingRecord, Product, ProductionRecord, TeamMember

_DIGITS_RE = re.compile(r"^\d+$")
_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
# Largest value a sqlite INTEGER column holds.
MAX_INT = 2**63 - 1


def new_id() -> str:
    return uuid4().hex


def now_ms() -> int:
    return int(_time.time() * 1000)


def require_text(value, *, field: str) -> str:
    s = "" if value is None else str(value).strip()
    if not s:
        raise ValidationError(f"{field}: campo obrigatório")
    return s


def optional_text(value) -> str | None:
    s = "" if value is None else str(value).strip()
    return s or None


def parse_positive_int(value, *, field: str) -> int:
    """Parse a strictly positive integer from form input.

    Accepts ints, integral floats (12.0) and digit-only strings up to MAX_INT.
    Raises ValidationError otherwise.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field}: campo obrigatório")

    if isinstance(value, int):
        n = int(value)
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} inválido (não inteiro): {value!r}")
        n = int(value)
    else:
        s = str(value).strip()
        if not s:
            raise ValidationError(f"{field}: campo obrigatório")
        if not _DIGITS_RE.match(s):
            raise ValidationError(f"{field} inválido: {value!r}")
        n = int(s)

    if n <= 0:
        raise ValidationError(f"{field} deve ser maior que zero")
    if n > MAX_INT:
        raise ValidationError(f"{field} muito grande")
    return n


def parse_date(value, *, field: str = "Data") -> str:
    """Coerce common date representations to ISO YYYY-MM-DD."""
    if value is None:
        raise ValidationError(f"{field}: campo obrigatório")

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    s = str(value).strip()
    if not s:
        raise ValidationError(f"{field}: campo obrigatório")

    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y"):
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue

    raise ValidationError(f"{field} inválida: {value!r}")


def parse_clock(value, *, field: str = "Hora") -> str:
    """Coerce a clock time to zero-padded 24h HH:MM."""
    if value is None:
        raise ValidationError(f"{field}: campo obrigatório")

    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")

    s = str(value).strip()
    m = _CLOCK_RE.match(s)
    if not m:
        raise ValidationError(f"{field} inválida: {value!r}")
    hh, mm = int(m.group(1)), int(m.group(2))
    if hh > 23 or mm > 59:
        raise ValidationError(f"{field} inválida: {value!r}")
    return f"{hh:02d}:{mm:02d}"


def to_display_date(iso_day: str) -> str:
    """YYYY-MM-DD -> DD/MM/YYYY."""
    return datetime.strptime(iso_day, "%Y-%m-%d").strftime("%d/%m/%Y")


def parse_box_number(value, *, field: str = "Caixa") -> int:
    try:
        n = parse_positive_int(value, field=field)
    except ValidationError:
        raise ValidationError(f"{field}: selecione a caixa 1 ou 2") from None
    if n not in BOX_NUMBERS:
        raise ValidationError(f"{field}: selecione a caixa 1 ou 2")
    return n


def parse_sector(value) -> str:
    s = "" if value is None else str(value).strip().lower()
    if s not in SECTORS:
        raise ValidationError(f"Setor inválido: {value!r}")
    return s


def parse_role(value) -> str:
    s = "" if value is None else str(value).strip().lower()
    if s not in ROLES:
        raise ValidationError(f"Função inválida: {value!r}")
    return s


# ---------- Record builders ----------


def new_product(*, name, weight_per_bag) -> Product:
    return Product(
        id=new_id(),
        name=require_text(name, field="Nome do produto"),
        weight_per_bag=parse_positive_int(weight_per_bag, field="Peso por saco"),
    )


def new_team_member(*, name, role, box_number=None) -> TeamMember:
    role = parse_role(role)
    box: int | None = None
    if role == "bagging":
        if box_number is None or str(box_number).strip() == "":
            raise ValidationError("Selecione a caixa para colaboradores do ensacamento")
        box = parse_box_number(box_number)
    return TeamMember(
        id=new_id(),
        name=require_text(name, field="Nome"),
        role=role,
        box_number=box,
    )


def new_production_record(
    *,
    date,
    time,
    box_number,
    product_id,
    quantity,
    observations=None,
) -> ProductionRecord:
    return ProductionRecord(
        id=new_id(),
        date=parse_date(date),
        time=parse_clock(time),
        box_number=parse_box_number(box_number),
        product_id=require_text(product_id, field="Produto"),
        quantity=parse_positive_int(quantity, field="Quantidade"),
        observations=optional_text(observations),
        timestamp=now_ms(),
    )


def new_packaging_record(*, date, collaborator_id, quantity, product_id=None) -> PackagingRecord:
    return PackagingRecord(
        id=new_id(),
        date=parse_date(date),
        collaborator_id=require_text(collaborator_id, field="Colaboradora"),
        quantity=parse_positive_int(quantity, field="Quantidade"),
        product_id=optional_text(product_id),
        timestamp=now_ms(),
    )
