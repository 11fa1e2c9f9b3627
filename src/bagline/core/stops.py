"""Line-stop lifecycle.

A stop is created Active and moves once to Ended through :func:`end_stop`.
Both functions are pure: they return new records and leave persistence to the
caller.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable

from bagline.core.errors import ValidationError
from bagline.core.models import StopRecord
from bagline.core.validation import new_id, now_ms, parse_clock, parse_date, parse_sector, require_text

ACTIVE_STOP_EXISTS = "Já existe uma parada ativa neste setor"
STOP_ALREADY_ENDED = "Esta parada já foi encerrada"


def stop_duration_minutes(start_date: str, start_time: str, end_date: str, end_time: str) -> int:
    """Whole minutes between two local date-times.

    The date component lets a stop run past midnight. An end before the start
    is rejected instead of producing a negative duration.
    """
    start = datetime.fromisoformat(f"{parse_date(start_date)}T{parse_clock(start_time)}")
    end = datetime.fromisoformat(f"{parse_date(end_date)}T{parse_clock(end_time)}")
    if end < start:
        raise ValidationError("Horário de término anterior ao início da parada")
    return int(round((end - start).total_seconds() / 60))


def ensure_no_active_stop(sector: str, stops: Iterable[StopRecord]) -> None:
    if any(s.is_active and s.sector == sector for s in stops):
        raise ValidationError(ACTIVE_STOP_EXISTS)


def start_stop(
    *,
    sector,
    reason,
    stops: Iterable[StopRecord],
    now: datetime | None = None,
) -> StopRecord:
    """Build a new Active stop for ``sector`` starting at ``now`` (local time)."""
    sector = parse_sector(sector)
    reason = require_text(reason, field="Motivo da parada")
    ensure_no_active_stop(sector, stops)

    now = now or datetime.now()
    return StopRecord(
        id=new_id(),
        sector=sector,
        date=now.date().isoformat(),
        start_time=now.strftime("%H:%M"),
        reason=reason,
        is_active=True,
        timestamp=now_ms(),
    )


def end_stop(stop: StopRecord, *, now: datetime | None = None) -> StopRecord:
    """Return the Ended copy of an Active stop.

    An already ended stop is rejected; its duration is never recomputed.
    """
    if not stop.is_active:
        raise ValidationError(STOP_ALREADY_ENDED)

    now = now or datetime.now()
    end_date = now.date().isoformat()
    end_time = now.strftime("%H:%M")
    duration = stop_duration_minutes(stop.date, stop.start_time, end_date, end_time)
    return replace(stop, end_date=end_date, end_time=end_time, duration=duration, is_active=False)
