from __future__ import annotations

from datetime import datetime

import pytest

from bagline.core.errors import ValidationError
from bagline.core.stops import (
    ACTIVE_STOP_EXISTS,
    STOP_ALREADY_ENDED,
    end_stop,
    start_stop,
    stop_duration_minutes,
)


def test_stop_lifecycle_sets_duration():
    stop = start_stop(sector="box1", reason="Troca de bobina", stops=[], now=datetime(2024, 3, 1, 8, 0))
    assert stop.is_active
    assert (stop.date, stop.start_time) == ("2024-03-01", "08:00")
    assert stop.started_label == "01/03/2024 08:00"

    ended = end_stop(stop, now=datetime(2024, 3, 1, 8, 45))
    assert not ended.is_active
    assert ended.duration == 45
    assert (ended.end_date, ended.end_time) == ("2024-03-01", "08:45")
    assert ended.id == stop.id


def test_second_active_stop_in_same_sector_is_rejected():
    first = start_stop(sector="box2", reason="Falta de saco", stops=[], now=datetime(2024, 3, 1, 9, 0))
    with pytest.raises(ValidationError, match=ACTIVE_STOP_EXISTS):
        start_stop(sector="box2", reason="Outra", stops=[first], now=datetime(2024, 3, 1, 9, 5))

    # Other sectors are independent
    other = start_stop(sector="packaging", reason="Outra", stops=[first], now=datetime(2024, 3, 1, 9, 5))
    assert other.sector == "packaging"


def test_ending_an_ended_stop_is_rejected():
    stop = start_stop(sector="box1", reason="x", stops=[], now=datetime(2024, 3, 1, 8, 0))
    ended = end_stop(stop, now=datetime(2024, 3, 1, 8, 10))
    with pytest.raises(ValidationError, match=STOP_ALREADY_ENDED):
        end_stop(ended, now=datetime(2024, 3, 1, 9, 0))


def test_stop_across_midnight():
    stop = start_stop(sector="packaging", reason="Queda de energia", stops=[], now=datetime(2024, 3, 1, 23, 50))
    ended = end_stop(stop, now=datetime(2024, 3, 2, 0, 20))
    assert ended.duration == 30
    assert ended.end_date == "2024-03-02"


def test_duration_rejects_end_before_start():
    assert stop_duration_minutes("2024-03-01", "08:00", "2024-03-01", "08:00") == 0
    with pytest.raises(ValidationError):
        stop_duration_minutes("2024-03-01", "08:00", "2024-03-01", "07:59")


@pytest.mark.parametrize("sector, reason", [("box3", "x"), ("box1", "   ")])
def test_start_stop_validates_input(sector, reason):
    with pytest.raises(ValidationError):
        start_stop(sector=sector, reason=reason, stops=[])
