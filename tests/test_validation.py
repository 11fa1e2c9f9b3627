from __future__ import annotations

from datetime import date, datetime

import pytest

from bagline.core.errors import ValidationError
from bagline.core.validation import (
    new_packaging_record,
    new_production_record,
    new_team_member,
    parse_clock,
    parse_date,
    parse_positive_int,
    to_display_date,
)


@pytest.mark.parametrize("value, expected", [(5, 5), (12.0, 12), (" 30 ", 30)])
def test_parse_positive_int_accepts(value, expected):
    assert parse_positive_int(value, field="Quantidade") == expected


@pytest.mark.parametrize("value", [None, "", "0", 0, -3, "abc", "1.5", 2.5, True])
def test_parse_positive_int_rejects(value):
    with pytest.raises(ValidationError):
        parse_positive_int(value, field="Quantidade")


def test_parse_date_normalizes_known_formats():
    assert parse_date("2024-03-01") == "2024-03-01"
    assert parse_date("01/03/2024") == "2024-03-01"
    assert parse_date(date(2024, 3, 1)) == "2024-03-01"
    assert parse_date(datetime(2024, 3, 1, 22, 30)) == "2024-03-01"
    with pytest.raises(ValidationError):
        parse_date("2024-13-40")
    assert to_display_date("2024-03-01") == "01/03/2024"


def test_parse_clock_pads_and_validates():
    assert parse_clock("9:05") == "09:05"
    assert parse_clock("23:59:59") == "23:59"
    for bad in ("24:00", "12:60", "noon", ""):
        with pytest.raises(ValidationError):
            parse_clock(bad)


def test_production_record_requires_every_field():
    rec = new_production_record(
        date="2024-03-01", time="09:15", box_number="1", product_id="p1", quantity="10", observations="  "
    )
    assert (rec.date, rec.time, rec.box_number, rec.quantity) == ("2024-03-01", "09:15", 1, 10)
    assert rec.observations is None
    assert rec.id and rec.timestamp > 0

    with pytest.raises(ValidationError):
        new_production_record(date="2024-03-01", time="09:15", box_number=3, product_id="p1", quantity=1)
    with pytest.raises(ValidationError):
        new_production_record(date="2024-03-01", time="09:15", box_number=1, product_id="", quantity=1)
    with pytest.raises(ValidationError):
        new_production_record(date="2024-03-01", time="09:15", box_number=1, product_id="p1", quantity=0)


def test_packaging_record_product_is_optional():
    rec = new_packaging_record(date="2024-03-01", collaborator_id="m1", quantity=3)
    assert rec.product_id is None
    with pytest.raises(ValidationError):
        new_packaging_record(date="2024-03-01", collaborator_id="", quantity=3)


def test_team_member_box_rules():
    bagger = new_team_member(name="João", role="bagging", box_number=2)
    assert bagger.box_number == 2

    # Packaging staff never carry a box
    packer = new_team_member(name="Maria", role="packaging", box_number=1)
    assert packer.box_number is None

    with pytest.raises(ValidationError, match="Selecione a caixa"):
        new_team_member(name="Pedro", role="bagging")
    with pytest.raises(ValidationError):
        new_team_member(name="Pedro", role="driver")


def test_parse_positive_int_rejects_values_beyond_sqlite_integer():
    assert parse_positive_int(str(2**63 - 1), field="Quantidade") == 2**63 - 1
    with pytest.raises(ValidationError, match="muito grande"):
        parse_positive_int("99999999999999999999", field="Quantidade")
    with pytest.raises(ValidationError, match="muito grande"):
        parse_positive_int(2**63, field="Quantidade")
