from __future__ import annotations

import io
from datetime import date

import pandas as pd

from bagline.core.models import Collections, PackagingRecord, Product, ProductionRecord, StopRecord, TeamMember
from bagline.core.reports import DateRange, generate_report_data
from bagline.data.report_export import (
    build_report_frames,
    export_report_pdf,
    export_report_xlsx,
    report_filename,
    stop_end_label,
)


def _collections() -> Collections:
    return Collections(
        products=[Product(id="p1", name="Ração Bovina", weight_per_bag=30)],
        team_members=[TeamMember(id="m1", name="Maria Silva", role="packaging")],
        production_records=[
            ProductionRecord(id="a", date="2024-03-01", time="09:00", box_number=1, product_id="p1", quantity=10,
                             timestamp=1, observations="Lote 12"),
            ProductionRecord(id="b", date="2024-03-01", time="10:00", box_number=2, product_id="gone", quantity=2,
                             timestamp=2),
        ],
        packaging_records=[
            PackagingRecord(id="k1", date="2024-03-01", collaborator_id="m1", quantity=8, timestamp=1),
        ],
        stop_records=[
            StopRecord(id="s1", sector="box1", date="2024-03-01", start_time="23:50", reason="Energia & rede",
                       is_active=False, timestamp=1, end_date="2024-03-02", end_time="00:20", duration=30),
            StopRecord(id="s2", sector="packaging", date="2024-03-01", start_time="11:00", reason="Falta de saco",
                       is_active=True, timestamp=2),
        ],
    )


def _report():
    coll = _collections()
    return generate_report_data(DateRange("2024-03-01", "2024-03-01"), coll), coll


def test_report_filename():
    assert report_filename("pdf", date(2024, 3, 10)) == "relatorio-producao-2024-03-10.pdf"
    assert report_filename(".xlsx", date(2024, 3, 10)) == "relatorio-producao-2024-03-10.xlsx"


def test_frames_resolve_references():
    report, coll = _report()
    frames = build_report_frames(report, coll)

    assert list(frames) == ["Produção", "Embalagem", "Paradas"]
    prod = frames["Produção"].set_index("Hora")
    assert prod.loc["09:00", "Produto"] == "Ração Bovina"
    assert prod.loc["09:00", "Caixa"] == "Caixa 01"
    assert prod.loc["10:00", "Produto"] == "N/A"

    pack = frames["Embalagem"]
    assert pack.loc[0, "Colaboradora"] == "Maria Silva"
    assert pack.loc[0, "Produto"] == "Não especificado"

    stops = frames["Paradas"].set_index("Setor")
    assert stops.loc["Caixa 01", "Hora Fim"] == "02/03/2024 00:20"
    assert stops.loc["Caixa 01", "Status"] == "Encerrado"
    assert stops.loc["Embalagem", "Hora Fim"] == "Em andamento"
    assert stops.loc["Embalagem", "Status"] == "Ativo"


def test_export_xlsx_has_one_sheet_per_record_type():
    report, coll = _report()
    content = export_report_xlsx(report, coll)

    sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, engine="openpyxl")
    assert set(sheets) == {"Produção", "Embalagem", "Paradas"}
    assert len(sheets["Produção"]) == 2
    assert int(sheets["Produção"]["Quantidade"].sum()) == 12


def test_export_xlsx_with_no_records():
    coll = Collections()
    report = generate_report_data(DateRange("2024-03-01", "2024-03-07"), coll)
    sheets = pd.read_excel(io.BytesIO(export_report_xlsx(report, coll)), sheet_name=None, engine="openpyxl")
    assert all(df.empty for df in sheets.values())


def test_export_pdf():
    report, _ = _report()
    content = export_report_pdf(report)
    assert content.startswith(b"%PDF")
    assert len(content) > 1000


def test_stop_end_label_shows_date_only_when_day_changes():
    stops = {s.id: s for s in _collections().stop_records}
    assert stop_end_label(stops["s1"]) == "02/03/2024 00:20"
    assert stop_end_label(stops["s2"]) == "Em andamento"

    same_day = StopRecord(id="s3", sector="box2", date="2024-03-01", start_time="08:00", reason="x",
                          is_active=False, timestamp=3, end_date="2024-03-01", end_time="08:45", duration=45)
    assert stop_end_label(same_day) == "08:45"
