"""Report encoders: multi-sheet XLSX (pandas/openpyxl) and paginated PDF (reportlab)."""

from __future__ import annotations

import io
import logging
from datetime import date
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from bagline.core.aggregation import UNSPECIFIED_LABEL, box_label, member_name, product_name, sector_label
from bagline.core.models import Collections, StopRecord
from bagline.core.reports import ReportData
from bagline.core.validation import to_display_date

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"

PRODUCTION_COLUMNS = ["Data", "Hora", "Caixa", "Produto", "Quantidade", "Observações"]
PACKAGING_COLUMNS = ["Data", "Colaboradora", "Quantidade", "Produto"]
STOPS_COLUMNS = ["Setor", "Hora Início", "Hora Fim", "Duração (min)", "Motivo", "Status"]


def report_filename(extension: str, today: date | None = None) -> str:
    today = today or date.today()
    return f"relatorio-producao-{today.isoformat()}.{extension.lstrip('.')}"


def stop_end_label(stop: StopRecord) -> str:
    """End time of a stop, prefixed with its date when it ended on another day."""
    if not stop.end_time:
        return "Em andamento"
    if stop.end_date in (None, stop.date):
        return stop.end_time
    return f"{to_display_date(stop.end_date)} {stop.end_time}"


def build_report_frames(report: ReportData, collections: Collections) -> dict[str, pd.DataFrame]:
    """One sheet per record type, references resolved to display names."""
    products = collections.products
    members = collections.team_members

    production_rows = [
        {
            "Data": r.date,
            "Hora": r.time,
            "Caixa": box_label(r.box_number),
            "Produto": product_name(r.product_id, products),
            "Quantidade": int(r.quantity),
            "Observações": r.observations or "",
        }
        for r in report.records.production
    ]

    packaging_rows = [
        {
            "Data": r.date,
            "Colaboradora": member_name(r.collaborator_id, members),
            "Quantidade": int(r.quantity),
            "Produto": product_name(r.product_id, products, missing=UNSPECIFIED_LABEL),
        }
        for r in report.records.packaging
    ]

    stop_rows = []
    for s in report.records.stops:
        stop_rows.append(
            {
                "Setor": sector_label(s.sector),
                "Hora Início": s.started_label,
                "Hora Fim": stop_end_label(s),
                "Duração (min)": int(s.duration or 0),
                "Motivo": s.reason,
                "Status": "Ativo" if s.is_active else "Encerrado",
            }
        )

    return {
        "Produção": pd.DataFrame(production_rows, columns=PRODUCTION_COLUMNS),
        "Embalagem": pd.DataFrame(packaging_rows, columns=PACKAGING_COLUMNS),
        "Paradas": pd.DataFrame(stop_rows, columns=STOPS_COLUMNS),
    }


def export_report_xlsx(report: ReportData, collections: Collections) -> bytes:
    frames = build_report_frames(report, collections)
    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="openpyxl") as writer:
        for sheet_name, df in frames.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            ws = writer.sheets[sheet_name]
            for col in ws.columns:
                width = max((len(str(cell.value)) for cell in col if cell.value is not None), default=0)
                ws.column_dimensions[col[0].column_letter].width = min(width + 2, 40)
    logger.info(
        "XLSX report %s..%s: %d production, %d packaging, %d stops",
        report.date_range.start,
        report.date_range.end,
        len(report.records.production),
        len(report.records.packaging),
        len(report.records.stops),
    )
    return bio.getvalue()


def _table(data: list[list[str]], col_widths: list[float]) -> Table:
    t = Table(data, colWidths=col_widths, repeatRows=1)
    t.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ]
        )
    )
    return t


def export_report_pdf(report: ReportData) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=2 * cm, bottomMargin=2 * cm)

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Title"], fontSize=18, spaceAfter=12)
    heading_style = ParagraphStyle(
        "ReportHeading", parent=styles["Heading2"], fontSize=14, spaceBefore=14, spaceAfter=8
    )
    body_style = styles["Normal"]

    period = f"{to_display_date(report.date_range.start)} - {to_display_date(report.date_range.end)}"
    story = [
        Paragraph("Relatório de Produção", title_style),
        Paragraph(f"Período: {period}", body_style),
        Spacer(1, 12),
    ]

    prod = report.production
    story.append(Paragraph("Resumo de Produção", heading_style))
    story.append(
        _table(
            [
                ["Item", "Sacos"],
                ["Caixa 01", str(prod.box1_total)],
                ["Caixa 02", str(prod.box2_total)],
                ["Total de Sacos", str(prod.total_bags)],
                ["Peso total (kg)", str(prod.total_kg)],
            ],
            [8 * cm, 4 * cm],
        )
    )

    story.append(Paragraph("Embalagem por Colaboradora", heading_style))
    packaging_rows = [["Colaboradora", "Sacos"]]
    packaging_rows += [[p.name, str(p.total)] for p in report.packaging]
    packaging_rows.append(["Total", str(report.packaging_total)])
    story.append(_table(packaging_rows, [8 * cm, 4 * cm]))

    stops = report.stops
    story.append(Paragraph("Resumo de Paradas", heading_style))
    story.append(
        _table(
            [
                ["Item", "Valor"],
                ["Total de Paradas", str(stops.total_stops)],
                ["Tempo Total (min)", str(stops.total_minutes)],
                ["Paradas Ativas", str(stops.active_stops)],
                ["Média por Parada (min)", str(stops.average_minutes)],
            ],
            [8 * cm, 4 * cm],
        )
    )

    if report.records.stops:
        story.append(Paragraph("Paradas no Período", heading_style))
        rows = [["Setor", "Início", "Fim", "Min", "Motivo"]]
        for s in report.records.stops:
            rows.append(
                [
                    sector_label(s.sector),
                    s.started_label,
                    stop_end_label(s),
                    str(s.duration or 0),
                    Paragraph(escape(s.reason), body_style),
                ]
            )
        story.append(_table(rows, [2.5 * cm, 3.5 * cm, 3.5 * cm, 1.5 * cm, 6 * cm]))

    doc.build(story)
    logger.info("PDF report %s..%s generated", report.date_range.start, report.date_range.end)
    return buffer.getvalue()
