from __future__ import annotations

import logging
from datetime import date, datetime

from nicegui import ui

from bagline.core.aggregation import (
    box_label,
    get_active_stops,
    get_daily_production,
    get_hourly_production,
    get_packaging_by_collaborator,
    get_packaging_total,
    get_stops_for_day,
    member_name,
    product_label,
    sector_label,
    summarize_stops,
)
from bagline.core.errors import StoreError, ValidationError
from bagline.core.models import SECTORS
from bagline.core.reports import ALL, generate_report_data, resolve_date_range
from bagline.data.report_export import export_report_pdf, export_report_xlsx, report_filename
from bagline.data.repository import Repository
from bagline.service import ProductionService
from bagline.ui.widgets import confirm, kpi_card, live_view, notify_result, page_container, render_nav

logger = logging.getLogger(__name__)

SECTOR_OPTIONS = {s: sector_label(s) for s in SECTORS}
BOX_OPTIONS = {1: "Caixa 01", 2: "Caixa 02"}
ROLE_OPTIONS = {"packaging": "Embalagem", "bagging": "Ensacamento"}
REPORT_OPTIONS = {"daily": "Diário", "weekly": "Últimos 7 dias", "custom": "Período Customizado"}


def _today() -> str:
    return date.today().isoformat()


def _now_hhmm() -> str:
    return datetime.now().strftime("%H:%M")


def register_pages(repo: Repository, service: ProductionService, *, title: str) -> None:
    def load_snapshot():
        try:
            return service.snapshot()
        except StoreError as ex:
            logger.exception("Snapshot failed")
            ui.notify(f"Erro lendo dados: {ex}", color="negative")
            return None

    def delete_with_confirm(kind: str, record_id: str) -> None:
        confirm(
            "Tem certeza que deseja excluir este registro?",
            lambda: notify_result(
                service.delete_record(kind=kind, record_id=record_id),
                "Registro excluído com sucesso",
            ),
        )

    @ui.page("/")
    def dashboard() -> None:
        render_nav(title)
        with page_container():
            ui.label("Dashboard").classes("text-2xl font-semibold")
            ui.label("Acompanhamento do dia em tempo real.").classes("bl-subtitle")
            ui.separator()

            @ui.refreshable
            def body() -> None:
                snap = load_snapshot()
                if snap is None:
                    return
                today = _today()
                daily = get_daily_production(today, snap.production_records)
                hourly = get_hourly_production(today, snap.production_records)
                active = get_active_stops(snap.stop_records)
                today_stops = get_stops_for_day(today, snap.stop_records)
                stop_summary = summarize_stops(today_stops)

                with ui.row().classes("w-full gap-4"):
                    kpi_card(
                        "Produção Total Hoje",
                        daily.total,
                        f"Caixa 01: {daily.box1} | Caixa 02: {daily.box2}",
                    )
                    kpi_card(
                        "Embalagem Hoje",
                        get_packaging_total(snap.packaging_records, today),
                        "sacos carimbados",
                        color="text-sky-600",
                    )
                    kpi_card("Paradas Ativas", len(active), "em andamento", color="text-amber-600")
                    kpi_card("Tempo de Parada", f"{stop_summary.total_minutes}min", "hoje", color="text-red-600")

                # Idle hours are hidden in the chart only.
                chart = [h for h in hourly if h.total > 0]
                with ui.card().classes("w-full p-4"):
                    ui.label("Produção por Hora").classes("text-lg font-semibold")
                    if not chart:
                        ui.label("Nenhuma produção registrada hoje.").classes("text-slate-500")
                    else:
                        ui.echart(
                            {
                                "tooltip": {"trigger": "axis"},
                                "legend": {},
                                "grid": {"left": 45, "right": 20, "top": 40, "bottom": 30},
                                "xAxis": {"type": "category", "data": [h.hour for h in chart]},
                                "yAxis": {"type": "value", "name": "sacos"},
                                "series": [
                                    {"name": "Caixa 01", "type": "bar", "data": [h.box1 for h in chart]},
                                    {"name": "Caixa 02", "type": "bar", "data": [h.box2 for h in chart]},
                                ],
                            }
                        ).classes("w-full")

                with ui.row().classes("w-full gap-4 items-stretch"):
                    with ui.card().classes("p-4 flex-1"):
                        ui.label("Paradas Ativas").classes("text-lg font-semibold")
                        if not active:
                            ui.label("Nenhuma parada ativa.").classes("text-slate-500")
                        for s in active:
                            with ui.row().classes("bl-row bl-row-active w-full justify-between"):
                                ui.label(f"{sector_label(s.sector)} desde {s.start_time}").classes("font-medium")
                                ui.label(s.reason).classes("text-sm")

                    with ui.card().classes("p-4 flex-1"):
                        ui.label("Embalagem por Colaboradora").classes("text-lg font-semibold")
                        for c in get_packaging_by_collaborator(snap.packaging_records, snap.team_members, today):
                            with ui.row().classes("w-full justify-between"):
                                ui.label(c.name)
                                ui.label(f"{c.total} sacos").classes("font-medium")

                    with ui.card().classes("p-4 flex-1"):
                        ui.label("Produtos").classes("text-lg font-semibold")
                        for p in snap.products:
                            ui.label(product_label(p.id, snap.products))

            body()
            live_view(repo, ["production_records", "packaging_records", "stop_records", "products"], body.refresh)

    @ui.page("/producao")
    def producao() -> None:
        render_nav(title, active="producao")
        with page_container():
            ui.label("Produção").classes("text-2xl font-semibold")
            ui.label("Registro de sacos por caixa.").classes("bl-subtitle")
            ui.separator()

            snap = load_snapshot()
            products = {p.id: product_label(p.id, snap.products) for p in snap.products} if snap else {}

            with ui.row().classes("w-full gap-4 items-start"):
                with ui.card().classes("p-4 w-96"):
                    ui.label("Registrar Produção").classes("text-lg font-semibold")
                    day_in = ui.input("Data", value=_today()).props("type=date outlined dense").classes("w-full")
                    time_in = ui.input("Hora", value=_now_hhmm()).props("type=time outlined dense").classes("w-full")
                    box_in = ui.select(BOX_OPTIONS, label="Caixa").props("outlined dense").classes("w-full")
                    product_in = ui.select(products, label="Produto").props("outlined dense").classes("w-full")
                    qty_in = ui.number("Quantidade (sacos)", min=1, step=1, format="%.0f").props("outlined dense").classes("w-full")
                    obs_in = ui.textarea("Observações").props("outlined dense").classes("w-full")

                    def submit() -> None:
                        result = service.add_production_record(
                            date=day_in.value,
                            time=time_in.value,
                            box_number=box_in.value,
                            product_id=product_in.value,
                            quantity=qty_in.value,
                            observations=obs_in.value,
                        )
                        if notify_result(result, "Produção registrada com sucesso"):
                            qty_in.value = None
                            obs_in.value = ""
                            records.refresh()

                    ui.button("Registrar", icon="add", on_click=submit).props("unelevated color=primary").classes("w-full")

                @ui.refreshable
                def records() -> None:
                    snap = load_snapshot()
                    if snap is None:
                        return
                    today = _today()
                    daily = get_daily_production(today, snap.production_records)
                    todays = [r for r in snap.production_records if r.date == today]
                    with ui.card().classes("p-4 flex-1"):
                        ui.label(
                            f"Hoje: {daily.total} sacos (Caixa 01: {daily.box1} | Caixa 02: {daily.box2})"
                        ).classes("text-lg font-semibold")
                        if not todays:
                            ui.label("Nenhum registro hoje.").classes("text-slate-500")
                        for r in todays:
                            with ui.row().classes("bl-row w-full items-center justify-between"):
                                with ui.column().classes("gap-0"):
                                    ui.label(
                                        f"{r.time} · {box_label(r.box_number)} · {r.quantity} sacos"
                                    ).classes("font-medium")
                                    ui.label(product_label(r.product_id, snap.products)).classes("text-sm text-slate-600")
                                    if r.observations:
                                        ui.label(r.observations).classes("text-xs text-slate-500")
                                ui.button(
                                    icon="delete",
                                    on_click=lambda rid=r.id: delete_with_confirm("production", rid),
                                ).props("flat dense color=negative")

                records()
            live_view(repo, ["production_records", "products"], records.refresh)

    @ui.page("/embalagem")
    def embalagem() -> None:
        render_nav(title, active="embalagem")
        with page_container():
            ui.label("Embalagem").classes("text-2xl font-semibold")
            ui.label("Sacos carimbados por colaboradora.").classes("bl-subtitle")
            ui.separator()

            snap = load_snapshot()
            team = {m.id: m.name for m in snap.team_members if m.role == "packaging"} if snap else {}
            products = {p.id: product_label(p.id, snap.products) for p in snap.products} if snap else {}

            with ui.row().classes("w-full gap-4 items-start"):
                with ui.card().classes("p-4 w-96"):
                    ui.label("Registrar Embalagem").classes("text-lg font-semibold")
                    day_in = ui.input("Data", value=_today()).props("type=date outlined dense").classes("w-full")
                    member_in = ui.select(team, label="Colaboradora").props("outlined dense").classes("w-full")
                    qty_in = ui.number("Quantidade (sacos)", min=1, step=1, format="%.0f").props("outlined dense").classes("w-full")
                    product_in = ui.select(products, label="Produto (opcional)", clearable=True).props(
                        "outlined dense"
                    ).classes("w-full")

                    def submit() -> None:
                        result = service.add_packaging_record(
                            date=day_in.value,
                            collaborator_id=member_in.value,
                            quantity=qty_in.value,
                            product_id=product_in.value,
                        )
                        if notify_result(result, "Embalagem registrada com sucesso"):
                            qty_in.value = None
                            records.refresh()

                    ui.button("Registrar", icon="add", on_click=submit).props("unelevated color=primary").classes("w-full")

                @ui.refreshable
                def records() -> None:
                    snap = load_snapshot()
                    if snap is None:
                        return
                    today = _today()
                    todays = [r for r in snap.packaging_records if r.date == today]
                    with ui.card().classes("p-4 flex-1"):
                        ui.label(f"Hoje: {get_packaging_total(todays)} sacos").classes("text-lg font-semibold")
                        for c in get_packaging_by_collaborator(todays, snap.team_members):
                            with ui.row().classes("w-full justify-between"):
                                ui.label(c.name)
                                ui.label(f"{c.total} sacos").classes("font-medium")
                        ui.separator()
                        if not todays:
                            ui.label("Nenhum registro hoje.").classes("text-slate-500")
                        for r in todays:
                            with ui.row().classes("bl-row w-full items-center justify-between"):
                                with ui.column().classes("gap-0"):
                                    ui.label(
                                        f"{member_name(r.collaborator_id, snap.team_members)} · {r.quantity} sacos"
                                    ).classes("font-medium")
                                    ui.label(product_label(r.product_id, snap.products)).classes("text-sm text-slate-600")
                                ui.button(
                                    icon="delete",
                                    on_click=lambda rid=r.id: delete_with_confirm("packaging", rid),
                                ).props("flat dense color=negative")

                records()
            live_view(repo, ["packaging_records", "team_members", "products"], records.refresh)

    @ui.page("/paradas")
    def paradas() -> None:
        render_nav(title, active="paradas")
        with page_container():
            ui.label("Paradas").classes("text-2xl font-semibold")
            ui.label("Paradas de linha por setor.").classes("bl-subtitle")
            ui.separator()

            def end(stop_id: str, sector: str) -> None:
                result = service.end_stop(stop_id=stop_id)
                if notify_result(result, f"Parada do setor {sector_label(sector)} foi encerrada"):
                    body.refresh()

            @ui.refreshable
            def body() -> None:
                snap = load_snapshot()
                if snap is None:
                    return
                active = get_active_stops(snap.stop_records)
                todays = get_stops_for_day(_today(), snap.stop_records)
                summary = summarize_stops(todays)

                with ui.row().classes("w-full gap-4"):
                    kpi_card("Paradas Ativas", len(active), "em andamento", color="text-amber-600")
                    kpi_card("Tempo Total", f"{summary.total_minutes}min", "paradas hoje", color="text-red-600")
                    kpi_card("Paradas Hoje", summary.total_stops, "registros")
                    kpi_card("Média por Parada", f"{summary.average_minutes}min", "duração média", color="text-sky-600")

                with ui.card().classes("w-full p-4"):
                    ui.label("Paradas Ativas").classes("text-lg font-semibold")
                    if not active:
                        ui.label("Nenhuma parada ativa.").classes("text-slate-500")
                    for s in active:
                        with ui.row().classes("bl-row bl-row-active w-full items-center justify-between"):
                            with ui.column().classes("gap-0"):
                                ui.label(f"{sector_label(s.sector)} · desde {s.started_label}").classes("font-medium")
                                ui.label(s.reason).classes("text-sm")
                            with ui.row().classes("gap-1"):
                                ui.button(
                                    "Encerrar",
                                    icon="play_arrow",
                                    on_click=lambda sid=s.id, sec=s.sector: end(sid, sec),
                                ).props("unelevated dense color=positive")
                                ui.button(
                                    icon="delete",
                                    on_click=lambda sid=s.id: delete_with_confirm("stop", sid),
                                ).props("flat dense color=negative")

                    ui.label("Histórico de Hoje").classes("text-lg font-semibold mt-4")
                    ended = [s for s in todays if not s.is_active]
                    if not ended:
                        ui.label("Nenhuma parada encerrada hoje.").classes("text-slate-500")
                    for s in ended:
                        with ui.row().classes("bl-row w-full items-center justify-between"):
                            with ui.column().classes("gap-0"):
                                ui.label(
                                    f"{sector_label(s.sector)} · {s.duration}min · {s.start_time} - {s.end_time}"
                                ).classes("font-medium")
                                ui.label(s.reason).classes("text-sm")
                            ui.button(
                                icon="delete",
                                on_click=lambda sid=s.id: delete_with_confirm("stop", sid),
                            ).props("flat dense color=negative")

            with ui.card().classes("p-4 w-full"):
                ui.label("Registrar Parada").classes("text-lg font-semibold")
                with ui.row().classes("w-full items-end gap-4"):
                    sector_in = ui.select(SECTOR_OPTIONS, label="Setor").props("outlined dense").classes("w-56")
                    reason_in = ui.input("Motivo da Parada").props("outlined dense").classes("flex-1")

                    def start() -> None:
                        result = service.start_stop(sector=sector_in.value, reason=reason_in.value)
                        if notify_result(result, f"Parada registrada para {sector_label(sector_in.value or '')}"):
                            sector_in.value = None
                            reason_in.value = ""
                            body.refresh()

                    ui.button("Iniciar Parada", icon="stop_circle", on_click=start).props("unelevated color=negative")

            body()
            live_view(repo, ["stop_records"], body.refresh)

    @ui.page("/relatorios")
    def relatorios() -> None:
        render_nav(title, active="relatorios")
        with page_container():
            ui.label("Relatórios").classes("text-2xl font-semibold")
            ui.label("Resumo por período com exportação em PDF e Excel.").classes("bl-subtitle")
            ui.separator()

            snap = load_snapshot()
            products = {ALL: "Todos"}
            if snap:
                products.update({p.id: p.name for p in snap.products})

            with ui.card().classes("w-full p-4"):
                ui.label("Filtros do Relatório").classes("text-lg font-semibold")
                with ui.row().classes("w-full items-end gap-4"):
                    mode_in = ui.select(REPORT_OPTIONS, value="daily", label="Tipo de Relatório").classes("w-56")
                    start_in = ui.input("Data Início", value=_today()).props("type=date").classes("w-44")
                    end_in = ui.input("Data Fim", value=_today()).props("type=date").classes("w-44")
                    sector_in = ui.select({ALL: "Todos", **SECTOR_OPTIONS}, value=ALL, label="Setor").classes("w-44")
                    product_in = ui.select(products, value=ALL, label="Produto").classes("w-56")
                start_in.bind_visibility_from(mode_in, "value", value="custom")
                end_in.bind_visibility_from(mode_in, "value", value="custom")

            def build():
                current = load_snapshot()
                if current is None:
                    return None, None
                try:
                    date_range = resolve_date_range(mode_in.value, start=start_in.value, end=end_in.value)
                    report = generate_report_data(
                        date_range,
                        current,
                        sector=sector_in.value,
                        product_id=product_in.value,
                    )
                except ValidationError as ex:
                    ui.notify(str(ex), color="warning")
                    return None, None
                return report, current

            @ui.refreshable
            def summary() -> None:
                report, _ = build()
                if report is None:
                    return
                with ui.row().classes("w-full gap-4 items-stretch"):
                    with ui.card().classes("p-4 flex-1"):
                        ui.label("Produção").classes("text-lg font-semibold")
                        ui.label(f"Total Geral: {report.production.total_bags} sacos").classes("font-bold")
                        ui.label(f"Caixa 01: {report.production.box1_total} sacos")
                        ui.label(f"Caixa 02: {report.production.box2_total} sacos")
                        ui.label(f"Peso: {report.production.total_kg} kg").classes("text-sm text-slate-600")
                    with ui.card().classes("p-4 flex-1"):
                        ui.label("Embalagem").classes("text-lg font-semibold")
                        for c in report.packaging:
                            ui.label(f"{c.name}: {c.total} sacos")
                        ui.label(f"Total: {report.packaging_total} sacos").classes("font-bold")
                    with ui.card().classes("p-4 flex-1"):
                        ui.label("Paradas").classes("text-lg font-semibold")
                        ui.label(f"Total: {report.stops.total_stops}").classes("font-bold")
                        ui.label(f"Tempo Total: {report.stops.total_minutes} min")
                        ui.label(f"Ativas: {report.stops.active_stops}")

            for control in (mode_in, start_in, end_in, sector_in, product_in):
                control.on_value_change(lambda _: summary.refresh())

            summary()

            def export(kind: str) -> None:
                report, current = build()
                if report is None:
                    return
                try:
                    if kind == "pdf":
                        content = export_report_pdf(report)
                    else:
                        content = export_report_xlsx(report, current)
                except Exception as ex:
                    logger.exception("Report export (%s) failed", kind)
                    ui.notify(f"Erro ao gerar {kind.upper()}: {ex}", color="negative")
                    return
                ui.download(content, report_filename(kind))
                ui.notify(f"Relatório {kind.upper()} gerado com sucesso", color="positive")

            with ui.card().classes("w-full p-4"):
                ui.label("Exportar Relatório").classes("text-lg font-semibold")
                with ui.row().classes("gap-4"):
                    ui.button("Exportar PDF", icon="picture_as_pdf", on_click=lambda: export("pdf")).props(
                        "unelevated color=negative"
                    )
                    ui.button("Exportar Excel", icon="download", on_click=lambda: export("xlsx")).props(
                        "unelevated color=positive"
                    )
                ui.label(
                    "Os relatórios incluem todos os dados de produção, embalagem e paradas do período selecionado."
                ).classes("text-sm text-slate-500")

            live_view(
                repo,
                ["production_records", "packaging_records", "stop_records", "team_members"],
                summary.refresh,
            )

    @ui.page("/configuracoes")
    def configuracoes() -> None:
        render_nav(title, active="configuracoes")
        with page_container():
            ui.label("Configurações").classes("text-2xl font-semibold")
            ui.label("Produtos e equipe.").classes("bl-subtitle")
            ui.separator()

            edit_dialog = ui.dialog().props("persistent")
            editing = {"id": ""}
            with edit_dialog, ui.card().classes("p-6").style("width: 92vw; max-width: 480px"):
                ui.label("Editar produto").classes("text-xl font-semibold")
                edit_name = ui.input("Nome").props("outlined dense").classes("w-full")
                edit_weight = ui.number("Peso por Saco (kg)", min=1, step=1, format="%.0f").props(
                    "outlined dense"
                ).classes("w-full")
                with ui.row().classes("w-full justify-end gap-2"):
                    ui.button("Cancelar", on_click=edit_dialog.close).props("flat")

                    def save_edit() -> None:
                        result = service.update_product(
                            product_id=editing["id"],
                            name=edit_name.value,
                            weight_per_bag=edit_weight.value,
                        )
                        if notify_result(result, "Produto atualizado"):
                            edit_dialog.close()
                            lists.refresh()

                    ui.button("Salvar", on_click=save_edit).props("unelevated color=primary")

            def open_edit(product_id: str, name: str, weight: int) -> None:
                editing["id"] = product_id
                edit_name.value = name
                edit_weight.value = weight
                edit_dialog.open()

            with ui.row().classes("w-full gap-4 items-start"):
                with ui.card().classes("p-4 flex-1"):
                    ui.label("Novo Produto").classes("text-lg font-semibold")
                    p_name = ui.input("Nome do Produto").props("outlined dense").classes("w-full")
                    p_weight = ui.number("Peso por Saco (kg)", min=1, step=1, format="%.0f").props(
                        "outlined dense"
                    ).classes("w-full")

                    def add_product() -> None:
                        result = service.add_product(name=p_name.value, weight_per_bag=p_weight.value)
                        if notify_result(result, "Produto adicionado com sucesso"):
                            p_name.value = ""
                            p_weight.value = None
                            lists.refresh()

                    ui.button("Adicionar", icon="add", on_click=add_product).props("unelevated color=primary")

                with ui.card().classes("p-4 flex-1"):
                    ui.label("Novo Colaborador").classes("text-lg font-semibold")
                    m_name = ui.input("Nome").props("outlined dense").classes("w-full")
                    m_role = ui.select(ROLE_OPTIONS, label="Função").props("outlined dense").classes("w-full")
                    m_box = ui.select(BOX_OPTIONS, label="Caixa").props("outlined dense").classes("w-full")
                    m_box.bind_visibility_from(m_role, "value", value="bagging")

                    def add_member() -> None:
                        box = m_box.value if m_role.value == "bagging" else None
                        result = service.add_team_member(name=m_name.value, role=m_role.value, box_number=box)
                        if notify_result(result, "Colaborador adicionado com sucesso"):
                            m_name.value = ""
                            m_role.value = None
                            m_box.value = None
                            lists.refresh()

                    ui.button("Adicionar", icon="person_add", on_click=add_member).props("unelevated color=primary")

            @ui.refreshable
            def lists() -> None:
                snap = load_snapshot()
                if snap is None:
                    return
                with ui.row().classes("w-full gap-4 items-start"):
                    with ui.card().classes("p-4 flex-1"):
                        ui.label("Produtos").classes("text-lg font-semibold")
                        for p in snap.products:
                            with ui.row().classes("bl-row w-full items-center justify-between"):
                                ui.label(product_label(p.id, snap.products))
                                ui.button(
                                    icon="edit",
                                    on_click=lambda pid=p.id, n=p.name, w=p.weight_per_bag: open_edit(pid, n, w),
                                ).props("flat dense")
                    with ui.card().classes("p-4 flex-1"):
                        ui.label("Equipe de Embalagem").classes("text-lg font-semibold")
                        for m in snap.team_members:
                            if m.role == "packaging":
                                ui.label(m.name).classes("bl-row w-full")
                        ui.label("Equipe de Ensacamento").classes("text-lg font-semibold mt-4")
                        for m in snap.team_members:
                            if m.role == "bagging":
                                ui.label(f"{m.name} · {box_label(m.box_number or 0)}").classes("bl-row w-full")

            lists()
            live_view(repo, ["products", "team_members"], lists.refresh)
