from __future__ import annotations

from contextlib import contextmanager
from typing import Callable

from nicegui import ui

from bagline.data.repository import Repository
from bagline.service import OpResult


def apply_theme() -> None:
    """Colors and shared CSS for the page being built."""
    ui.colors(
        primary="#2563eb",  # blue-600
        secondary="#0ea5e9",  # sky-500
        positive="#16a34a",  # green-600
        negative="#dc2626",  # red-600
        warning="#f59e0b",  # amber-500
    )

    ui.add_css(
        """
        body { background: #f8fafc; }
        .bl-container { max-width: 1200px; margin: 0 auto; padding: 16px; }
        .bl-subtitle { color: #475569; }
        .bl-header { border-bottom: 1px solid rgba(15, 23, 42, 0.08); }
        .bl-kpi { border: 1px solid rgba(15, 23, 42, 0.08); min-width: 220px; }
        .bl-row { border: 1px solid rgba(15, 23, 42, 0.08); border-radius: 8px; padding: 8px 12px; }
        .bl-row-active { background: rgba(245, 158, 11, 0.10); border-color: rgba(245, 158, 11, 0.30); }
        """
    )


@contextmanager
def page_container():
    with ui.element("div").classes("bl-container"):
        yield


def render_nav(title: str, active: str | None = None) -> None:
    apply_theme()
    active_key = active or "dashboard"
    sections: list[tuple[str, str, str, str]] = [
        ("dashboard", "Dashboard", "/", "dashboard"),
        ("producao", "Produção", "/producao", "factory"),
        ("embalagem", "Embalagem", "/embalagem", "inventory_2"),
        ("paradas", "Paradas", "/paradas", "pause_circle"),
        ("relatorios", "Relatórios", "/relatorios", "description"),
        ("configuracoes", "Configurações", "/configuracoes", "settings"),
    ]

    with ui.header().classes("bl-header bg-white text-slate-900"):
        with ui.row().classes("w-full items-center justify-between gap-4 px-4 py-2"):
            ui.label(title).classes("text-xl md:text-2xl font-semibold leading-none")
            with ui.row().classes("items-center gap-1"):
                for key, label, path, icon in sections:
                    props = "dense no-caps color=primary" + (" unelevated" if key == active_key else " flat")
                    ui.button(label, icon=icon, on_click=lambda p=path: ui.navigate.to(p)).props(props)


def kpi_card(title: str, value, caption: str = "", *, color: str = "text-primary") -> None:
    with ui.card().classes("bl-kpi p-4"):
        ui.label(title).classes("text-sm text-slate-600")
        ui.label(str(value)).classes(f"text-2xl font-bold {color}")
        if caption:
            ui.label(caption).classes("text-xs text-slate-500")


def notify_result(result: OpResult, success: str) -> bool:
    """Map a service outcome to a toast. Returns ``result.ok``."""
    if result.ok:
        ui.notify(success, color="positive")
    elif result.error_kind == "validation":
        ui.notify(result.error or "Dados inválidos", color="warning")
    else:
        ui.notify(result.error or "Erro", color="negative")
    return result.ok


def confirm(message: str, on_confirm: Callable[[], None]) -> None:
    dialog = ui.dialog()
    with dialog, ui.card().classes("p-6"):
        ui.label(message)
        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("Cancelar", on_click=dialog.close).props("flat")

            def _ok() -> None:
                dialog.close()
                on_confirm()

            ui.button("Excluir", color="negative", on_click=_ok).props("unelevated")
    dialog.open()


def live_view(repo: Repository, collections: list[str], view: Callable[[], None], *, interval: float = 1.0) -> None:
    """Re-render ``view`` whenever one of ``collections`` changes in the store.

    Listeners only flag the page as stale; the page timer does the refresh from
    inside its own client context.
    """
    state = {"stale": False}

    def _mark(_items: list) -> None:
        state["stale"] = True

    unsubscribers = [repo.subscribe(name, _mark) for name in collections]
    state["stale"] = False

    def _tick() -> None:
        if state["stale"]:
            state["stale"] = False
            view()

    ui.timer(interval, _tick)

    def _cleanup() -> None:
        for unsub in unsubscribers:
            unsub()

    ui.context.client.on_disconnect(_cleanup)
