from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from nicegui import app, ui

from bagline.data.db import Db
from bagline.data.repository import Repository
from bagline.logging_conf import configure_logging
from bagline.service import ProductionService
from bagline.settings import Settings, default_db_path
from bagline.ui.pages import register_pages

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Controle de produção - ensacamento")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--planta", type=str, default="Fábrica de Rações", help="Nome da planta")
    parser.add_argument("--db", type=Path, default=None, help="Caminho do banco sqlite")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--no-seed", action="store_true", help="Não criar produtos e equipe padrão")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    settings = Settings(
        db_path=args.db or default_db_path(),
        host=args.host,
        port=args.port,
        planta=args.planta,
        log_level=args.log_level,
    )
    configure_logging(settings.log_level)
    logger.info("Starting %s with database %s", settings.planta, settings.db_path)

    db = Db(settings.db_path)
    db.ensure_schema(seed_defaults=not args.no_seed)

    repo = Repository(db)
    service = ProductionService(repo)
    register_pages(repo, service, title=settings.planta)

    if sys.platform == "win32":
        @app.on_startup
        async def _silence_windows_connection_reset() -> None:
            loop = asyncio.get_running_loop()

            def _handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
                exc = context.get("exception")
                if isinstance(exc, ConnectionResetError) and getattr(exc, "winerror", None) == 10054:
                    return
                loop.default_exception_handler(context)

            loop.set_exception_handler(_handler)

    ui.run(host=settings.host, port=settings.port, title=settings.planta, reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
