from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from bagline.core import stops as stop_lifecycle
from bagline.core.errors import StoreError, ValidationError
from bagline.core.models import Collections
from bagline.core.validation import (
    new_packaging_record,
    new_product,
    new_production_record,
    new_team_member,
    parse_positive_int,
    require_text,
)
from bagline.data.repository import Repository

logger = logging.getLogger(__name__)

STORE_FAILURE_MESSAGE = "Erro ao salvar. Tente novamente."
NOT_FOUND_MESSAGE = "Registro não encontrado"

# UI record kinds -> repository collections
RECORD_KINDS: dict[str, str] = {
    "production": "production_records",
    "packaging": "packaging_records",
    "stop": "stop_records",
}


@dataclass(frozen=True)
class OpResult:
    """Outcome of a mutating operation, mapped to user feedback by the UI."""

    ok: bool
    record_id: str | None = None
    error: str | None = None
    error_kind: str | None = None  # validation | not_found | store

    @classmethod
    def success(cls, record_id: str | None = None) -> "OpResult":
        return cls(ok=True, record_id=record_id)

    @classmethod
    def rejected(cls, message: str) -> "OpResult":
        return cls(ok=False, error=message, error_kind="validation")

    @classmethod
    def not_found(cls) -> "OpResult":
        return cls(ok=False, error=NOT_FOUND_MESSAGE, error_kind="not_found")

    @classmethod
    def failed(cls) -> "OpResult":
        return cls(ok=False, error=STORE_FAILURE_MESSAGE, error_kind="store")


class ProductionService:
    """Write path used by the UI: validate, write through to the store, report the outcome."""

    def __init__(self, repo: Repository):
        self.repo = repo

    def _run(self, action: str, fn: Callable[[], Any]) -> OpResult:
        try:
            out = fn()
        except ValidationError as e:
            logger.info("%s rejected: %s", action, e)
            return OpResult.rejected(str(e))
        except StoreError:
            logger.exception("%s failed", action)
            return OpResult.failed()
        if isinstance(out, OpResult):
            return out
        return OpResult.success(out)

    def snapshot(self) -> Collections:
        return self.repo.snapshot()

    # ---------- Settings ----------
    def add_product(self, *, name, weight_per_bag) -> OpResult:
        return self._run(
            "add_product",
            lambda: self.repo.add_product(new_product(name=name, weight_per_bag=weight_per_bag)),
        )

    def update_product(self, *, product_id: str, name=None, weight_per_bag=None) -> OpResult:
        def _do():
            patch: dict[str, Any] = {}
            if name is not None:
                patch["name"] = require_text(name, field="Nome do produto")
            if weight_per_bag is not None:
                patch["weight_per_bag"] = parse_positive_int(weight_per_bag, field="Peso por saco")
            if not patch:
                raise ValidationError("Nada para atualizar")
            if not self.repo.update_product(product_id=product_id, patch=patch):
                return OpResult.not_found()
            return product_id

        return self._run("update_product", _do)

    def add_team_member(self, *, name, role, box_number=None) -> OpResult:
        return self._run(
            "add_team_member",
            lambda: self.repo.add_team_member(new_team_member(name=name, role=role, box_number=box_number)),
        )

    # ---------- Records ----------
    def add_production_record(
        self,
        *,
        date,
        time,
        box_number,
        product_id,
        quantity,
        observations=None,
    ) -> OpResult:
        return self._run(
            "add_production_record",
            lambda: self.repo.add_production_record(
                new_production_record(
                    date=date,
                    time=time,
                    box_number=box_number,
                    product_id=product_id,
                    quantity=quantity,
                    observations=observations,
                )
            ),
        )

    def add_packaging_record(self, *, date, collaborator_id, quantity, product_id=None) -> OpResult:
        return self._run(
            "add_packaging_record",
            lambda: self.repo.add_packaging_record(
                new_packaging_record(
                    date=date,
                    collaborator_id=collaborator_id,
                    quantity=quantity,
                    product_id=product_id,
                )
            ),
        )

    def delete_record(self, *, kind: str, record_id: str) -> OpResult:
        def _do():
            collection = RECORD_KINDS.get(str(kind or "").strip().lower())
            if collection is None:
                raise ValidationError(f"Tipo de registro inválido: {kind!r}")
            if not self.repo.delete_record(collection=collection, record_id=record_id):
                return OpResult.not_found()
            return record_id

        return self._run("delete_record", _do)

    # ---------- Stops ----------
    def start_stop(self, *, sector, reason, now: datetime | None = None) -> OpResult:
        def _do():
            stop = stop_lifecycle.start_stop(
                sector=sector,
                reason=reason,
                stops=self.repo.list_stop_records(),
                now=now,
            )
            stop_id = self.repo.add_stop_record(stop)
            logger.info("Stop %s started for %s at %s %s", stop_id, stop.sector, stop.date, stop.start_time)
            return stop_id

        return self._run("start_stop", _do)

    def end_stop(self, *, stop_id: str, now: datetime | None = None) -> OpResult:
        def _do():
            stop = self.repo.get_stop_record(stop_id=stop_id)
            if stop is None:
                return OpResult.not_found()
            ended = stop_lifecycle.end_stop(stop, now=now)
            if not self.repo.end_stop_record(stop=ended):
                # Ended by someone else between the read and the write.
                raise ValidationError(stop_lifecycle.STOP_ALREADY_ENDED)
            logger.info("Stop %s ended after %s min", stop_id, ended.duration)
            return stop_id

        return self._run("end_stop", _do)
