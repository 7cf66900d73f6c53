# mezanino/usecases/sincronizador.py
"""
UC: sincronizar a coleção em memória com a tabela remota.

O ``InventorySynchronizer`` é a única fonte de verdade da coleção de
registros durante a sessão e a única superfície de mutação dela:

- sucesso remoto → recarrega tudo do servidor (estado canônico);
- falha remota   → reflete a ação localmente (fallback), sem erro
  bloqueante; a falha vai apenas para o log.

Exclusões são sempre otimistas: o registro sai da coleção local qualquer
que seja o resultado remoto.

Obs.:
- Não há reconciliação de ids locais com o servidor nem fila de retry.
- Duas escritas concorrentes no mesmo id: vence a que resolver por último.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from mezanino.domain.models import LOCATION_FIELDS, RECORD_FIELDS, InventoryRecord, has_location
from mezanino.domain.policies import (
    InvalidRecordError,
    apply_local_defaults,
    coerce_quantity,
    generate_local_id,
    is_local_id,
    normalize_material,
    normalize_new_record,
)
from mezanino.infra.logger import log_remote_failure, log_sync, log_system_event
from mezanino.infra.remote import InventoryStore
from mezanino.infra.wire import fields_to_row, row_to_record


class SyncOutcome:
    CONFIRMED = "confirmed"  # escrita aceita pelo servidor
    LOCAL = "local"          # servidor falhou; ação refletida só em memória


# Campos que uma atualização pode alterar (id e categoria são imutáveis)
UPDATABLE_FIELDS = tuple(f for f in RECORD_FIELDS if f not in ("id", "category"))


class InventorySynchronizer:
    """Coleção em memória + política de fallback frente ao banco remoto."""

    def __init__(self, store: InventoryStore, fetch_limit: Optional[int] = None):
        self.store = store
        self.fetch_limit = fetch_limit
        self._items: List[InventoryRecord] = []
        self.loading = False
        self.offline = False
        self.last_error: Optional[str] = None

    # -----------------------
    # leitura
    # -----------------------

    @property
    def items(self) -> Tuple[InventoryRecord, ...]:
        """Snapshot da coleção (mais recentes primeiro)."""
        return tuple(self._items)

    def by_category(self, category: str) -> List[InventoryRecord]:
        return [r for r in self._items if r.category == category]

    def get(self, record_id: str) -> Optional[InventoryRecord]:
        for r in self._items:
            if r.id == record_id:
                return r
        return None

    def local_only(self) -> List[InventoryRecord]:
        """Registros criados pelo fallback local (ainda sem id do servidor)."""
        return [r for r in self._items if is_local_id(r.id)]

    def _ids(self) -> set:
        return {r.id for r in self._items}

    def _remote_failed(self, operation: str, exc: Exception, **kwargs) -> None:
        self.last_error = str(exc)
        log_remote_failure(operation, exc, **kwargs)

    # -----------------------
    # reload
    # -----------------------

    def reload(self) -> bool:
        """Substitui a coleção inteira pelo conteúdo remoto.

        Em caso de falha a coleção atual é preservada e o estado passa a
        ``offline``. Retorna ``True`` quando a recarga foi bem-sucedida.
        """
        self.loading = True
        try:
            rows = self.store.fetch_all(limit=self.fetch_limit)
            fresh = [row_to_record(r) for r in rows]
        except Exception as exc:
            self.offline = True
            self._remote_failed("reload", exc, kept=len(self._items))
            log_system_event("reload_offline", {"kept": len(self._items)}, level="warning")
            return False
        finally:
            self.loading = False

        self._items = fresh
        self.offline = False
        self.last_error = None
        log_sync("reload", outcome=SyncOutcome.CONFIRMED, rows=len(fresh))
        return True

    # -----------------------
    # escrita
    # -----------------------

    def _local_record(self, fields: Mapping[str, Any], taken: set) -> InventoryRecord:
        data = apply_local_defaults(fields)
        record_id = generate_local_id(taken)
        taken.add(record_id)
        return InventoryRecord(id=record_id, **data)

    def add(self, partial: Mapping[str, Any]) -> str:
        """Cria um registro; sem servidor, ele entra no topo com id local.

        Raises:
            InvalidRecordError: categoria/material inválidos (antes de
                qualquer chamada remota).
        """
        fields = normalize_new_record(partial)
        try:
            self.store.insert([fields_to_row(fields)])
        except Exception as exc:
            self._remote_failed("add", exc, material=fields.get("material"))
            record = self._local_record(fields, self._ids())
            self._items.insert(0, record)
            log_sync("add", record.id, SyncOutcome.LOCAL, category=record.category)
            return SyncOutcome.LOCAL

        log_sync("add", outcome=SyncOutcome.CONFIRMED, material=fields.get("material"))
        self.reload()
        return SyncOutcome.CONFIRMED

    def update(self, record_id: str, partial: Mapping[str, Any]) -> str:
        """Atualização parcial; sem servidor, mescla os campos no registro local.

        Se nenhum registro local tiver o id, o fallback não faz nada.

        Raises:
            InvalidRecordError: nenhum campo atualizável informado ou
                material vazio.
        """
        fields: Dict[str, Any] = {k: v for k, v in partial.items() if k in UPDATABLE_FIELDS}
        if not fields:
            raise InvalidRecordError("nenhum campo para atualizar")
        if "quantity" in fields:
            fields["quantity"] = coerce_quantity(fields["quantity"])
        if "material" in fields:
            fields["material"] = normalize_material(fields["material"])

        try:
            self.store.update(record_id, fields_to_row(fields))
        except Exception as exc:
            self._remote_failed("update", exc, id=record_id)
            record = self.get(record_id)
            if record is not None:
                for key, val in fields.items():
                    # embalagem não tem localização
                    if key in LOCATION_FIELDS and not has_location(record.category):
                        continue
                    setattr(record, key, val)
            log_sync("update", record_id, SyncOutcome.LOCAL, found=record is not None, fields=list(fields))
            return SyncOutcome.LOCAL

        log_sync("update", record_id, SyncOutcome.CONFIRMED, fields=list(fields))
        self.reload()
        return SyncOutcome.CONFIRMED

    def delete(self, record_id: str) -> str:
        """Exclui remotamente e, em qualquer caso, remove da coleção local."""
        outcome = SyncOutcome.CONFIRMED
        try:
            self.store.delete(record_id)
        except Exception as exc:
            self._remote_failed("delete", exc, id=record_id)
            outcome = SyncOutcome.LOCAL
        self._items = [r for r in self._items if r.id != record_id]
        log_sync("delete", record_id, outcome)
        return outcome

    def bulk_delete(self, ids: Iterable[str]) -> str:
        """Como ``delete``, para um conjunto de ids; ids inexistentes são ignorados."""
        targets = list(dict.fromkeys(ids))
        if not targets:
            return SyncOutcome.CONFIRMED
        outcome = SyncOutcome.CONFIRMED
        try:
            self.store.delete_many(targets)
        except Exception as exc:
            self._remote_failed("bulk_delete", exc, ids=targets)
            outcome = SyncOutcome.LOCAL
        wanted = set(targets)
        self._items = [r for r in self._items if r.id not in wanted]
        log_sync("bulk_delete", outcome=outcome, ids=targets)
        return outcome

    def import_records(self, partials: Sequence[Mapping[str, Any]]) -> str:
        """Inserção em lote; sem servidor, o lote entra no topo na ordem original.

        Raises:
            InvalidRecordError: algum registro sem categoria/material válidos.
        """
        batch = [normalize_new_record(p) for p in partials]
        if not batch:
            return SyncOutcome.CONFIRMED
        try:
            self.store.insert([fields_to_row(f) for f in batch])
        except Exception as exc:
            self._remote_failed("import", exc, rows=len(batch))
            taken = self._ids()
            records = [self._local_record(f, taken) for f in batch]
            self._items[0:0] = records
            log_sync("import", outcome=SyncOutcome.LOCAL, rows=len(records))
            return SyncOutcome.LOCAL

        log_sync("import", outcome=SyncOutcome.CONFIRMED, rows=len(batch))
        self.reload()
        return SyncOutcome.CONFIRMED
