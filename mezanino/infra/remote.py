# mezanino/infra/remote.py
"""
Acesso à tabela `inventory` no Supabase.

Classes:
- InventoryStore          (interface usada pelo sincronizador)
- SupabaseInventoryStore  (implementação com o cliente `supabase`)

Todas as operações trabalham com linhas no formato do banco
(snake_case); a conversão fica em `mezanino.infra.wire`.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from supabase import Client, create_client

from mezanino.config import Settings
from mezanino.infra.logger import log_remote_operation, log_system_event


class RemoteStoreError(Exception):
    """Falha de rede ou do backend durante uma operação remota."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class InventoryStore:
    """Operações mínimas exigidas do armazenamento remoto."""

    def fetch_all(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Todas as linhas, mais recentes primeiro (``created_at`` desc)."""
        raise NotImplementedError

    def insert(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insere uma ou mais linhas e devolve as linhas inseridas."""
        raise NotImplementedError

    def update(self, record_id: str, fields: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, record_id: str) -> None:
        raise NotImplementedError

    def delete_many(self, ids: Iterable[str]) -> None:
        raise NotImplementedError


class SupabaseInventoryStore(InventoryStore):
    """Tabela `inventory` acessada pelo cliente Supabase.

    O cliente é criado na primeira operação: com o endpoint placeholder a
    aplicação inicia normalmente e cada chamada falha com
    ``RemoteStoreError``.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.table_name = settings.table
        self._client: Optional[Client] = None

    def _table(self):
        if self._client is None:
            self._client = create_client(self.settings.supabase_url, self.settings.supabase_key)
            log_system_event("supabase_client_created", {
                "url": self.settings.supabase_url,
                "placeholder": self.settings.is_placeholder,
            })
        return self._client.table(self.table_name)

    def fetch_all(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        try:
            query = self._table().select("*").order("created_at", desc=True)
            if limit:
                query = query.range(0, limit - 1)
            rows = query.execute().data or []
        except Exception as exc:
            raise RemoteStoreError("select", str(exc)) from exc
        log_remote_operation(self.table_name, "SELECT", len(rows), limit=limit)
        return rows

    def insert(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        try:
            data = self._table().insert(rows).execute().data or []
        except Exception as exc:
            raise RemoteStoreError("insert", str(exc)) from exc
        log_remote_operation(self.table_name, "INSERT", len(data))
        return data

    def update(self, record_id: str, fields: Dict[str, Any]) -> None:
        try:
            data = self._table().update(fields).eq("id", record_id).execute().data or []
        except Exception as exc:
            raise RemoteStoreError("update", str(exc)) from exc
        log_remote_operation(self.table_name, "UPDATE", len(data), id=record_id)

    def delete(self, record_id: str) -> None:
        try:
            data = self._table().delete().eq("id", record_id).execute().data or []
        except Exception as exc:
            raise RemoteStoreError("delete", str(exc)) from exc
        log_remote_operation(self.table_name, "DELETE", len(data), id=record_id)

    def delete_many(self, ids: Iterable[str]) -> None:
        ids = list(ids)
        try:
            data = self._table().delete().in_("id", ids).execute().data or []
        except Exception as exc:
            raise RemoteStoreError("delete_many", str(exc)) from exc
        log_remote_operation(self.table_name, "DELETE_MANY", len(data), ids=ids)
