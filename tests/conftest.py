"""
Fixtures compartilhadas: armazenamento remoto em memória com falhas
controláveis por operação.
"""

import itertools

import pytest

from mezanino.infra.remote import InventoryStore, RemoteStoreError


class FakeStore(InventoryStore):
    """Tabela `inventory` em memória (linhas no formato do banco)."""

    def __init__(self, rows=None):
        self._seq = itertools.count(1)
        self.rows = []
        self.fail = set()      # operações que devem falhar
        self.calls = []
        for row in rows or []:
            self._append(dict(row))

    def _append(self, row):
        row.setdefault("id", f"srv-{next(self._seq)}")
        row["created_at"] = next(self._seq)
        self.rows.append(row)
        return row

    def _check(self, op):
        self.calls.append(op)
        if op in self.fail or "*" in self.fail:
            raise RemoteStoreError(op, "connection refused")

    def fetch_all(self, limit=None):
        self._check("fetch_all")
        out = sorted(self.rows, key=lambda r: r["created_at"], reverse=True)
        return [dict(r) for r in (out[:limit] if limit else out)]

    def insert(self, rows):
        self._check("insert")
        return [dict(self._append(dict(r))) for r in rows]

    def update(self, record_id, fields):
        self._check("update")
        for r in self.rows:
            if r["id"] == record_id:
                r.update(fields)

    def delete(self, record_id):
        self._check("delete")
        self.rows = [r for r in self.rows if r["id"] != record_id]

    def delete_many(self, ids):
        self._check("delete_many")
        ids = set(ids)
        self.rows = [r for r in self.rows if r["id"] not in ids]


def make_row(**kwargs):
    row = {
        "category": "FIBER",
        "material": "Fibra de Vidro E",
        "qtd": 1,
        "status": "EM ESTOQUE",
    }
    row.update(kwargs)
    return row


@pytest.fixture
def store():
    return FakeStore([
        make_row(id="1", category="INK", material="Tinta Azul Royal", qtd=50, sala="S1", maquina_fornecida="Ext 6"),
        make_row(id="2", category="FIBER", material="Fibra de Carbono T300", qtd=1246, sala="S2", status="PAGO"),
        make_row(id="3", category="PACKAGING", material="Caixa Papelão G", qtd=5000),
    ])
