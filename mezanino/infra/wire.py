# mezanino/infra/wire.py
"""
Mapeamento entre os nomes de campo em memória e as colunas da tabela
`inventory` no banco remoto.

O mapeamento é fixo e vale nos dois sentidos, para manter
compatibilidade com a tabela já existente:

    code             <-> codigo
    quantity         <-> qtd
    responsible      <-> responsavel
    exit_date        <-> data_saida
    service_order    <-> sm
    lot              <-> lote
    room             <-> sala
    shelf            <-> prateleira
    row              <-> fileira
    supplied_machine <-> maquina_fornecida
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from mezanino.domain.models import InventoryRecord
from mezanino.domain.policies import coerce_quantity


FIELD_TO_COLUMN: Dict[str, str] = {
    "id": "id",
    "category": "category",
    "code": "codigo",
    "material": "material",
    "quantity": "qtd",
    "status": "status",
    "responsible": "responsavel",
    "exit_date": "data_saida",
    "service_order": "sm",
    "lot": "lote",
    "room": "sala",
    "shelf": "prateleira",
    "row": "fileira",
    "supplied_machine": "maquina_fornecida",
}

COLUMN_TO_FIELD: Dict[str, str] = {v: k for k, v in FIELD_TO_COLUMN.items()}


def _text(val: Any):
    if val is None:
        return None
    return str(val)


def row_to_record(row: Mapping[str, Any]) -> InventoryRecord:
    """Converte uma linha do banco (snake_case) em ``InventoryRecord``.

    Colunas desconhecidas (ex.: ``created_at``) são ignoradas.
    """
    data = {COLUMN_TO_FIELD[k]: v for k, v in row.items() if k in COLUMN_TO_FIELD}
    return InventoryRecord(
        id=str(data.get("id")),
        category=data.get("category"),
        material=_text(data.get("material")) or "",
        quantity=coerce_quantity(data.get("quantity")),
        status=_text(data.get("status")) or "",
        responsible=_text(data.get("responsible")),
        exit_date=_text(data.get("exit_date")),
        service_order=_text(data.get("service_order")),
        code=_text(data.get("code")),
        lot=_text(data.get("lot")),
        room=_text(data.get("room")),
        shelf=_text(data.get("shelf")),
        row=_text(data.get("row")),
        supplied_machine=_text(data.get("supplied_machine")),
    )


def fields_to_row(fields: Mapping[str, Any], include_id: bool = False) -> Dict[str, Any]:
    """Converte campos em memória para colunas do banco.

    Só as chaves presentes são mapeadas (atualização parcial); chaves
    desconhecidas são descartadas. ``id`` só é enviado com
    ``include_id=True``, pois em inserções é atribuído pelo servidor.
    """
    out: Dict[str, Any] = {}
    for key, val in fields.items():
        col = FIELD_TO_COLUMN.get(key)
        if col is None:
            continue
        if key == "id" and not include_id:
            continue
        out[col] = val
    return out
