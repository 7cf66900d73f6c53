# mezanino/domain/models.py
"""
Modelos do domínio.

Observação importante:
- A coleção em memória guarda instâncias de ``InventoryRecord``; as
  entradas parciais (formulário, planilha, atualização) circulam como
  dicionários com os mesmos nomes de campo.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional


INK = "INK"
FIBER = "FIBER"
PACKAGING = "PACKAGING"

CATEGORIES = (INK, FIBER, PACKAGING)

# Títulos das abas do console
CATEGORY_TITLES = {
    INK: "ESTOQUE DE TINTA",
    FIBER: "ESTOQUE DE FIBRAS",
    PACKAGING: "ESTOQUE DE EMBALAGEM",
}

# Localização física; só existe para tinta e fibra
LOCATION_FIELDS = ("lot", "room", "shelf", "row", "supplied_machine")


@dataclass
class InventoryRecord:
    """Uma linha do estoque do mezanino."""
    id: str
    category: str                          # INK | FIBER | PACKAGING
    material: str
    quantity: int = 0
    status: str = ""                       # 'EM ESTOQUE' | 'PAGO' | livre
    responsible: Optional[str] = None
    exit_date: Optional[str] = None
    service_order: Optional[str] = None    # SM
    code: Optional[str] = None
    lot: Optional[str] = None
    room: Optional[str] = None             # exibido como RUA
    shelf: Optional[str] = None
    row: Optional[str] = None              # exibido como POSIÇÃO
    supplied_machine: Optional[str] = None


RECORD_FIELDS = tuple(f.name for f in fields(InventoryRecord))


def has_location(category: str) -> bool:
    return category != PACKAGING
