# mezanino/usecases/dashboard.py
"""
Indicadores do dashboard integrado:
- linhas EM ESTOQUE por categoria (tinta, fibra, embalagem)
- saídas de fibra (soma de QTD dos itens PAGO)
- quantidade por sala (fibras)
- materiais pagos mais frequentes (fibras, top 5)
- máquinas que mais receberam material (fibras, top 3)

Comparações de status ignoram espaços nas pontas e caixa.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from mezanino.config import PLACEHOLDER
from mezanino.domain.models import FIBER, INK, PACKAGING
from mezanino.domain.policies import is_in_stock, is_paid
from mezanino.infra.logger import log_system_event


@dataclass
class DashboardSummary:
    fiber_in_stock: int = 0
    ink_in_stock: int = 0
    packaging_in_stock: int = 0
    fiber_output: int = 0
    rooms: List[Tuple[str, int]] = field(default_factory=list)
    paid_materials: List[Tuple[str, int]] = field(default_factory=list)
    paid_materials_total: int = 0
    machines: List[Tuple[str, int]] = field(default_factory=list)
    machines_max: int = 10


def _of(records: Iterable, category: str) -> List:
    return [r for r in records if r.category == category]


def in_stock_count(records: Iterable, category: str) -> int:
    return sum(1 for r in _of(records, category) if is_in_stock(r))


def output_total(records: Iterable, category: str = FIBER) -> int:
    """Soma de QTD dos itens PAGO da categoria."""
    return sum(int(r.quantity or 0) for r in _of(records, category) if is_paid(r))


def quantity_by_room(records: Iterable, category: str = FIBER) -> List[Tuple[str, int]]:
    """Quantidade total por sala, na ordem em que cada sala aparece."""
    totals: Dict[str, int] = {}
    for r in _of(records, category):
        room = (r.room or "").strip().upper() or "SEM SALA"
        totals[room] = totals.get(room, 0) + int(r.quantity or 0)
    return list(totals.items())


def _top(counts: Dict[str, int], top: int) -> List[Tuple[str, int]]:
    # sorted é estável: empates mantêm a ordem de aparição
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:top]


def top_paid_materials(records: Iterable, category: str = FIBER, top: int = 5) -> Tuple[List[Tuple[str, int]], int]:
    """Frequência (número de linhas) dos materiais PAGO; devolve (top, total)."""
    counts: Dict[str, int] = {}
    total = 0
    for r in _of(records, category):
        if not is_paid(r):
            continue
        material = r.material or "Sem Material"
        counts[material] = counts.get(material, 0) + 1
        total += 1
    return _top(counts, top), total


def top_machines(records: Iterable, category: str = FIBER, top: int = 3) -> Tuple[List[Tuple[str, int]], int]:
    """Máquinas com mais linhas PAGO; devolve (top, máximo para escala das barras)."""
    counts: Dict[str, int] = {}
    for r in _of(records, category):
        machine = (r.supplied_machine or "").strip()
        if not machine or machine == PLACEHOLDER or not is_paid(r):
            continue
        counts[machine] = counts.get(machine, 0) + 1
    ranked = _top(counts, top)
    return ranked, (ranked[0][1] if ranked else 10)


def build_dashboard(records: Iterable) -> DashboardSummary:
    records = list(records)
    materials, materials_total = top_paid_materials(records)
    machines, machines_max = top_machines(records)
    summary = DashboardSummary(
        fiber_in_stock=in_stock_count(records, FIBER),
        ink_in_stock=in_stock_count(records, INK),
        packaging_in_stock=in_stock_count(records, PACKAGING),
        fiber_output=output_total(records, FIBER),
        rooms=quantity_by_room(records),
        paid_materials=materials,
        paid_materials_total=materials_total,
        machines=machines,
        machines_max=machines_max,
    )
    log_system_event("dashboard_built", {
        "records": len(records),
        "fiber_in_stock": summary.fiber_in_stock,
        "fiber_output": summary.fiber_output,
    })
    return summary
