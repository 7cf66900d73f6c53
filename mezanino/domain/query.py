"""
Pipeline de consulta da tabela de estoque.

Deriva, a partir da coleção em memória, a sequência de registros a exibir:
busca textual → filtros por coluna → ordenação. É recalculado por
completo a cada mudança de entrada e nunca altera a coleção; os
elementos devolvidos são os mesmos objetos da entrada (sem cópias).

Filtros por coluna seguem a semântica do menu da tabela: "selecionar
tudo" é a AUSÊNCIA da coluna em ``column_filters``, nunca o conjunto
completo de valores, porque os valores únicos são recalculados a partir
da coleção inteira a cada vez.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from math import isfinite
from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional, Sequence, Set

from mezanino.config import PLACEHOLDER
from mezanino.domain.models import RECORD_FIELDS


ASC = "asc"
DESC = "desc"

ColumnFilters = Mapping[str, Set[str]]


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: str = ASC


def display_value(record, field: str) -> str:
    """Valor da coluna como texto; vazio/ausente vira ``-``."""
    val = getattr(record, field, None)
    if val is None:
        return PLACEHOLDER
    s = str(val)
    return s if s.strip() else PLACEHOLDER


# ----------------------
# 1) Busca
# ----------------------

def _matches(record, term: str) -> bool:
    for name in RECORD_FIELDS:
        val = getattr(record, name, None)
        if val is None:
            continue
        if term in str(val).lower():
            return True
    return False


def search_records(records: Sequence, search_term: Optional[str]) -> List:
    """Mantém registros em que algum campo contém o termo (sem diferenciar caixa)."""
    if not search_term:
        return list(records)
    term = str(search_term).lower()
    return [r for r in records if _matches(r, term)]


# ----------------------
# 2) Filtros por coluna
# ----------------------

def _valid_filters(column_filters: Optional[ColumnFilters]) -> Dict[str, Set[str]]:
    # Entradas malformadas são ignoradas
    out: Dict[str, Set[str]] = {}
    if not isinstance(column_filters, Mapping):
        return out
    for field, allowed in column_filters.items():
        if field not in RECORD_FIELDS:
            continue
        if allowed is None or isinstance(allowed, (str, bytes)):
            continue
        try:
            out[field] = {str(v) for v in allowed}
        except TypeError:
            continue
    return out


def filter_by_columns(records: Sequence, column_filters: Optional[ColumnFilters]) -> List:
    filters = _valid_filters(column_filters)
    if not filters:
        return list(records)
    return [
        r for r in records
        if all(display_value(r, field) in allowed for field, allowed in filters.items())
    ]


# ----------------------
# 3) Ordenação
# ----------------------

def _as_number(s: str) -> Optional[float]:
    # float() aceitaria "1_000"
    if PLACEHOLDER in s or "_" in s:
        return None
    try:
        n = float(s)
    except ValueError:
        return None
    return n if isfinite(n) else None


def compare_values(a: str, b: str) -> int:
    """Compara numericamente quando possível; senão, texto sem diferenciar caixa."""
    na, nb = _as_number(a), _as_number(b)
    if na is not None and nb is not None:
        return (na > nb) - (na < nb)
    la, lb = a.lower(), b.lower()
    return (la > lb) - (la < lb)


def sort_records(records: Sequence, sort: Optional[SortSpec]) -> List:
    """Ordena por uma coluna; empates mantêm a ordem anterior."""
    if sort is None or getattr(sort, "field", None) not in RECORD_FIELDS:
        return list(records)
    direction = str(getattr(sort, "direction", "")).lower()
    if direction not in (ASC, DESC):
        return list(records)
    sign = 1 if direction == ASC else -1
    field = sort.field

    def _cmp(x, y):
        return sign * compare_values(display_value(x, field), display_value(y, field))

    return sorted(records, key=cmp_to_key(_cmp))


def run_query(
    collection: Sequence,
    search_term: Optional[str] = "",
    column_filters: Optional[ColumnFilters] = None,
    sort: Optional[SortSpec] = None,
) -> List:
    """Executa busca, filtros e ordenação sobre um snapshot da coleção."""
    out = search_records(collection, search_term)
    out = filter_by_columns(out, column_filters)
    return sort_records(out, sort)


# ----------------------
# menu de filtro por coluna
# ----------------------

def unique_values(collection: Iterable, field: str) -> List[str]:
    """Valores distintos (como exibidos) de uma coluna, em ordem alfabética."""
    if field not in RECORD_FIELDS:
        return []
    values = {display_value(r, field) for r in collection}
    return sorted(values, key=lambda v: (v.lower(), v))


def is_selected(column_filters: ColumnFilters, field: str, value: str) -> bool:
    allowed = column_filters.get(field)
    return allowed is None or value in allowed


def select_all(column_filters: ColumnFilters, field: str) -> Dict[str, Set[str]]:
    """Selecionar tudo: remove a entrada da coluna."""
    out = {k: set(v) for k, v in column_filters.items()}
    out.pop(field, None)
    return out


def clear_selection(column_filters: ColumnFilters, field: str) -> Dict[str, Set[str]]:
    """Desmarca todos os valores da coluna (nenhum registro passa)."""
    out = {k: set(v) for k, v in column_filters.items()}
    if field in RECORD_FIELDS:
        out[field] = set()
    return out


def toggle_value(column_filters: ColumnFilters, field: str, value: str, collection: Iterable) -> Dict[str, Set[str]]:
    """Marca/desmarca um valor no menu da coluna.

    Partindo de "tudo" (coluna ausente), o conjunto inicial é o dos
    valores únicos atuais menos o valor desmarcado. Se o conjunto voltar
    a cobrir todos os valores, a entrada é removida.
    """
    if field not in RECORD_FIELDS:
        return {k: set(v) for k, v in column_filters.items()}
    universe = set(unique_values(collection, field))
    out = {k: set(v) for k, v in column_filters.items()}
    current = out.get(field)
    if current is None:
        current = set(universe)
    if value in current:
        current.discard(value)
    else:
        current.add(value)
    if universe <= current:
        out.pop(field, None)
    else:
        out[field] = current
    return out
