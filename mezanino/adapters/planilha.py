# mezanino/adapters/planilha.py
"""
Importação e exportação de planilhas (XLSX) do estoque.

Importação:
- lê apenas a primeira aba usando pandas;
- normaliza cabeçalhos (caixa, acentos, pontuação) antes de casar com
  os nomes reconhecidos em ``COLUMN_SPECS``;
- devolve registros parciais (dicts) prontos para o sincronizador.

Exportação:
- uma aba chamada "Estoque";
- colunas de localização só para tinta e fibra.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from mezanino.config import PLACEHOLDER, STATUS_EM_ESTOQUE
from mezanino.domain.models import LOCATION_FIELDS, has_location
from mezanino.domain.policies import coerce_quantity
from mezanino.infra.logger import log_file_operation


SHEET_NAME = "Estoque"

# (campo, cabeçalhos aceitos, valor padrão) — avaliados nesta ordem
COLUMN_SPECS = (
    ("code", ("Codigo", "Cod"), PLACEHOLDER),
    ("material", ("Material", "Descricao"), "Desconhecido"),
    ("quantity", ("Qtd", "Qtde", "Quantidade"), 0),
    ("status", ("Status",), STATUS_EM_ESTOQUE),
    ("responsible", ("Responsavel",), PLACEHOLDER),
    ("exit_date", ("DataSaida", "Data Saida", "Data de Saida"), PLACEHOLDER),
    ("service_order", ("SM",), PLACEHOLDER),
    ("lot", ("Lote",), PLACEHOLDER),
    ("room", ("Sala", "Rua"), PLACEHOLDER),
    ("shelf", ("Prateleira",), PLACEHOLDER),
    ("row", ("Fileira", "Posicao"), PLACEHOLDER),
    ("supplied_machine", ("Maquina", "Maquina Fornecida", "MaquinaFornecida"), PLACEHOLDER),
)

# (cabeçalho, campo) da exportação
EXPORT_COLUMNS = (
    ("Codigo", "code"),
    ("Material", "material"),
    ("Qtd", "quantity"),
    ("Status", "status"),
    ("Responsavel", "responsible"),
    ("DataSaida", "exit_date"),
    ("SM", "service_order"),
)
EXPORT_LOCATION_COLUMNS = (
    ("Lote", "lot"),
    ("Sala", "room"),
    ("Prateleira", "shelf"),
    ("Fileira", "row"),
    ("Maquina", "supplied_machine"),
)


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key):
    """Lê um valor da linha do pandas tratando NA como None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    return val


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.rename(columns={col: _slug(col) for col in df.columns})
    # cabeçalhos repetidos após normalização: vale o primeiro
    return df.loc[:, ~df.columns.duplicated()]


def _pick(row, aliases) -> Optional[str]:
    for alias in aliases:
        val = _safe_get(row, _slug(alias))
        if val is not None and str(val).strip():
            return str(val).strip()
    return None


# ---------------------------
# importação
# ---------------------------

def load_inventory_from_xlsx(path: str, category: str) -> List[Dict[str, Any]]:
    """Lê a primeira aba de um XLSX e devolve registros parciais da categoria.

    Cada cabeçalho ausente ou célula vazia recebe o padrão de
    ``COLUMN_SPECS`` (quantidade 0, status EM ESTOQUE, material
    "Desconhecido", demais campos "-"). Para embalagens os campos de
    localização não são preenchidos.
    """
    df = pd.read_excel(path, sheet_name=0, dtype="string")
    df = df.dropna(how="all")
    df = _normalize_columns(df)
    location = has_location(category)

    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        rec: Dict[str, Any] = {"category": category}
        for field, aliases, default in COLUMN_SPECS:
            if field in LOCATION_FIELDS and not location:
                continue
            val = _pick(row, aliases)
            rec[field] = default if val is None else val
        rec["quantity"] = coerce_quantity(rec["quantity"])
        out.append(rec)

    log_file_operation("import", str(path), rows_processed=len(out), category=category)
    return out


# ---------------------------
# exportação
# ---------------------------

def _cell(val: Any) -> Any:
    return "" if val is None else val


def export_inventory_to_xlsx(records: Iterable, path: str, category: str) -> str:
    """Grava os registros em um XLSX com a aba "Estoque" e devolve o caminho."""
    columns = list(EXPORT_COLUMNS)
    if has_location(category):
        columns += list(EXPORT_LOCATION_COLUMNS)
    rows = [
        {header: _cell(getattr(r, field, None)) for header, field in columns}
        for r in records
    ]
    df = pd.DataFrame(rows, columns=[h for h, _ in columns])
    df.to_excel(path, sheet_name=SHEET_NAME, index=False)
    log_file_operation("export", str(path), rows_processed=len(rows), category=category)
    return str(path)


def export_file_name(title: str, today: Optional[date] = None) -> str:
    """Ex.: "Estoque de Tintas" → ``estoque_de_tintas_2024-01-10.xlsx``."""
    today = today or date.today()
    base = re.sub(r"\s+", "_", title.strip()).lower()
    return f"{base}_{today.isoformat()}.xlsx"
