"""
Políticas de normalização dos registros de estoque.

Este módulo concentra as regras aplicadas antes de um registro entrar na
coleção em memória ou seguir para o banco remoto: coerção de quantidade,
campos obrigatórios, valores padrão do fallback local e geração de ids
temporários.
"""

from __future__ import annotations

import math
import secrets
import time
from typing import Any, Collection, Dict, Mapping

from mezanino.config import STATUS_EM_ESTOQUE, STATUS_PAGO
from mezanino.domain.models import CATEGORIES, LOCATION_FIELDS, RECORD_FIELDS, has_location


LOCAL_ID_PREFIX = "local-"

TEXT_FIELDS = (
    "status", "responsible", "exit_date", "service_order", "code",
) + LOCATION_FIELDS


class InvalidRecordError(ValueError):
    """Registro sem categoria válida ou sem material."""


def coerce_quantity(value: Any) -> int:
    """Converte a quantidade informada em inteiro não negativo.

    Aceita inteiros, floats e strings numéricas (vírgula ou ponto como
    separador decimal). Valores ausentes, não numéricos, não finitos ou
    negativos viram ``0``; frações são truncadas.

    Exemplos:
        "12" → 12
        "5,7" → 5
        "abc" → 0
        -3 → 0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        s = str(value).strip().replace(",", ".")
        if not s:
            return 0
        try:
            num = float(s)
        except ValueError:
            return 0
    if not math.isfinite(num) or num < 0:
        return 0
    return int(num)


def normalize_status(value: Any) -> str:
    """Status para comparação: sem espaços nas pontas, em maiúsculas."""
    if value is None:
        return ""
    return str(value).strip().upper()


def is_in_stock(record) -> bool:
    return normalize_status(record.status) == STATUS_EM_ESTOQUE


def is_paid(record) -> bool:
    return normalize_status(record.status) == STATUS_PAGO


def normalize_new_record(partial: Mapping[str, Any]) -> Dict[str, Any]:
    """Valida e normaliza um registro novo (sem id).

    Regras:
        - ``category`` precisa ser INK, FIBER ou PACKAGING;
        - ``material`` precisa ser texto não vazio;
        - ``quantity`` é sempre coagida (``0`` quando ausente/inválida);
        - campos desconhecidos e ``id`` são descartados.

    Raises:
        InvalidRecordError: categoria ou material inválidos.
    """
    category = partial.get("category")
    if category not in CATEGORIES:
        raise InvalidRecordError(f"categoria inválida: {category!r}")
    material = normalize_material(partial.get("material"))

    out: Dict[str, Any] = {}
    for key in RECORD_FIELDS:
        if key == "id" or key not in partial:
            continue
        out[key] = partial[key]
    out["material"] = material
    out["quantity"] = coerce_quantity(partial.get("quantity"))
    if not has_location(category):
        for key in LOCATION_FIELDS:
            out.pop(key, None)
    return out


def apply_local_defaults(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Preenche os campos opcionais omitidos de um registro que ficará só local."""
    out = dict(fields)
    if not out.get("status"):
        out["status"] = STATUS_EM_ESTOQUE
    location = has_location(out.get("category"))
    for key in TEXT_FIELDS:
        if key in LOCATION_FIELDS and not location:
            out[key] = None
        elif out.get(key) is None:
            out[key] = ""
    return out


def normalize_material(value: Any) -> str:
    """Material sem espaços nas pontas; vazio é inválido.

    Raises:
        InvalidRecordError: material ausente ou só com espaços.
    """
    if value is None or not str(value).strip():
        raise InvalidRecordError("material é obrigatório")
    return str(value).strip()


def generate_local_id(existing_ids: Collection[str]) -> str:
    """Gera um id temporário ``local-<ms>-<hex>`` ausente de ``existing_ids``."""
    while True:
        candidate = f"{LOCAL_ID_PREFIX}{int(time.time() * 1000)}-{secrets.token_hex(3)}"
        if candidate not in existing_ids:
            return candidate


def is_local_id(record_id: Any) -> bool:
    """Id gerado pelo fallback local (registro ausente do servidor)."""
    return isinstance(record_id, str) and record_id.startswith(LOCAL_ID_PREFIX)
