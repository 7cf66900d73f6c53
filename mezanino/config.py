# mezanino/config.py
"""
Configurações globais e valores padrão do estoque do mezanino.

A conexão com o banco remoto (Supabase) vem de variáveis de ambiente.
Na ausência delas um endpoint sintaticamente válido é usado, para que a
aplicação suba normalmente; as operações remotas então falham e caem na
política de fallback local do sincronizador.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


PLACEHOLDER_URL = "https://placeholder.supabase.co"
PLACEHOLDER_KEY = "placeholder-key"

# Limite rígido de linhas na consulta completa (quando habilitado)
HARD_FETCH_LIMIT = 1500

URL_ENV_KEYS = ("SUPABASE_URL", "REACT_APP_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
KEY_ENV_KEYS = ("SUPABASE_ANON_KEY", "REACT_APP_SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY")

STATUS_EM_ESTOQUE = "EM ESTOQUE"
STATUS_PAGO = "PAGO"
PLACEHOLDER = "-"


@dataclass
class Settings:
    """Parâmetros de acesso ao armazenamento remoto."""
    supabase_url: str = PLACEHOLDER_URL
    supabase_key: str = PLACEHOLDER_KEY
    table: str = "inventory"
    fetch_limit: Optional[int] = None  # None = sem limite

    @property
    def is_placeholder(self) -> bool:
        return self.supabase_url == PLACEHOLDER_URL


def _first_env(environ: Mapping[str, str], keys) -> Optional[str]:
    for k in keys:
        val = (environ.get(k) or "").strip()
        if val:
            return val
    return None


def _parse_fetch_limit(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    s = str(raw).strip().lower()
    if s in {"true", "sim", "yes"}:
        return HARD_FETCH_LIMIT
    try:
        n = int(s)
    except ValueError:
        return None
    return n if n > 0 else None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Monta as configurações a partir do ambiente (com fallback para placeholders)."""
    env = os.environ if environ is None else environ
    return Settings(
        supabase_url=_first_env(env, URL_ENV_KEYS) or PLACEHOLDER_URL,
        supabase_key=_first_env(env, KEY_ENV_KEYS) or PLACEHOLDER_KEY,
        table=(env.get("MEZANINO_TABLE") or "inventory").strip() or "inventory",
        fetch_limit=_parse_fetch_limit(env.get("MEZANINO_FETCH_LIMIT")),
    )


# Instância global dos valores padrão
DEFAULTS = Settings()
