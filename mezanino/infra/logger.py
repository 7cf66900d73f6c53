# mezanino/infra/logger.py
"""
Sistema de logging do estoque do mezanino.

Cada preocupação tem seu próprio logger e arquivo: sincronização da
coleção em memória, chamadas ao banco remoto, importação/exportação de
planilhas e eventos gerais. Falhas remotas são apenas registradas aqui;
nunca chegam ao usuário como erro bloqueante.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


def _env_flag(name: str, default: bool = True) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in {"0", "false", "f", "nao", "não", "n", "no", "off"}


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = _env_flag("MEZANINO_LOG")

# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Remove handlers antigos (reimportação em testes)
    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


# Diretório base para logs (na pasta do projeto, ou MEZANINO_LOGS_DIR)
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = Path(os.environ.get("MEZANINO_LOGS_DIR") or (BASE_DIR / "logs"))

LOG_FILES = {
    "sync": LOGS_DIR / "sync.log",
    "remote": LOGS_DIR / "remote.log",
    "files": LOGS_DIR / "files.log",
    "system": LOGS_DIR / "system.log",
}

sync_logger = setup_logger('mezanino.sync', str(LOG_FILES["sync"]))
remote_logger = setup_logger('mezanino.remote', str(LOG_FILES["remote"]))
files_logger = setup_logger('mezanino.files', str(LOG_FILES["files"]))
system_logger = setup_logger('mezanino.system', str(LOG_FILES["system"]))


def log_sync(action: str, record_id: Optional[str] = None, outcome: Optional[str] = None, **kwargs) -> None:
    """
    Log de operações do sincronizador (add, update, delete, import, reload).

    Args:
        action: Operação realizada
        record_id: Id do registro afetado (opcional)
        outcome: Resultado (confirmed/local)
        **kwargs: Dados adicionais
    """
    if not ENABLE_LOGGING:
        return
    log_data = {"action": action, "id": record_id, "outcome": outcome, **kwargs}
    sync_logger.info(f"SYNC_{action.upper()}: {log_data}")


def log_remote_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """Log de chamadas bem-sucedidas ao banco remoto."""
    if not ENABLE_LOGGING:
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    remote_logger.info(f"REMOTE_{operation.upper()}: {log_data}")


def log_remote_failure(operation: str, error: Any, **kwargs) -> None:
    """
    Registra uma falha de comunicação com o banco remoto.

    A falha é recuperada localmente pelo sincronizador; este registro
    existe apenas para diagnóstico.
    """
    if not ENABLE_LOGGING:
        return
    log_data = {"operation": operation, "error": str(error), **kwargs}
    remote_logger.warning(f"REMOTE_FAILED: {operation} - {log_data}")


def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "event": event,
        "details": details or {}
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """Log para importação/exportação de planilhas."""
    if not ENABLE_LOGGING:
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        **kwargs
    }
    files_logger.info(f"FILE_{operation.upper()}: {log_data}")


def get_log_summary(log_type: str = "sync", lines: int = 100) -> Optional[str]:
    """
    Obtém as linhas mais recentes de um log.

    Args:
        log_type: Tipo de log (sync, remote, files, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string
    """
    if not ENABLE_LOGGING:
        return None

    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    for handler in logging.getLogger(f"mezanino.{log_type}").handlers:
        handler.flush()

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
            recent_lines = all_lines[-lines:] if len(all_lines) > lines else all_lines
            return ''.join(recent_lines)
    except OSError as e:
        return f"Erro ao ler log {log_type}: {str(e)}"
