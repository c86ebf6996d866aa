"""
sim_worker/logs/logger.py
Configuração do logger global do Worker usando loguru.
"""
from loguru import logger
import sys

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}:{function}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:DD/MM/YYYY HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"

# 1. Remove o handler padrão
logger.remove()

# 2. Sink do CONSOLE. Vai para stderr: stdout fica livre para o texto de uso
#    e os avisos de fila do Locator.
_console_sink_id = logger.add(
    sys.stderr,
    colorize=True,
    format=CONSOLE_FORMAT,
    level="INFO",
)


def set_console_level(level: str):
    """Troca o nível mínimo do sink de console (ex: vindo do config.json)."""
    global _console_sink_id
    logger.remove(_console_sink_id)
    _console_sink_id = logger.add(
        sys.stderr,
        colorize=True,
        format=CONSOLE_FORMAT,
        level=level,
    )


def setup_file_logging(process_id: str, log_dir: str = "logs", level: str = "INFO"):
    """
    Configura os handlers de ARQUIVO para um ID de processo específico.
    Cada worker ganha seus próprios arquivos de atividade e de erro.
    """
    # Garante que o ID seja seguro para um nome de arquivo
    safe_id = "".join(c for c in process_id if c.isalnum() or c in ('_', '-')).strip()
    if not safe_id:
        safe_id = "unknown_worker"

    log_path_base = f"{log_dir}/{safe_id}"  # Ex: "logs/External_w1"

    # Sink de atividade
    logger.add(
        f"{log_path_base}_activity.log",
        rotation="5 MB",
        retention="7 days",
        format=FILE_FORMAT,
        level=level,
        encoding="utf-8",
    )

    # Sink de erro: só WARNING, ERROR, CRITICAL
    logger.add(
        f"{log_path_base}_error.log",
        rotation="2 MB",
        retention="30 days",
        format=FILE_FORMAT,
        level="WARNING",
        encoding="utf-8",
    )

    logger.debug(f"Logs de arquivo configurados em {log_path_base}_*.log")
    return log_path_base
