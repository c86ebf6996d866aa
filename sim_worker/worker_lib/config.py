"""
sim_worker/worker_lib/config.py
Constantes, parâmetros de conexão e carregamento do config.json do Worker.
"""
import copy
import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict

from ..logs.logger import logger

ERROR_EXIT_STATUS = 1

# Nome fixo usado ao encaminhar logs para a plataforma
LOGGER_NAME = "worker_runner"

GET_OP_LIST_TIMEOUT_MS = 100

CONNECT_TIMEOUT = 5  # segundos

DEFAULT_LOCATOR_PORT = 7777

WORKER_CONFIG_PATH = str(Path(__file__).resolve().parent.parent / "config.json")

DEFAULT_CONFIG: Dict[str, any] = {
    "profiles": {
        "external": {"worker_type": "External"},
        "managed": {"worker_type": "Managed"},
    },
    "logger_name": LOGGER_NAME,
    "timing": {
        "op_list_timeout_ms": GET_OP_LIST_TIMEOUT_MS,
        "connect_timeout": CONNECT_TIMEOUT,
    },
    "locator": {"port": DEFAULT_LOCATOR_PORT},
    "logging": {"level": "INFO", "dir": "logs", "file_logging": True},
}


class NetworkConnectionType(Enum):
    TCP = "TCP"
    RAKNET = "RAKNET"


@dataclass(frozen=True)
class ConnectionParameters:
    """Parâmetros imutáveis passados para qualquer estratégia de conexão."""
    worker_type: str
    connection_type: NetworkConnectionType = NetworkConnectionType.TCP
    use_external_ip: bool = False


@dataclass(frozen=True)
class ReceptionistAddress:
    hostname: str
    port: int
    worker_id: str


@dataclass(frozen=True)
class LocatorCredentials:
    project_name: str
    deployment_id: str
    login_token: str

    def __repr__(self):
        # O token nunca vai inteiro para os logs
        return (f"LocatorCredentials(project_name={self.project_name!r}, "
                f"deployment_id={self.deployment_id!r}, login_token='***')")


def _merge(base: dict, override: dict) -> dict:
    """Mescla dicts recursivamente; valores de 'override' vencem."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str = None) -> dict:
    """
    Carrega o config.json e mescla sobre os valores padrão.

    Ordem de busca: argumento, variável SIM_WORKER_CONFIG, config.json do pacote.
    Arquivo ausente não impede o worker de iniciar (usa os padrões);
    JSON inválido sim.
    """
    config_path = config_path or os.environ.get("SIM_WORKER_CONFIG") or WORKER_CONFIG_PATH
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            loaded = json.load(f)
        logger.debug(f"Configuração '{config_path}' carregada.")
    except FileNotFoundError:
        logger.warning(f"Arquivo de configuração '{config_path}' não encontrado. Usando valores padrão.")
        loaded = {}
    except json.JSONDecodeError:
        logger.critical(f"Erro ao decodificar (formato inválido) o JSON em '{config_path}'!")
        raise

    return _merge(DEFAULT_CONFIG, loaded)
