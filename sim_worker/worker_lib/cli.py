"""
sim_worker/worker_lib/cli.py
Ponto de entrada compartilhado pelos dois executáveis do Worker.

Os executáveis só diferem no perfil: tipo de worker, se aceitam o Locator
e o texto de uso.
"""
import sys
from dataclasses import dataclass
from typing import List

from ..logs.logger import logger, set_console_level, setup_file_logging
from .config import (ERROR_EXIT_STATUS, ConnectionParameters, LocatorCredentials,
                     NetworkConnectionType, ReceptionistAddress, load_config)
from .connect import ConnectStrategy, LocatorStrategy, ReceptionistStrategy
from .errors import ArgumentError, WorkerConnectionError, WorkerError
from .worker import WorkerLoop

RECEPTIONIST = "receptionist"
LOCATOR = "locator"


@dataclass(frozen=True)
class WorkerProfile:
    key: str
    program: str
    allow_locator: bool


EXTERNAL = WorkerProfile(key="external", program="python -m sim_worker.run_worker", allow_locator=True)
MANAGED = WorkerProfile(key="managed", program="python -m sim_worker.worker_runner", allow_locator=False)


def usage(profile: WorkerProfile) -> str:
    lines = [f"Usage: {profile.program} receptionist <hostname> <port> <worker_id>"]
    if profile.allow_locator:
        lines.append(f"       {profile.program} locator <hostname> <project_name> <deployment_id> <login_token>")
    lines.append("Connects to the simulation platform")
    if profile.allow_locator:
        lines += [
            "    <hostname>      - hostname of the receptionist or locator to connect to.",
            "    <port>          - port to use if connecting through the receptionist.",
            "    <worker_id>     - name of the worker assigned by the platform.",
            "    <project_name>  - name of the project to run.",
            "    <deployment_id> - name of the cloud deployment to run.",
            "    <login_token>   - token to use when connecting through the locator.",
        ]
    else:
        lines += [
            "    <hostname>      - hostname of the receptionist to connect to.",
            "    <port>          - port to use",
            "    <worker_id>     - name of the worker assigned by the platform.",
        ]
    return "\n".join(lines)


def parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ArgumentError(f"Porta inválida: {value!r}")
    if not 0 <= port <= 65535:
        raise ArgumentError(f"Porta fora do intervalo: {port}")
    return port


def parse_args(argv: List[str], profile: WorkerProfile, config: dict) -> ConnectStrategy:
    """Valida os argumentos e monta a estratégia de conexão correspondente."""
    if profile.allow_locator:
        if len(argv) < 1 or argv[0] not in (RECEPTIONIST, LOCATOR):
            raise ArgumentError(f"Modo desconhecido: {argv[:1]}")
        use_locator = argv[0] == LOCATOR
    else:
        # Como no worker gerenciado original: só a quantidade é verificada
        use_locator = False

    expected = 5 if use_locator else 4
    if len(argv) != expected:
        raise ArgumentError(f"Esperados {expected} argumentos, recebidos {len(argv)}")

    options = {
        "logger_name": config["logger_name"],
        "timeout": config["timing"]["connect_timeout"],
    }
    if use_locator:
        credentials = LocatorCredentials(project_name=argv[2], deployment_id=argv[3], login_token=argv[4])
        return LocatorStrategy(argv[1], credentials, locator_port=config["locator"]["port"], **options)

    address = ReceptionistAddress(hostname=argv[1], port=parse_port(argv[2]), worker_id=argv[3])
    return ReceptionistStrategy(address, **options)


def _process_id(worker_type: str, strategy: ConnectStrategy) -> str:
    if isinstance(strategy, LocatorStrategy):
        return f"{worker_type}_{strategy.credentials.deployment_id}"
    return f"{worker_type}_{strategy.address.worker_id}"


def main(argv: List[str], profile: WorkerProfile = EXTERNAL, config_path: str = None) -> int:
    config = load_config(config_path)
    set_console_level(config["logging"]["level"])
    worker_type = config["profiles"][profile.key]["worker_type"]

    try:
        strategy = parse_args(argv, profile, config)
    except ArgumentError as e:
        logger.debug(f"Argumentos inválidos: {e}")
        print(usage(profile))
        return e.exit_status

    params = ConnectionParameters(
        worker_type=worker_type,
        connection_type=NetworkConnectionType.TCP,
        use_external_ip=isinstance(strategy, LocatorStrategy),
    )

    if config["logging"]["file_logging"]:
        setup_file_logging(_process_id(worker_type, strategy),
                           log_dir=config["logging"]["dir"], level=config["logging"]["level"])

    loop = WorkerLoop(
        strategy,
        params,
        op_list_timeout_ms=config["timing"]["op_list_timeout_ms"],
        logger_name=config["logger_name"],
    )
    try:
        return loop.start()
    except WorkerConnectionError as e:
        print(f"Connection failed: {e}", file=sys.stderr)
        logger.error(f"Falha na conexão via {strategy.name}: {e}")
        return e.exit_status
    except WorkerError as e:
        # Fila com erro ou log FATAL: a mensagem já foi impressa pelo handler
        logger.critical(f"Worker encerrado: {e}")
        return e.exit_status
    except KeyboardInterrupt:
        logger.warning("Worker encerrado pelo usuário.")
        return ERROR_EXIT_STATUS
