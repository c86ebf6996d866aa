"""
sim_worker/worker_lib/connect.py
Estratégias de conexão: Receptionist (direto) e Locator (com fila).
"""
import sys
from dataclasses import replace
from functools import partial

from ..logs.logger import logger
from .config import (CONNECT_TIMEOUT, DEFAULT_LOCATOR_PORT, LOGGER_NAME,
                     ConnectionParameters, LocatorCredentials, ReceptionistAddress)
from .connection import Connection
from .errors import QueueingError
from .locator import Locator, LocatorParameters, QueueStatus
from .ops import LogLevel


def queue_callback(queue_status: QueueStatus, worker_type: str) -> bool:
    """
    Chamado pelo Locator a cada status de fila.
    Erro na fila é fatal: não há como tentar de novo a partir daqui.
    """
    if queue_status.error:
        print(f"Error while queueing: {queue_status.error}", file=sys.stderr)
        raise QueueingError(queue_status)

    print(f"Worker of type '{worker_type}' connecting through locator: queueing.")
    return True


class ConnectStrategy:
    name = None

    def __init__(self, logger_name: str = LOGGER_NAME, timeout: float = CONNECT_TIMEOUT):
        self.logger_name = logger_name
        self.timeout = timeout

    def prepare(self, params: ConnectionParameters) -> ConnectionParameters:
        """Devolve a cópia dos parâmetros que esta estratégia realmente usa."""
        raise NotImplementedError

    def _open(self, params: ConnectionParameters) -> Connection:
        raise NotImplementedError

    def connect(self, params: ConnectionParameters) -> Connection:
        params = self.prepare(params)
        connection = self._open(params)
        connection.send_log_message(LogLevel.INFO, self.logger_name,
                                    f"Successfully connected using the {self.name}")
        return connection


class ReceptionistStrategy(ConnectStrategy):
    name = "Receptionist"

    def __init__(self, address: ReceptionistAddress, **kwargs):
        super().__init__(**kwargs)
        self.address = address

    def prepare(self, params):
        # Clientes locais conectando num deployment local não usam IP externo
        return replace(params, use_external_ip=False)

    def _open(self, params):
        future = Connection.connect_async(self.address.hostname, self.address.port,
                                          self.address.worker_id, params, timeout=self.timeout)
        return future.result()


class LocatorStrategy(ConnectStrategy):
    name = "Locator"

    def __init__(self, hostname: str, credentials: LocatorCredentials, queue_callback=None,
                 locator_port: int = DEFAULT_LOCATOR_PORT, **kwargs):
        super().__init__(**kwargs)
        self.hostname = hostname
        self.credentials = credentials
        self.queue_callback = queue_callback
        self.locator_port = locator_port

    def prepare(self, params):
        # Deployment na nuvem só aceita worker com IP externo
        return replace(params, use_external_ip=True)

    def _open(self, params):
        callback = self.queue_callback or partial(queue_callback, worker_type=params.worker_type)
        locator = Locator(
            self.hostname,
            LocatorParameters(project_name=self.credentials.project_name,
                              login_token=self.credentials.login_token),
            default_port=self.locator_port,
            timeout=self.timeout,
        )
        logger.debug(f"Usando {self.credentials!r}")
        return locator.connect(self.credentials.deployment_id, params, callback)
