# sim_worker/worker_lib/locator.py
import socket
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..logs.logger import logger
from payload_models import locator_cancel, locator_connect
from .config import CONNECT_TIMEOUT, DEFAULT_LOCATOR_PORT, ConnectionParameters
from .connection import Connection, LineSocket
from .errors import WorkerConnectionError

QUEUE_TIMEOUT = 30  # segundos sem notícia do Locator


@dataclass(frozen=True)
class QueueStatus:
    error: Optional[str] = None
    position: Optional[int] = None


@dataclass(frozen=True)
class LocatorParameters:
    project_name: str
    login_token: str
    credentials_type: str = "LOGIN_TOKEN"

    def __repr__(self):
        return f"LocatorParameters(project_name={self.project_name!r}, login_token='***')"


def split_host_port(hostname: str, default_port: int) -> Tuple[str, int]:
    """'host' ou 'host:porta' -> (host, porta)."""
    host, sep, port = hostname.rpartition(":")
    if sep and port.isdigit():
        return host, int(port)
    return hostname, default_port


class Locator:
    """
    Serviço intermediário: autentica com o login token, pode colocar o
    worker numa fila e, ao liberar, indica o Receptionist do deployment.
    """

    def __init__(self, hostname: str, locator_parameters: LocatorParameters,
                 default_port: int = DEFAULT_LOCATOR_PORT,
                 timeout: float = CONNECT_TIMEOUT, queue_timeout: float = QUEUE_TIMEOUT):
        self.host, self.port = split_host_port(hostname, default_port)
        self.parameters = locator_parameters
        self.timeout = timeout
        self.queue_timeout = queue_timeout

    def connect(self, deployment_id: str, params: ConnectionParameters,
                queue_callback: Callable[[QueueStatus], bool]) -> Connection:
        """
        Entra no deployment através do Locator. Bloqueia até ser admitido;
        queue_callback roda nesta mesma thread a cada status de fila.
        """
        logger.info(f"Conectando ao Locator {self.host}:{self.port} (deployment '{deployment_id}')...")
        try:
            sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except OSError as e:
            raise WorkerConnectionError(f"Não foi possível conectar ao Locator {self.host}:{self.port}: {e}") from e

        channel = LineSocket(sock)
        try:
            channel.send(locator_connect(
                project_name=self.parameters.project_name,
                deployment_id=deployment_id,
                login_token=self.parameters.login_token,
                credentials_type=self.parameters.credentials_type,
                worker_type=params.worker_type,
                use_external_ip=params.use_external_ip,
            ))
            admitted = self._wait_in_queue(channel, queue_callback)
        except OSError as e:
            raise WorkerConnectionError(f"Comunicação com o Locator falhou: {e}") from e
        finally:
            channel.close()

        target = admitted.get("RECEPTIONIST") or {}
        if 'ip' not in target or 'port' not in target:
            raise WorkerConnectionError(f"Locator liberou o worker sem Receptionist válido: {admitted}")

        worker_id = admitted.get("WORKER_UUID") or params.worker_type
        logger.info(f"Admitido pelo Locator. Seguindo para {target['ip']}:{target['port']}")

        future = Connection.connect_async(target['ip'], target['port'], worker_id, params, timeout=self.timeout)
        return future.result()

    def _wait_in_queue(self, channel: LineSocket, queue_callback) -> dict:
        while True:
            try:
                reply = channel.read_line(self.queue_timeout)
            except ValueError as e:
                raise WorkerConnectionError(f"Resposta inválida do Locator: {e}") from e

            if reply is None:
                raise WorkerConnectionError("Locator fechou a conexão antes de admitir o worker")

            if "QUEUE_STATUS" in reply:
                status_data = reply["QUEUE_STATUS"] or {}
                if not isinstance(status_data, dict):
                    raise WorkerConnectionError(f"Status de fila inválido: {status_data!r}")
                status = QueueStatus(error=status_data.get("ERROR"), position=status_data.get("POSITION"))
                logger.debug(f"Status da fila: {status}")
                if not queue_callback(status):
                    channel.send(locator_cancel())
                    raise WorkerConnectionError("queueing cancelled")
                continue

            response = reply.get("RESPONSE")
            if response == "ADMITTED":
                return reply
            if response == "REJECTED":
                raise WorkerConnectionError(f"Locator recusou a conexão: {reply.get('ERROR')}")

            logger.warning(f"Resposta inesperada do Locator: {reply}")
