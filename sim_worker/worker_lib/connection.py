# sim_worker/worker_lib/connection.py
import json
import socket
import threading
from concurrent.futures import Future
from typing import List, Optional

from ..logs.logger import logger
from payload_models import encode, worker_connect, worker_log_message
from .config import CONNECT_TIMEOUT, ConnectionParameters, NetworkConnectionType
from .errors import WorkerConnectionError
from .ops import DisconnectOp, LogLevel, OpList, op_from_payload

# Nível do loguru usado para espelhar cada LogLevel da plataforma
_LOGURU_LEVELS = {
    LogLevel.DEBUG: "DEBUG",
    LogLevel.INFO: "INFO",
    LogLevel.WARN: "WARNING",
    LogLevel.ERROR: "ERROR",
    LogLevel.FATAL: "CRITICAL",
}


class LineSocket:
    """Socket TCP que troca payloads JSON, um por linha."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self._buffer = b""
        self.eof = False
        self.eof_reason = None

    def send(self, payload: dict):
        self.sock.sendall(encode(payload))

    def read_line(self, timeout: float) -> Optional[dict]:
        """
        Bloqueia até receber uma linha completa e devolve o JSON decodificado.
        Devolve None se o outro lado fechou. socket.timeout se nada chegar a tempo.
        """
        while b"\n" not in self._buffer:
            if self.eof:
                return None
            self.sock.settimeout(timeout)
            chunk = self.sock.recv(4096)
            if not chunk:
                self.eof = True
                return None
            self._buffer += chunk

        line, self._buffer = self._buffer.split(b"\n", 1)
        data = json.loads(line.decode('utf-8'))
        if not isinstance(data, dict):
            raise ValueError(f"Payload não é um objeto JSON: {data!r}")
        return data

    def read_lines(self, timeout: float) -> List[bytes]:
        """Espera no máximo 'timeout' por dados e devolve todas as linhas completas, ainda em bytes."""
        if b"\n" not in self._buffer and not self.eof:
            self.sock.settimeout(timeout)
            try:
                chunk = self.sock.recv(4096)
                if chunk:
                    self._buffer += chunk
                else:
                    self.eof = True
            except socket.timeout:
                pass  # poll vazio
            except OSError as e:
                self.eof = True
                self.eof_reason = str(e)

        *lines, self._buffer = self._buffer.split(b"\n")
        return [line for line in lines if line.strip()]

    def close(self):
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # já desconectado
        self.sock.close()


class Connection:
    """
    Sessão viva com a plataforma. Criada apenas por connect_async()
    e fechada uma única vez por quem a possui (o WorkerLoop).
    """

    def __init__(self, channel: LineSocket, worker_id: str, params: ConnectionParameters):
        self._channel = channel
        self.worker_id = worker_id
        self.params = params
        self._closed = False
        self._disconnect_delivered = False

    @classmethod
    def connect_async(cls, hostname: str, port: int, worker_id: str,
                      params: ConnectionParameters, timeout: float = CONNECT_TIMEOUT) -> Future:
        """
        Abre a conexão com o Receptionist em uma thread auxiliar.
        O Future resolve com a Connection ou com WorkerConnectionError.
        """
        future = Future()

        def _attempt():
            if not future.set_running_or_notify_cancel():
                return
            try:
                connection = cls._open(hostname, port, worker_id, params, timeout)
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(connection)

        thread = threading.Thread(target=_attempt, name=f"connect-{worker_id}", daemon=True)
        thread.start()
        return future

    @classmethod
    def _open(cls, hostname, port, worker_id, params, timeout):
        if params.connection_type is not NetworkConnectionType.TCP:
            raise WorkerConnectionError(f"Tipo de conexão não suportado: {params.connection_type.value}")

        logger.info(f"Conectando ao Receptionist {hostname}:{port} como '{worker_id}'...")
        try:
            sock = socket.create_connection((hostname, port), timeout=timeout)
        except OSError as e:
            raise WorkerConnectionError(f"Não foi possível conectar a {hostname}:{port}: {e}") from e

        channel = LineSocket(sock)
        try:
            channel.send(worker_connect(
                worker_type=params.worker_type,
                worker_id=worker_id,
                use_external_ip=params.use_external_ip,
                connection_type=params.connection_type.value,
            ))
            reply = channel.read_line(timeout)
        except (OSError, ValueError) as e:
            channel.close()
            raise WorkerConnectionError(f"Handshake com {hostname}:{port} falhou: {e}") from e

        if reply is None:
            channel.close()
            raise WorkerConnectionError(f"Receptionist {hostname}:{port} fechou a conexão durante o handshake")
        if reply.get("STATUS") != "ACK":
            channel.close()
            raise WorkerConnectionError(f"Receptionist recusou a conexão: {reply.get('ERROR', reply)}")

        logger.success(f"Conectado com sucesso ao Receptionist {hostname}:{port}")
        return cls(channel, worker_id, params)

    @property
    def is_connected(self) -> bool:
        return not self._closed and not self._channel.eof

    def send_log_message(self, level: LogLevel, logger_name: str, message: str):
        """Envia o log para o sink da plataforma e espelha no logger local."""
        logger.bind(logger_name=logger_name).log(_LOGURU_LEVELS[level], message)

        if not self.is_connected:
            logger.warning(f"Log descartado, conexão fechada: {message}")
            return
        try:
            self._channel.send(worker_log_message(level.value, logger_name, message))
        except OSError as e:
            # A queda vira um DisconnectOp no próximo poll
            logger.error(f"Falha ao enviar log para a plataforma: {e}")

    def get_op_list(self, timeout_ms: int) -> OpList:
        """Espera até 'timeout_ms' e devolve as operações recebidas (pode ser vazio)."""
        if self._closed:
            return OpList()

        ops = []
        for line in self._channel.read_lines(timeout_ms / 1000.0):
            try:
                ops.append(op_from_payload(json.loads(line.decode('utf-8'))))
            except ValueError as e:
                logger.warning(f"Operação inválida ignorada: {line!r} ({e})")

        if self._channel.eof and not self._disconnect_delivered:
            self._disconnect_delivered = True
            reason = self._channel.eof_reason or "connection closed by remote"
            ops.append(DisconnectOp(reason=reason))

        return OpList(ops)

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._channel.close()
        logger.info(f"Conexão do worker '{self.worker_id}' encerrada.")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
