# test/fake_platform.py
"""
Servidor TCP falso (Receptionist ou Locator) para os testes.
Cada instância aceita UMA conexão e executa um roteiro numa thread.
"""
import json
import socket
import threading

from payload_models import encode


# --- Payloads que a plataforma envia ao Worker ---

def receptionist_ack() -> dict:
    return {"STATUS": "ACK"}


def receptionist_reject(error: str) -> dict:
    return {"STATUS": "NOK", "ERROR": error}


def locator_queue_status(position: int = None, error: str = None) -> dict:
    """Progresso da fila. 'ERROR' preenchido significa que a fila falhou."""
    return {"QUEUE_STATUS": {"POSITION": position, "ERROR": error}}


def locator_admitted(ip: str, port: int, worker_id: str) -> dict:
    return {
        "RESPONSE": "ADMITTED",
        "RECEPTIONIST": {"ip": ip, "port": port},
        "WORKER_UUID": worker_id,
    }


def locator_rejected(error: str) -> dict:
    return {"RESPONSE": "REJECTED", "ERROR": error}


def op_disconnect(reason: str) -> dict:
    return {"OP": "DISCONNECT", "REASON": reason}


def op_log_message(level: str, message: str) -> dict:
    return {"OP": "LOG_MESSAGE", "LEVEL": level, "MESSAGE": message}


def op_generic(kind: str, **fields) -> dict:
    payload = {"OP": kind}
    payload.update(fields)
    return payload


class ScriptedPeer:
    """O lado 'plataforma' da conexão, entregue ao roteiro do teste."""

    def __init__(self, conn, received):
        self.conn = conn
        self.reader = conn.makefile('r', encoding='utf-8')
        self.received = received

    def recv(self):
        line = self.reader.readline()
        data = json.loads(line) if line else None
        self.received.append(data)
        return data

    def send(self, payload):
        self.conn.sendall(encode(payload))


class FakePlatform:

    def __init__(self, script):
        self.script = script
        self.received = []
        self.error = None
        self.accepted = threading.Event()

        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind(("127.0.0.1", 0))
        self._server.listen()
        self._server.settimeout(10)
        self.port = self._server.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def __enter__(self):
        self._thread.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._thread.join(timeout=10)
        self._server.close()
        return False

    def _serve(self):
        try:
            conn, _ = self._server.accept()
        except OSError:
            return
        self.accepted.set()
        with conn:
            conn.settimeout(10)
            peer = ScriptedPeer(conn, self.received)
            try:
                self.script(peer)
            except (OSError, ValueError) as e:
                self.error = e
            finally:
                # O makefile também segura o socket; só fecha de fato depois dele
                peer.reader.close()
