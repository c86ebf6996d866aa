"""
sim_worker/worker_lib/ops.py
Operações recebidas da plataforma e o lote (OpList) devolvido por cada poll.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List

from ..logs.logger import logger

DISCONNECT = "DISCONNECT"
LOG_MESSAGE = "LOG_MESSAGE"


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"

    @classmethod
    def parse(cls, value: str) -> "LogLevel":
        try:
            return cls(str(value).upper())
        except ValueError:
            logger.warning(f"Nível de log desconhecido '{value}'. Usando ERROR.")
            return cls.ERROR


@dataclass(frozen=True)
class Op:
    """Operação genérica: só o tipo importa para o Dispatcher."""
    kind: str
    payload: Dict[str, any] = field(default_factory=dict)


@dataclass(frozen=True)
class DisconnectOp:
    reason: str
    kind: str = field(default=DISCONNECT, init=False)


@dataclass(frozen=True)
class LogMessageOp:
    level: LogLevel
    message: str
    kind: str = field(default=LOG_MESSAGE, init=False)


def op_from_payload(data: dict):
    """Converte uma linha JSON já decodificada na operação correspondente."""
    if not isinstance(data, dict):
        raise ValueError(f"Operação não é um objeto JSON: {data!r}")
    kind = str(data.get("OP", "")).upper()
    if not kind:
        raise ValueError(f"Payload sem campo 'OP': {data}")

    if kind == DISCONNECT:
        return DisconnectOp(reason=str(data.get("REASON", "")))
    if kind == LOG_MESSAGE:
        return LogMessageOp(level=LogLevel.parse(data.get("LEVEL")), message=str(data.get("MESSAGE", "")))

    payload = {k: v for k, v in data.items() if k != "OP"}
    return Op(kind=kind, payload=payload)


class OpList:
    """
    Lote de operações de um único poll.

    Só pode ser percorrido uma vez. Ao sair do bloco 'with' o lote é
    liberado, mesmo que um handler tenha levantado exceção.
    """

    def __init__(self, ops: List = None):
        self._ops = list(ops or [])
        self._iterator = iter(self._ops)
        self.released = False

    def __len__(self):
        return len(self._ops)

    def __iter__(self) -> Iterator:
        return self._iterator

    def release(self):
        self._ops = []
        self._iterator = iter(())
        self.released = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
