# sim_worker/worker_lib/dispatcher.py
from typing import Callable, Dict, List

from ..logs.logger import logger
from .ops import DISCONNECT, LOG_MESSAGE, OpList


class Dispatcher:
    """
    Registro tipo de operação -> handlers.
    Handlers do mesmo tipo rodam na ordem em que foram registrados.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    def register(self, kind: str, handler: Callable):
        self._handlers.setdefault(kind, []).append(handler)
        logger.debug(f"Handler registrado para {kind}: {getattr(handler, '__name__', handler)}")

    def on_disconnect(self, handler: Callable):
        self.register(DISCONNECT, handler)

    def on_log_message(self, handler: Callable):
        self.register(LOG_MESSAGE, handler)

    def process(self, op_list: OpList):
        """Entrega cada operação do lote, em ordem. Tipo sem handler é ignorado."""
        for op in op_list:
            for handler in self._handlers.get(op.kind, ()):
                handler(op)

    def close(self):
        self._handlers.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
