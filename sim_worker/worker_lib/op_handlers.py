# sim_worker/worker_lib/op_handlers.py
import sys

from ..logs.logger import logger
from .errors import FatalLogError
from .ops import DisconnectOp, LogLevel, LogMessageOp


class OpHandlersMixin:

    def _on_disconnect(self, op: DisconnectOp):
        """Única saída normal do loop: a plataforma desconectou o worker."""
        print(f"[disconnect] {op.reason}", file=sys.stderr)
        logger.warning(f"Desconectado pela plataforma: {op.reason}")
        self.is_connected = False

    def _on_log_message(self, op: LogMessageOp):
        # self.connection e self.logger_name vêm da classe WorkerLoop
        self.connection.send_log_message(op.level, self.logger_name, op.message)

        if op.level is LogLevel.FATAL:
            print(f"Fatal error: {op.message}", file=sys.stderr)
            raise FatalLogError(op.message)
