# sim_worker/worker_lib/worker.py
from ..logs.logger import logger
from .config import ERROR_EXIT_STATUS, GET_OP_LIST_TIMEOUT_MS, LOGGER_NAME, ConnectionParameters
from .connect import ConnectStrategy
from .dispatcher import Dispatcher
from .op_handlers import OpHandlersMixin

CONNECTING = "CONNECTING"
RUNNING = "RUNNING"
TERMINATED = "TERMINATED"


class WorkerLoop(OpHandlersMixin):

    def __init__(self, strategy: ConnectStrategy, params: ConnectionParameters,
                 op_list_timeout_ms: int = GET_OP_LIST_TIMEOUT_MS, logger_name: str = LOGGER_NAME):
        """Prepara o loop; nada de rede acontece antes de start()."""
        self.strategy = strategy
        self.params = params
        self.op_list_timeout_ms = op_list_timeout_ms
        self.logger_name = logger_name

        self.state = CONNECTING
        self.connection = None
        self.is_connected = False

    def start(self) -> int:
        """
        Conecta, registra os handlers e processa operações até a desconexão.

        Erros de conexão, de fila e logs FATAL sobem como exceção; a conexão
        é fechada no caminho. Retorna sempre ERROR_EXIT_STATUS: o loop só
        termina por desconexão forçada.
        """
        with logger.contextualize(worker_type=self.params.worker_type):
            logger.info(f"Conectando via {self.strategy.name}...")
            try:
                connection = self.strategy.connect(self.params)
            except Exception:
                self.state = TERMINATED
                raise

            try:
                self._run(connection)
            finally:
                self.state = TERMINATED
                self.is_connected = False

            logger.warning("Loop de operações encerrado: worker desconectado.")
            return ERROR_EXIT_STATUS

    def _run(self, connection):
        with connection, Dispatcher() as dispatcher:
            self.connection = connection
            self.state = RUNNING
            self.is_connected = True

            dispatcher.on_disconnect(self._on_disconnect)
            dispatcher.on_log_message(self._on_log_message)

            logger.info(f"Worker '{connection.worker_id}' em execução. Aguardando operações...")
            while self.is_connected:
                with connection.get_op_list(self.op_list_timeout_ms) as op_list:
                    dispatcher.process(op_list)
