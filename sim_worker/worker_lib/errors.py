"""
sim_worker/worker_lib/errors.py
Erros do Worker. Todos carregam o código de saída que o processo deve usar.
"""


class WorkerError(Exception):
    exit_status = 1


class ArgumentError(WorkerError):
    """Linha de comando inválida. Tratado no ponto de entrada (mostra o uso)."""


class WorkerConnectionError(WorkerError, ConnectionError):
    """Falha ao conectar (rede, autenticação, deployment ou token inválido)."""


class QueueingError(WorkerError):
    """O Locator reportou erro enquanto o worker esperava na fila."""

    def __init__(self, queue_status):
        super().__init__(f"Error while queueing: {queue_status.error}")
        self.queue_status = queue_status


class FatalLogError(WorkerError):
    """A plataforma enviou uma mensagem de log com nível FATAL."""

    def __init__(self, message: str):
        super().__init__(f"Fatal error: {message}")
        self.log_message = message
