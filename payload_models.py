# payload_models.py
"""
Centraliza a criação dos payloads (contratos) que o Worker envia ao
Receptionist e ao Locator. Cada payload é um dict serializado como uma
linha JSON.
"""
import json

# --- Payloads enviados pelo WORKER ---

def worker_connect(worker_type: str, worker_id: str, use_external_ip: bool,
                   connection_type: str = "TCP") -> dict:
    """Handshake que o Worker envia ao Receptionist ao abrir a sessão."""
    return {
        "WORKER": "CONNECT",
        "WORKER_TYPE": worker_type,
        "WORKER_UUID": worker_id,
        "USE_EXTERNAL_IP": use_external_ip,
        "CONNECTION_TYPE": connection_type,
    }


def worker_log_message(level: str, logger_name: str, message: str) -> dict:
    """Mensagem de log que o Worker envia para o sink da plataforma."""
    return {
        "TASK": "LOG_MESSAGE",
        "LEVEL": level,
        "LOGGER_NAME": logger_name,
        "MESSAGE": message,
    }


def locator_connect(project_name: str, deployment_id: str, login_token: str,
                    worker_type: str, use_external_ip: bool = True,
                    credentials_type: str = "LOGIN_TOKEN") -> dict:
    """Pedido de entrada que o Worker envia ao Locator."""
    return {
        "LOCATOR": "CONNECT",
        "PROJECT_NAME": project_name,
        "DEPLOYMENT_ID": deployment_id,
        "CREDENTIALS_TYPE": credentials_type,
        "LOGIN_TOKEN": login_token,
        "WORKER_TYPE": worker_type,
        "USE_EXTERNAL_IP": use_external_ip,
    }


def locator_cancel() -> dict:
    """O Worker desiste de esperar na fila do Locator."""
    return {"LOCATOR": "CANCEL"}


def encode(payload: dict) -> bytes:
    """Serializa um payload como uma linha JSON terminada em '\\n'."""
    return (json.dumps(payload) + '\n').encode('utf-8')
