"""
sim_worker/worker_runner.py
Worker gerenciado: só conecta pelo Receptionist.

    python -m sim_worker.worker_runner receptionist <hostname> <port> <worker_id>
"""
import sys

from .worker_lib.cli import MANAGED
from .worker_lib.cli import main as cli_main


def main() -> int:
    return cli_main(sys.argv[1:], MANAGED)


if __name__ == "__main__":
    sys.exit(main())
