# sim_worker/run_worker.py
"""
Worker externo: conecta pelo Receptionist ou pelo Locator.

    python -m sim_worker.run_worker receptionist <hostname> <port> <worker_id>
    python -m sim_worker.run_worker locator <hostname> <project_name> <deployment_id> <login_token>
"""
import sys

from .worker_lib.cli import EXTERNAL
from .worker_lib.cli import main as cli_main


def main() -> int:
    return cli_main(sys.argv[1:], EXTERNAL)


if __name__ == "__main__":
    sys.exit(main())
