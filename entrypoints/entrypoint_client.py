#!/usr/bin/env python3
"""
Entrypoint для консольного клиента.

Запуск:
    python entrypoint_client.py driver 7 23.829195 91.278194
    python entrypoint_client.py passenger 23.83 91.27
"""

import asyncio
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from main import main as run_main, print_usage
from src.common.constants import UserRole


def main() -> None:
    """Запустить клиента водителя или пассажира."""
    if len(sys.argv) < 2 or sys.argv[1] not in (UserRole.DRIVER.value, UserRole.PASSENGER.value):
        print_usage()
        sys.exit(1)

    try:
        asyncio.run(run_main(sys.argv[1], sys.argv[2:]))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
