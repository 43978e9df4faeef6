#!/usr/bin/env python3
# main.py
"""
Главная точка входа Bus Tracker.
Запускает сервер или консольного клиента в зависимости от аргументов.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import Any

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import UserRole


# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def run_server() -> None:
    """Запускает Realtime WebSocket Gateway."""
    import uvicorn

    config = uvicorn.Config(
        "src.services.realtime_ws.app:app",
        host=settings.server.HOST,
        port=settings.server.PORT,
        log_level=settings.system.LOG_LEVEL.lower(),
    )
    server = uvicorn.Server(config)
    await server.serve()


async def wait_for_connection(
    proxy: Any,
    connection_task: asyncio.Task,
    shutdown_event: asyncio.Event,
) -> bool:
    """
    Ждёт первого подключения клиента.

    Returns:
        False если пришёл сигнал остановки или клиент завершился раньше
    """
    while not proxy.is_connected:
        if shutdown_event.is_set() or connection_task.done():
            return False
        await asyncio.sleep(0.1)
    return True


async def run_client(role: UserRole, args: list[str]) -> None:
    """
    Запускает консольного клиента.

    driver: main.py driver <bus_number> <lat> <lon>
    passenger: main.py passenger [<lat> <lon>]
    """
    from src.client import ClientSessionProxy
    from src.client.console import ConsoleMapRenderer, ConsoleNotifier, FixedPositionSensor

    bus_number = ""
    coords = args
    if role == UserRole.DRIVER:
        bus_number = args[0] if args else ""
        coords = args[1:]

    latitude = float(coords[0]) if len(coords) > 0 else None
    longitude = float(coords[1]) if len(coords) > 1 else None

    proxy = ClientSessionProxy(
        ConsoleMapRenderer(),
        FixedPositionSensor(latitude, longitude),
        ConsoleNotifier(),
    )
    setup_signal_handlers()
    connection_task = asyncio.create_task(proxy.run(), name="client_connection")

    if await wait_for_connection(proxy, connection_task, _shutdown_event):
        if role == UserRole.DRIVER:
            await proxy.share_location(bus_number)
        elif latitude is not None:
            await proxy.locate_user()

        await _shutdown_event.wait()

    if proxy.is_sharing:
        await proxy.stop_sharing()
    await proxy.close()
    connection_task.cancel()
    try:
        await connection_task
    except asyncio.CancelledError:
        pass


def print_usage() -> None:
    """Выводит справку по использованию."""
    print("""
Bus Tracker — live-геолокация автобусов

Использование:
    python main.py [режим] [аргументы]

Режимы:
    server                               WebSocket сервер (по умолчанию)
    driver <bus_number> <lat> <lon>      Водитель: передавать геолокацию
    passenger [<lat> <lon>]              Пассажир: смотреть карту

Переменные окружения:
    PORT          Порт сервера (по умолчанию 3000)
    SERVER_URL    Адрес сервера для клиента (ws://localhost:3000/ws)
    """)


async def main(mode: str, args: list[str]) -> None:
    """Главная функция запуска."""
    setup_logging()
    await log_info(f"Запуск в режиме: {mode}")

    try:
        if mode == "server":
            await run_server()
        else:
            await run_client(UserRole(mode), args)
    except Exception as e:
        await log_error(f"Критическая ошибка: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    mode = "server"
    rest: list[str] = []

    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ("--help", "-h"):
            print_usage()
            sys.exit(0)
        elif arg in ("server", UserRole.DRIVER.value, UserRole.PASSENGER.value):
            mode = arg
            rest = sys.argv[2:]
        else:
            print(f"Ошибка: неизвестный режим '{arg}'")
            print_usage()
            sys.exit(1)

    try:
        asyncio.run(main(mode, rest))
    except KeyboardInterrupt:
        pass
