# tests/test_main.py
"""
Тесты для точки входа клиента (main.py).
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import main
from src.common.constants import UserRole


def make_offline_proxy() -> MagicMock:
    """Прокси, который так и не подключается к серверу."""
    proxy = MagicMock()
    proxy.is_connected = False
    proxy.is_sharing = False
    proxy.close = AsyncMock()
    proxy.share_location = AsyncMock()
    proxy.locate_user = AsyncMock()

    async def run_forever() -> None:
        await asyncio.Event().wait()

    proxy.run = run_forever
    return proxy


class TestWaitForConnection:
    """Тесты для wait_for_connection."""

    @pytest.mark.asyncio
    async def test_returns_when_connected(self) -> None:
        proxy = MagicMock(is_connected=True)
        task = asyncio.create_task(asyncio.sleep(10))

        assert await main.wait_for_connection(proxy, task, asyncio.Event()) is True
        task.cancel()

    @pytest.mark.asyncio
    async def test_shutdown_before_connection(self) -> None:
        """Сигнал остановки прерывает ожидание, даже если сервер недоступен."""
        proxy = MagicMock(is_connected=False)
        task = asyncio.create_task(asyncio.sleep(10))
        shutdown = asyncio.Event()
        shutdown.set()

        result = await asyncio.wait_for(main.wait_for_connection(proxy, task, shutdown), timeout=1)

        assert result is False
        task.cancel()


class TestRunClient:
    """Тесты для run_client."""

    @pytest.mark.asyncio
    async def test_stops_on_signal_while_server_unreachable(self) -> None:
        """Клиент завершается по сигналу, не дождавшись подключения."""
        proxy = make_offline_proxy()
        shutdown = asyncio.Event()

        def fake_signal_setup() -> None:
            main._shutdown_event = shutdown
            asyncio.get_running_loop().call_later(0.05, shutdown.set)

        with patch("main.setup_signal_handlers", side_effect=fake_signal_setup), \
                patch("src.client.ClientSessionProxy", return_value=proxy):
            await asyncio.wait_for(main.run_client(UserRole.DRIVER, ["7", "23.8", "91.2"]), timeout=2)

        proxy.share_location.assert_not_awaited()
        proxy.close.assert_awaited_once()
