# src/services/realtime_ws/app.py
"""
FastAPI приложение для Realtime WebSocket Gateway.

WebSocket endpoint:
- /ws — водители и пассажиры (роль серверу не важна)

REST endpoints:
- GET /health — проверка здоровья
- GET /stats — статистика соединений
- GET /api/v1/locations — текущий снимок геолокаций
"""

from __future__ import annotations

from contextlib import asynccontextmanager, suppress
from typing import Any

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel

from src.common.logger import log_error, log_info, log_warning, setup_logging
from src.config import settings
from src.core.locations import SessionRegistry
from src.services.realtime_ws.connection_manager import ConnectionManager
from src.services.realtime_ws.coordinator import BroadcastCoordinator
from src.shared.models.common import HealthStatus


SERVICE_NAME = "realtime_ws_gateway"


# === MODELS ===

class StatsResponse(BaseModel):
    """Статистика соединений."""
    active_connections: int
    total_connections_ever: int
    total_messages_sent: int
    total_dropped: int
    tracked_locations: int
    total_events: int
    rejected_events: int


# === LIFESPAN ===

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл приложения: реестр живёт от старта до остановки."""
    setup_logging()
    await log_info(
        f"Realtime WebSocket Gateway запущен, порт {settings.server.PORT}",
        extra={"ws_path": settings.server.WS_PATH},
    )

    yield

    coordinator: BroadcastCoordinator = app.state.coordinator
    await app.state.manager.close_all()
    app.state.registry.clear()
    await log_info(
        "Realtime WebSocket Gateway остановлен",
        extra=coordinator.get_stats(),
    )


# === APP ===

def create_app(send_queue_size: int | None = None) -> FastAPI:
    """
    Создать приложение со своим реестром, менеджером и координатором.

    Args:
        send_queue_size: Размер очереди исходящих сообщений на соединение
    """
    app = FastAPI(
        title="Bus Tracker Realtime Gateway",
        description="WebSocket сервис live-геолокации автобусов.",
        version=settings.system.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    registry = SessionRegistry()
    manager = ConnectionManager(
        settings.server.SEND_QUEUE_SIZE if send_queue_size is None else send_queue_size
    )
    app.state.registry = registry
    app.state.manager = manager
    app.state.coordinator = BroadcastCoordinator(registry, manager)

    app.add_api_route("/health", health_check, methods=["GET"], response_model=HealthStatus, tags=["Health"])
    app.add_api_route("/stats", get_stats, methods=["GET"], response_model=StatsResponse, tags=["Stats"])
    app.add_api_route("/api/v1/locations", get_locations, methods=["GET"], tags=["Location"])
    app.add_api_websocket_route(settings.server.WS_PATH, websocket_endpoint)
    return app


# === HEALTH CHECK ===

async def health_check() -> HealthStatus:
    """Проверка здоровья сервиса."""
    return HealthStatus(
        status="healthy",
        service=SERVICE_NAME,
        version=settings.system.VERSION,
    )


# === STATS ===

async def get_stats(request: Request) -> StatsResponse:
    """Получить статистику соединений."""
    return StatsResponse(**request.app.state.coordinator.get_stats())


# === LOCATIONS ===

async def get_locations(request: Request) -> dict[str, dict[str, Any]]:
    """Текущий снимок геолокаций (тот же, что получает новый клиент)."""
    return request.app.state.coordinator.snapshot()


# === WEBSOCKET ===

async def websocket_endpoint(websocket: WebSocket) -> None:
    """
    WebSocket для водителей и пассажиров.

    Кадры: {"event": "<имя>", "data": <payload>}.

    Входящие события:
    - send-location: {"latitude": 23.8, "longitude": 91.2, "busNumber": "7"}
    - location-shared: "7"
    - stop-location-sharing: "7"
    """
    coordinator: BroadcastCoordinator = websocket.app.state.coordinator
    connection_id = await coordinator.connect(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))

            raw = message.get("text")
            if raw is None:
                await log_warning(
                    f"Бинарный кадр от {connection_id} отброшен",
                    extra={"connection_id": connection_id},
                )
                continue
            await coordinator.handle_raw(connection_id, raw)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        # Ошибка одного соединения не затрагивает остальные
        await log_error(
            f"Ошибка соединения {connection_id}: {e!r}",
            extra={"connection_id": connection_id},
            exc_info=True,
        )
        with suppress(RuntimeError):
            # Сокет мог быть уже закрыт
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
    finally:
        await coordinator.disconnect(connection_id)


app = create_app()


# === STARTUP ===

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.server.HOST, port=settings.server.PORT)
