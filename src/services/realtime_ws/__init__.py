# src/services/realtime_ws/__init__.py
"""
Realtime WebSocket Gateway — сервис live-геолокации автобусов.

Обеспечивает:
- WebSocket соединения водителей и пассажиров
- Реестр последних геолокаций активных соединений
- Рассылку полного снимка после каждого обновления
- Уведомление об отключении клиента
"""
