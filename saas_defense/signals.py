"""Publish/subscribe bus the view layer listens on, flushed once per tick."""
from __future__ import annotations

from typing import Any, Callable

CUSTOMER_SPAWNED = "customer_spawned"
CUSTOMER_CONVERTED = "customer_converted"
CUSTOMER_CHURNED = "customer_churned"
CUSTOMER_RECOVERED = "customer_recovered"
CUSTOMER_LAP = "customer_lap"
TOWER_PLACED = "tower_placed"
TOWER_UPGRADED = "tower_upgraded"
TOWER_SOLD = "tower_sold"
PRODUCT_UPGRADE_STARTED = "product_upgrade_started"
PRODUCT_UPGRADE_COMPLETED = "product_upgrade_completed"
METRICS_UPDATED = "metrics_updated"
GAME_OVER = "game_over"

# Payload keys every signal carries.
SIGNAL_FIELDS: dict[str, frozenset[str]] = {
    CUSTOMER_SPAWNED: frozenset({"customer_id", "type"}),
    CUSTOMER_CONVERTED: frozenset({"customer_id", "previous"}),
    CUSTOMER_CHURNED: frozenset({"customer_id", "previous"}),
    CUSTOMER_RECOVERED: frozenset({"customer_id", "previous"}),
    CUSTOMER_LAP: frozenset({"customer_id", "lap"}),
    TOWER_PLACED: frozenset({"tower_id", "type", "cost"}),
    TOWER_UPGRADED: frozenset({"tower_id", "level", "cost"}),
    TOWER_SOLD: frozenset({"tower_id", "value"}),
    PRODUCT_UPGRADE_STARTED: frozenset({"cost"}),
    PRODUCT_UPGRADE_COMPLETED: frozenset({"pleased", "upset"}),
    METRICS_UPDATED: frozenset({"metrics"}),
    GAME_OVER: frozenset({"tick", "capital"}),
}

SIGNALS = frozenset(SIGNAL_FIELDS)

Handler = Callable[[str, dict[str, Any]], None]


class SignalBus:
    """Queues signals during a tick and delivers them on :meth:`flush`.

    Handlers receive ``(signal_name, data)``. Signals published while a
    flush is running are held for the next flush.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Handler]] = {}
        self._queue: list[tuple[str, dict[str, Any]]] = []

    @staticmethod
    def _check(signal_name: str) -> None:
        if signal_name not in SIGNALS:
            raise ValueError(f"Unknown signal {signal_name!r}")

    def subscribe(self, signal_name: str, handler: Handler) -> None:
        self._check(signal_name)
        self._subscribers.setdefault(signal_name, []).append(handler)

    def unsubscribe(self, signal_name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(signal_name)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def publish(self, signal_name: str, **data: Any) -> None:
        """Queue ``data`` under ``signal_name``.

        Raises ``ValueError`` for an unknown name or when the payload keys
        differ from the ones declared in :data:`SIGNAL_FIELDS`.
        """
        self._check(signal_name)
        expected = SIGNAL_FIELDS[signal_name]
        if data.keys() != expected:
            raise ValueError(
                f"{signal_name} carries {sorted(expected)}, got {sorted(data)}"
            )
        self._queue.append((signal_name, data))

    def pending(self) -> int:
        return len(self._queue)

    def flush(self) -> None:
        snapshot = self._queue
        self._queue = []
        for signal_name, data in snapshot:
            for handler in list(self._subscribers.get(signal_name, [])):
                handler(signal_name, data)

    def clear(self) -> None:
        self._queue.clear()
