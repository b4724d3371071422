"""In-process notifications about changes to the stored metrics."""

import inspect
from collections.abc import Awaitable, Callable

from modelviz.log import get_logger
from modelviz.types import MetricsEvent

logger = get_logger(__name__)

MetricsListener = Callable[[MetricsEvent], Awaitable[None] | None]


class MetricsEventBus:
    """Broadcasts metrics events to every subscriber.

    Listeners may be plain functions or coroutine functions. A failing
    listener is logged and skipped; it never affects the publisher or the
    other listeners.
    """

    def __init__(self) -> None:
        self._listeners: list[MetricsListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: MetricsListener) -> Callable[[], None]:
        """Register ``listener`` and return a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, event: MetricsEvent) -> None:
        # Snapshot so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.error(f"Metrics listener failed on {event.value}: {exc}")
