# circularbuild/infrastructure/event_dispatcher.py
import logging
from collections import defaultdict
from collections.abc import Callable

from circularbuild.domain.events import Event


class EventDispatcher:
    """Fans domain events out to the handlers registered for their class name.

    Events are dispatched after the request transaction is committed, so a
    failing handler is logged and the remaining handlers still run.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.handlers: dict[str, list[Callable]] = defaultdict(list)
        self.logger = logger or logging.getLogger(__name__)

    def register(self, event_type: str, handler: Callable) -> None:
        self.handlers[event_type].append(handler)

    async def dispatch(self, event: Event) -> None:
        event_type = event.__class__.__name__
        for handler in self.handlers[event_type]:
            try:
                await handler(event)
            except Exception:
                self.logger.exception(
                    f"Handler {getattr(handler, '__qualname__', handler)!s} "
                    f"failed for {event_type}"
                )

    async def dispatch_all(self, events: list[Event]) -> None:
        for event in events:
            await self.dispatch(event)
