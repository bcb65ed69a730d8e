"""
In-process Event Dispatcher

Follow-on effects of a committed change (audit history, notifications) are
published as events after the originating transaction commits. Each handler
runs inside a SAVEPOINT on the caller's session and is committed on its own.
A failing handler only rolls back its savepoint, so objects the caller
already committed stay loaded and usable.

Usage:
    dispatcher.subscribe(ApplicationStatusChanged, record_status_change)
    ...
    await db.commit()
    await dispatcher.publish(db, ApplicationStatusChanged(...))
"""

import logging
from collections import defaultdict
from collections.abc import Callable, Coroutine
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

EventHandler = Callable[[AsyncSession, Any], Coroutine[Any, Any, None]]


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))


class EventDispatcher:
    """Routes events to the handlers subscribed to their class."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """Subscribe a handler; subscribing the same handler twice is a no-op."""
        handlers = self._handlers[event_type]
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Subscribed {_handler_name(handler)} to {event_type.__name__}")

    def unsubscribe(self, event_type: type, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: type) -> list[EventHandler]:
        return list(self._handlers.get(event_type, []))

    def clear(self) -> None:
        self._handlers.clear()

    async def publish(self, db: AsyncSession, event: Any) -> int:
        """
        Deliver an event to every subscribed handler.

        Handler failures are logged and swallowed; the publisher never sees
        them.

        Returns:
            Number of handlers that completed successfully
        """
        event_name = type(event).__name__
        delivered = 0

        for handler in self.handlers_for(type(event)):
            try:
                async with db.begin_nested():
                    await handler(db, event)
                await db.commit()
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Event handler {_handler_name(handler)} failed for {event_name}: {e}",
                    exc_info=True,
                )

        return delivered


# Global dispatcher instance
dispatcher = EventDispatcher()
