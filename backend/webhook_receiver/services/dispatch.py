import enum
import logging
from typing import Callable

from webhook_receiver.schemas.events import VerifiedEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[VerifiedEvent], None]


class HandlerError(Exception):
    """A handler could not process a verified event."""


class DispatchOutcome(str, enum.Enum):
    HANDLED = "handled"
    UNHANDLED = "unhandled"
    FAILED = "failed"


class EventRouter:
    """Route verified events to handlers by exact event type."""

    def __init__(self) -> None:
        self._handlers: dict[str, EventHandler] = {}

    def add(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._handlers:
            raise ValueError(f"Handler already registered for {event_type}")
        self._handlers[event_type] = handler

    def register(self, event_type: str) -> Callable[[EventHandler], EventHandler]:
        def decorator(handler: EventHandler) -> EventHandler:
            self.add(event_type, handler)
            return handler

        return decorator

    @property
    def event_types(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, event: VerifiedEvent) -> DispatchOutcome:
        handler = self._handlers.get(event.type)
        if handler is None:
            logger.info(f"Unhandled event type: {event.type}")
            return DispatchOutcome.UNHANDLED

        # The delivery is acknowledged either way, so handler failures stop here.
        try:
            handler(event)
        except Exception as e:
            logger.error(
                f"Handler for {event.type} failed on event {event.id}: {e}",
                exc_info=True,
            )
            return DispatchOutcome.FAILED
        return DispatchOutcome.HANDLED
