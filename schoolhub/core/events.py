"""
In-process domain event bus.

Constructed once by the application factory and handed to request handlers
through a FastAPI dependency; there is no module-level instance.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, DefaultDict, Dict, List
from uuid import UUID, uuid4

from starlette.requests import Request

from schoolhub.core.logging import get_logger

logger = get_logger(__name__)

FEE_ASSIGNED = "fee.assigned"
PAYMENT_RECORDED = "payment.recorded"


@dataclass(frozen=True)
class DomainEvent:
    event_type: str
    payload: Dict[str, Any]
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """Fan-out of domain events to async subscribers, keyed by event type."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: DomainEvent) -> None:
        """
        Deliver event to every subscriber. Called after the originating
        transaction committed, so a failing handler is logged and skipped
        rather than propagated to the caller.
        """
        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug("event.no_handlers", event_type=event.event_type)
            return
        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "event.handler_failed",
                    event_type=event.event_type,
                    event_id=str(event.event_id),
                    handler=getattr(handler, "__name__", repr(handler)),
                )


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus
