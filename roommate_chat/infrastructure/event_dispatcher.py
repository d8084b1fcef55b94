# roommate_chat/infrastructure/event_dispatcher.py
import logging
from collections import defaultdict
from collections.abc import Callable

from roommate_chat.domain.events import Event


class EventDispatcher:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.handlers: dict[str, list[Callable]] = defaultdict(list)
        self.logger = logger or logging.getLogger(__name__)

    def register(self, event_type: str, handler: Callable) -> None:
        self.handlers[event_type].append(handler)

    async def dispatch(self, event: Event) -> None:
        # messages are already stored; a failed broadcast must not fail the send
        event_type = event.__class__.__name__
        for handler in self.handlers[event_type]:
            try:
                await handler(event)
            except Exception as e:
                self.logger.error(f"Handler for {event_type} failed: {e!s}")
