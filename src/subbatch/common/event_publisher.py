"""In-process publisher for translation progress events."""

import inspect
import logging
from typing import Awaitable, Callable, List, Union

from subbatch.common.schemas import ProgressEvent

logger = logging.getLogger(__name__)

EventCallback = Callable[[ProgressEvent], Union[None, Awaitable[None]]]


class EventPublisher:
    """
    Publishes progress events to subscribed callbacks.

    Subscribers may be plain functions or coroutine functions. They are
    called in subscription order; a failing subscriber is logged and does
    not stop delivery to the others.
    """

    def __init__(self):
        """Initialize the event publisher with no subscribers."""
        self._subscribers: List[EventCallback] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """
        Register a callback for every published event.

        Args:
            callback: Function receiving a ProgressEvent

        Returns:
            Function that removes the subscription when called
        """
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback: EventCallback) -> None:
        """Remove a callback; unknown callbacks are ignored."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    async def publish_event(self, event: ProgressEvent) -> bool:
        """
        Deliver an event to every subscriber.

        Args:
            event: ProgressEvent to deliver

        Returns:
            True if all subscribers handled the event, False if any raised
        """
        delivered = True
        for callback in list(self._subscribers):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                delivered = False
                logger.error(
                    f"❌ Progress subscriber {getattr(callback, '__name__', callback)!r} "
                    f"failed on {event.event_type.value}: {e}",
                    exc_info=True,
                )

        logger.debug(
            f"📤 Published {event.event_type.value} to {len(self._subscribers)} subscriber(s)"
        )
        return delivered
