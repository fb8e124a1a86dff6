"""
Event plumbing

Listener registration and dispatch for the two event surfaces of the system:
the client events raised by the session controller, and the uniform progress
channel ("progress" and "message" events) that front-ends observe.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .domain import EventCompleteRatio

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class ClientEvent(Enum):
    """Events raised by the session controller"""

    ACTION_REQUIRED = "action_required"
    INTERNAL_ERROR = "internal_error"
    USER_ERROR = "user_error"
    SUCCESS = "success"


class Subscription:
    """
    Handle returned by every registration.

    Child subscriptions added with ``add`` are torn down together with their
    parent. Unsubscribing more than once has no further effect.
    """

    def __init__(self, teardown: Optional[Callable[[], None]] = None):
        self._teardowns: List[Callable[[], None]] = []
        self._closed = False
        if teardown is not None:
            self._teardowns.append(teardown)

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, child: Union['Subscription', Callable[[], None]]) -> None:
        teardown = child.unsubscribe if isinstance(child, Subscription) else child
        if self._closed:
            teardown()
            return
        self._teardowns.append(teardown)

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        teardowns, self._teardowns = self._teardowns, []
        for teardown in teardowns:
            teardown()


class EventEmitter:
    """Simple in-memory, synchronous event emitter keyed by event name"""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    @staticmethod
    def _key(event: Union[str, Enum]) -> str:
        return event.value if isinstance(event, Enum) else event

    def on(self, event: Union[str, Enum], listener: Listener) -> Subscription:
        """Register a listener and return a subscription that removes it"""
        key = self._key(event)
        self._listeners.setdefault(key, []).append(listener)
        return Subscription(lambda: self.off(key, listener))

    def off(self, event: Union[str, Enum], listener: Listener) -> None:
        listeners = self._listeners.get(self._key(event), [])
        try:
            listeners.remove(listener)
        except ValueError:
            pass  # Listener wasn't registered

    def emit(self, event: Union[str, Enum], *args: Any) -> bool:
        """
        Call every listener of an event in registration order.

        Returns:
            True if at least one listener was called
        """
        key = self._key(event)
        listeners = list(self._listeners.get(key, []))
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for %r raised", key)
        return bool(listeners)


@dataclass(frozen=True)
class ProgressEvent:
    """A tagged progress step, optionally carrying a completion ratio"""

    tag: str
    ratio: Optional[EventCompleteRatio] = None

    def handle(self, emitter: 'ProgressEmitter') -> None:
        emitter.emit_progress_event(self.tag, self.ratio)


@dataclass(frozen=True)
class MessageEvent:
    """Free-text diagnostic message"""

    message: str

    def handle(self, emitter: 'ProgressEmitter') -> None:
        emitter.emit_message_event(self.message)


ProgressableEvent = Union[ProgressEvent, MessageEvent]


class ProgressEmitter(EventEmitter):
    """Emitter for the uniform progress channel"""

    PROGRESS = "progress"
    MESSAGE = "message"

    def emit_progress_event(self, tag: str, ratio: Optional[EventCompleteRatio] = None) -> None:
        logger.debug("progress %s %s", tag, ratio or "")
        self.emit(self.PROGRESS, ProgressEvent(tag, ratio))

    def emit_message_event(self, message: str) -> None:
        logger.debug("message %s", message)
        self.emit(self.MESSAGE, MessageEvent(message))

    def on_progress(self, listener: Callable[[ProgressEvent], Any]) -> Subscription:
        return self.on(self.PROGRESS, listener)

    def on_message(self, listener: Callable[[MessageEvent], Any]) -> Subscription:
        return self.on(self.MESSAGE, listener)

    def subscribe_all(self, listener: Callable[[ProgressableEvent], Any]) -> Subscription:
        """Register one listener for both progress and message events"""
        subscription = Subscription()
        subscription.add(self.on_progress(listener))
        subscription.add(self.on_message(listener))
        return subscription

    def forward_to(self, target: 'ProgressEmitter') -> Subscription:
        """Re-emit every event of this channel on another channel"""
        return self.subscribe_all(lambda event: event.handle(target))
