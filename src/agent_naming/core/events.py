"""Typed lifecycle events and a synchronous listener registry."""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Union

from .models import AgentMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentRegistered:
    """An agent was stored under ans_name."""

    ans_name: str
    metadata: AgentMetadata


@dataclass(frozen=True)
class AgentRemoved:
    """The registration under ans_name was deleted."""

    ans_name: str


@dataclass(frozen=True)
class ClientError:
    """A client operation failed."""

    operation: str
    error: Exception
    ans_name: str | None = None


Event = Union[AgentRegistered, AgentRemoved, ClientError]
Listener = Callable[[Event], None]


class EventBus:
    """Delivers events to subscribed listeners.

    Listeners run synchronously in the emitting thread. An exception raised
    by a listener is logged and never reaches the emitter.
    """

    def __init__(self):
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            Callable that unsubscribes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Deliver an event to every listener."""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Event listener %r failed on %s", listener, type(event).__name__
                )
