"""In-process event channel used to announce newly arrived messages.

What:
  Provide :class:`EventChannel`, a synchronous publish/subscribe registry, and
  :class:`MessageNewEvent`, the notification published by the idle watcher.

Why:
  Observers (CLI printers, application hooks) should learn about new mail
  without the watcher knowing who they are. A tiny registry keeps that
  decoupling without pulling in a message broker.

How:
  Handlers are stored per event type in subscription order. :meth:`publish`
  calls every handler registered for the event's exact type synchronously on
  the publishing thread; handler exceptions propagate to the publisher.

Interfaces:
  :class:`MessageNewEvent`, :class:`EventChannel`, :data:`default_channel`.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, DefaultDict, List, Type

if TYPE_CHECKING:  # pragma: no cover
    from .imap.message import Message

Handler = Callable[[Any], None]


@dataclass(frozen=True)
class MessageNewEvent:
    """Published once per message the idle watcher has not seen before."""

    message: "Message"


class EventChannel:
    """Synchronous publish/subscribe registry keyed by event type."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[Type[Any], List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[Any], handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for ``event_type``.

        Returns:
          A callable that removes the subscription again.
        """

        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, event: Any) -> int:
        """Deliver ``event`` to its subscribers; returns how many were called."""

        handlers = list(self._handlers.get(type(event), ()))
        for handler in handlers:
            handler(event)
        return len(handlers)

    def clear(self) -> None:
        self._handlers.clear()


default_channel = EventChannel()
