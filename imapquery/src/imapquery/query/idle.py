"""Poll the selected mailbox and announce messages that were not there before.

What:
  :class:`IdleWatcher` keeps a set of UIDs it has already seen and, on every
  poll, publishes a :class:`~imapquery.events.MessageNewEvent` (and invokes an
  optional callback) for each UID that is new.

Why:
  Not every server supports push ``IDLE``, and polling an overview works
  everywhere. Publishing through an event channel lets several observers react
  to new mail without the watcher knowing about them.

How:
  :meth:`IdleWatcher.prime` records the current overview without publishing.
  :meth:`IdleWatcher.run` then loops while the client reports a live
  connection and the stop signal is unset: expunge, overview, publish new
  UIDs in server order, and wait ``interval`` seconds on a
  :class:`threading.Event` so :meth:`IdleWatcher.stop` interrupts the wait.

Interfaces:
  :class:`IdleWatcher`.

Invariants & Safety:
  - The known-UID set only grows during a watch session.
  - Each UID produces at most one event per session.
  - A dropped connection ends the loop; it is logged, not raised.
"""
from __future__ import annotations

import threading
from typing import Callable, FrozenSet, Optional, Set

from ..config.schema import FetchMode
from ..errors import ConnectionUnavailable
from ..events import EventChannel, MessageNewEvent, default_channel
from ..imap.client import ImapClient
from ..imap.message import Message
from ..utils.logging import JsonLogger, get_logger

Callback = Callable[[Message], None]


class IdleWatcher:
    """Polling watcher bound to one client handle."""

    def __init__(
        self,
        client: ImapClient,
        *,
        events: Optional[EventChannel] = None,
        interval: float = 10,
        stop_event: Optional[threading.Event] = None,
        max_iterations: Optional[int] = None,
        fetch_options: FetchMode = FetchMode.PEEK,
        fetch_body: bool = True,
        fetch_attachments: bool = True,
        fetch_flags: bool = True,
        logger: Optional[JsonLogger] = None,
    ) -> None:
        self._client = client
        self._events = events if events is not None else default_channel
        self.interval = interval
        self._stop = stop_event or threading.Event()
        self.max_iterations = max_iterations
        self._fetch_options = FetchMode(fetch_options)
        self._fetch_body = fetch_body
        self._fetch_attachments = fetch_attachments
        self._fetch_flags = fetch_flags
        self._logger = logger or get_logger("imapquery.idle")
        self._known: Set[int] = set()
        self._primed = False

    @property
    def known_uids(self) -> FrozenSet[int]:
        return frozenset(self._known)

    def stop(self) -> None:
        """Ask the loop to exit after the current poll."""

        self._stop.set()

    def prime(self) -> None:
        """Record every message currently in the mailbox as already seen."""

        self._known.update(entry.uid for entry in self._client.overview())
        self._primed = True
        self._logger.info("idle_primed", known=len(self._known))

    def poll(self, callback: Optional[Callback] = None) -> int:
        """Run one expunge/overview cycle; returns the number of new messages."""

        self._client.expunge()
        found = 0
        for entry in self._client.overview():
            if entry.uid in self._known:
                continue
            self._known.add(entry.uid)
            message = Message(
                entry.uid,
                entry.number,
                self._client,
                fetch_options=self._fetch_options,
                fetch_body=self._fetch_body,
                fetch_attachments=self._fetch_attachments,
                fetch_flags=self._fetch_flags,
            )
            self._logger.info("message_new", uid=entry.uid, number=entry.number)
            self._events.publish(MessageNewEvent(message))
            if callback is not None:
                callback(message)
            found += 1
        return found

    def run(self, callback: Optional[Callback] = None) -> None:
        """Prime (once) and poll until disconnected, stopped, or out of iterations.

        Raises:
          ConnectionUnavailable: When priming fails; losses during the loop
            end it quietly.
        """

        if not self._primed:
            self.prime()
        iterations = 0
        while self._client.is_connected() and not self._stop.is_set():
            if self.max_iterations is not None and iterations >= self.max_iterations:
                break
            try:
                self.poll(callback)
            except ConnectionUnavailable as exc:
                self._logger.warning("idle_connection_lost", error=str(exc))
                return
            iterations += 1
            if self.max_iterations is not None and iterations >= self.max_iterations:
                break
            self._stop.wait(self.interval)
        self._logger.info("idle_stopped", iterations=iterations, known=len(self._known))
