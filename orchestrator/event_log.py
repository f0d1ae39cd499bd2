"""Append-only event log and publish/subscribe bus."""

import logging
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Callable

from schemas.events import Event, EventType

logger = logging.getLogger(__name__)

Subscriber = Callable[[Event], None]


class EventStore:
    """Append-only, order-preserving event log.

    Events are kept in memory and, when ``jsonl_path`` is set, mirrored to
    a JSON Lines file (one wire-format event per line). An existing file
    is replayed on construction.
    """

    def __init__(self, jsonl_path: Path | str | None = None) -> None:
        """Initialize the store.

        Args:
            jsonl_path: Optional JSONL file to persist to and reload from
        """
        self._events: list[Event] = []
        self._ids: set[str] = set()
        self._lock = threading.Lock()
        self.jsonl_path = Path(jsonl_path) if jsonl_path else None

        if self.jsonl_path and self.jsonl_path.exists():
            self._load()

    def _load(self) -> None:
        assert self.jsonl_path is not None
        with open(self.jsonl_path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    event = Event.from_json(line)
                except ValueError as e:
                    raise ValueError(f"{self.jsonl_path}:{line_no}: invalid event: {e}") from e
                self._events.append(event)
                self._ids.add(event.id)
        logger.info(f"Loaded {len(self._events)} events from {self.jsonl_path}")

    def append(self, event: Event) -> Event:
        """Append an event.

        Args:
            event: Event to append

        Returns:
            The stored event

        Raises:
            ValueError: If an event with the same id was already appended
        """
        with self._lock:
            if event.id in self._ids:
                raise ValueError(f"Duplicate event id: {event.id}")
            stored = event.copy_detached()
            if self.jsonl_path:
                self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.jsonl_path, "a", encoding="utf-8") as f:
                    f.write(stored.to_json() + "\n")
            self._events.append(stored)
            self._ids.add(stored.id)
            return stored.copy_detached()

    def events(
        self,
        correlation_id: str | None = None,
        types: set[EventType] | None = None,
    ) -> list[Event]:
        """Return copies of stored events in log order.

        Args:
            correlation_id: Only events of this run
            types: Only events of these types

        Returns:
            Detached copies, so callers cannot alter the log
        """
        with self._lock:
            snapshot = list(self._events)
        return [
            e.copy_detached()
            for e in snapshot
            if (correlation_id is None or e.correlation_id == correlation_id)
            and (types is None or e.type in types)
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class EventBus:
    """Publishes events to the store, then fans them out to subscribers.

    Subscribers are notified only after the event is durably appended.
    A failing subscriber is logged and does not affect the publisher.
    """

    def __init__(self, store: EventStore | None = None) -> None:
        self.store = store if store is not None else EventStore()
        self._subscribers: list[Subscriber] = []
        self._sub_lock = threading.Lock()

    def publish(self, event: Event) -> "Future[Event]":
        """Append an event and notify subscribers.

        Args:
            event: Event to publish

        Returns:
            Future resolved with the stored event once appended
        """
        future: Future[Event] = Future()
        try:
            stored = self.store.append(event)
        except Exception as e:
            future.set_exception(e)
            return future

        future.set_result(stored)

        with self._sub_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(stored.copy_detached())
            except Exception:
                logger.exception(f"Event subscriber failed for {stored.type.value}")
        return future

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a live observer.

        Returns:
            Callable that removes the subscription
        """
        with self._sub_lock:
            self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._sub_lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def events(self, correlation_id: str | None = None) -> list[Event]:
        return self.store.events(correlation_id)
