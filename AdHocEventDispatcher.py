from collections import defaultdict, deque
from typing import Callable, Hashable


class AdHocEventDispatcher:
    """
    A light weight dispatcher for ad hoc events.

    Events raised while the dispatcher is already dispatching (e.g. by a listener)
    are queued and handled by the running drain loop, after the events raised
    before them. Listeners never run nested inside each other.
    """

    def __init__(self):
        self._is_running = False
        self._listeners: dict[Hashable, list[Callable[[], None]]] = defaultdict(list)
        self._queue: deque = deque()

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def pending(self) -> int:
        return len(self._queue)

    def add_listener(self, event: Hashable, listener: Callable[[], None]):
        """
        Args:
            event: The ID of the event.
            listener: Zero argument callable that must be run when the event occurs.
        """
        self._listeners[event].append(listener)

    def notify(self, event: Hashable) -> None:
        """
        Informs all listeners that an event has occurred.
        """
        self._queue.append(event)
        self._dispatch()

    def _dispatch(self) -> None:
        if self._is_running:
            return

        self._is_running = True
        try:
            while self._queue:
                event = self._queue.popleft()
                for listener in list(self._listeners.get(event, ())):
                    listener()
        except Exception:
            # A failing listener aborts the whole drain.
            self._queue.clear()
            raise
        finally:
            self._is_running = False
