# EventBus - Toolkit-independent publish/subscribe event system
#
# Each Document owns one bus.  The editor runs on a single thread, so
# there is no locking; instead delivery is queued: an event emitted
# while another event is being dispatched is delivered only after the
# current dispatch has finished.  A subscriber reacting to
# "node_removed" therefore never runs in the middle of a reorder or a
# delete.

import logging
from collections import defaultdict, deque


class EventBus:
    """Single-threaded publish/subscribe bus with queued delivery."""

    def __init__(self):
        self._subscribers = defaultdict(list)
        self._pending = deque()
        self._dispatching = False

    def on(self, event_name, callback):
        """Subscribe to an event.

        Args:
            event_name: String identifier for the event.
            callback: Callable to invoke when event fires.
                      Receives (*args, **kwargs) passed to emit().
        """
        if callback not in self._subscribers[event_name]:
            self._subscribers[event_name].append(callback)

    def off(self, event_name, callback):
        """Unsubscribe from an event."""
        try:
            self._subscribers[event_name].remove(callback)
        except ValueError:
            pass

    def emit(self, event_name, *args, **kwargs):
        """Queue an event and deliver everything pending.

        If called from inside a subscriber the event is only queued;
        the outermost emit() drains the queue in FIFO order.
        """
        self._pending.append((event_name, args, kwargs))
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                name, a, kw = self._pending.popleft()
                for callback in list(self._subscribers.get(name, ())):
                    callback(*a, **kw)
        finally:
            self._dispatching = False
            if self._pending:
                # A subscriber raised; what was queued behind it is lost
                logging.warning(
                    "EventBus: dropping %d undelivered events: %s",
                    len(self._pending),
                    ", ".join(name for name, _a, _kw in self._pending))
                self._pending.clear()

    def clear(self, event_name=None):
        """Remove all subscribers, optionally for a specific event."""
        if event_name is None:
            self._subscribers.clear()
        else:
            self._subscribers.pop(event_name, None)
