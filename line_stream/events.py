"""Minimal synchronous event emitter shared by streams and sources."""

from typing import Any, Callable, Dict, List

Listener = Callable[..., Any]


class EventEmitter:
    """
    Registers callbacks per event name and calls them in registration order.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, fn: Listener) -> Listener:
        """Register `fn` for `event` and return it."""
        self._listeners.setdefault(event, []).append(fn)
        return fn

    def once(self, event: str, fn: Listener) -> Listener:
        """Register `fn` to be called at most once."""
        def wrapper(*args: Any) -> Any:
            self.off(event, wrapper)
            return fn(*args)
        wrapper.listener = fn  # type: ignore[attr-defined]
        return self.on(event, wrapper)

    def off(self, event: str, fn: Listener) -> None:
        """Remove `fn` (or a `once` wrapper around it). Unknown listeners are ignored."""
        listeners = self._listeners.get(event, [])
        for registered in listeners:
            if registered is fn or getattr(registered, "listener", None) is fn:
                listeners.remove(registered)
                return

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of `event` with `args`.

        Returns:
            False if any listener returned exactly False, True otherwise
        """
        ready = True
        # copy: listeners may unregister themselves while being called
        for fn in list(self._listeners.get(event, [])):
            if fn(*args) is False:
                ready = False
        return ready
