from typing import Any, Callable, Dict, Hashable


class SessionState:
    """
    Holds "already happened" markers for effects that must run at most once
    per session. Passed around explicitly so tests can use a fresh one.
    """

    def __init__(self):
        self._done: Dict[Hashable, Any] = {}

    def has_run(self, key: Hashable) -> bool:
        return key in self._done

    def run_once(self, key: Hashable, fn: Callable[[], Any]) -> Any:
        """Run fn the first time key is seen; later calls return the first result."""
        if key not in self._done:
            self._done[key] = fn()
        return self._done[key]

    def reset(self) -> None:
        self._done.clear()
