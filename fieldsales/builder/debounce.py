"""Cancellable trailing-edge debounce built on threading.Timer."""

import threading


class Debouncer:
    """Run ``fn`` once, ``delay`` seconds after the last ``schedule`` call.

    ``flush`` runs a pending call immediately in the caller's thread;
    ``cancel`` drops it.
    """

    def __init__(self, fn, delay: float = 0.2):
        self.fn = fn
        self.delay = delay
        self._timer: threading.Timer | None = None
        self._pending: tuple | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self, *args, **kwargs) -> None:
        with self._lock:
            self._stop_timer()
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            self._stop_timer()
            self._pending = None

    def flush(self) -> bool:
        """Run the pending call now. Returns False if nothing was pending."""
        with self._lock:
            self._stop_timer()
            call, self._pending = self._pending, None
        return self._run(call)

    def _stop_timer(self) -> None:
        # a timer that already started may still call _fire; the bumped
        # generation makes that call a no-op
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            call, self._pending = self._pending, None
            self._timer = None
        self._run(call)

    def _run(self, call) -> bool:
        if call is None:
            return False
        args, kwargs = call
        self.fn(*args, **kwargs)
        return True
