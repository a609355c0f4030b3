"""
Fixed-interval polling and independent fan-out fetches.

A Poller owns a CancellationToken; results (and errors) arriving after
``stop()`` are dropped instead of being applied to a discarded view.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from .config import POLL_INTERVAL, logger


class CancellationToken:
    """Shared liveness flag checked before applying late results."""

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout``; True if cancelled meanwhile."""
        return self._event.wait(timeout)


class Poller:
    """Run ``fetch`` now and every ``interval`` seconds until stopped."""

    def __init__(
        self,
        fetch: Callable[[], Any],
        apply: Callable[[Any], None],
        interval: float = POLL_INTERVAL,
        on_error: Optional[Callable[[Exception], None]] = None,
        token: Optional[CancellationToken] = None,
    ):
        self.fetch = fetch
        self.apply = apply
        self.interval = interval
        self.on_error = on_error
        self.token = token or CancellationToken()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> bool:
        """One guarded cycle. Returns False if the result was dropped."""
        if self.token.cancelled:
            return False
        try:
            result = self.fetch()
        except Exception as error:
            if self.token.cancelled:
                return False
            if self.on_error is None:
                raise
            self.on_error(error)
            return True
        if self.token.cancelled:
            return False
        self.apply(result)
        return True

    def _loop(self) -> None:
        while not self.token.cancelled:
            try:
                self.run_once()
            except Exception as error:
                logger.error(f"Polling cycle failed: {error}", exc_info=True)
            if self.token.wait(self.interval):
                break

    def start(self) -> "Poller":
        if self._thread is None:
            self._thread = threading.Thread(target=self._loop, name="report-poller", daemon=True)
            self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        self.token.cancel()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> "Poller":
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()


def fetch_independently(
    calls: Dict[str, Callable[[], Any]],
    fallbacks: Optional[Dict[str, Any]] = None,
    max_workers: Optional[int] = None,
) -> Dict[str, Any]:
    """Fan out named calls; a failing call yields its fallback instead of failing the batch."""
    fallbacks = fallbacks or {}
    if not calls:
        return {}

    results: Dict[str, Any] = {}
    with ThreadPoolExecutor(max_workers=max_workers or len(calls)) as pool:
        futures = {name: pool.submit(call) for name, call in calls.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except Exception as error:
                logger.warning(f"⚠️ {name} failed: {error}")
                results[name] = fallbacks.get(name)
    return results
