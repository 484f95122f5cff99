"""
Request coalescing for upstream refreshes.

Concurrent lookups that miss the same key share one upstream call instead of
each hitting the provider. Requests for different keys never wait on each
other.
"""
import threading
import time
import logging
from typing import Dict, Optional, Callable, Any
from dataclasses import dataclass, field

logger = logging.getLogger("cache.coalescer")


@dataclass
class InFlightFetch:
    """An upstream call that other callers may join."""
    done: threading.Event = field(default_factory=threading.Event)
    result: Optional[Any] = None
    error: Optional[BaseException] = None
    started_at: float = field(default_factory=time.monotonic)
    joined: int = 0


class RequestCoalescer:
    """
    Shares a single in-flight upstream call among concurrent callers of one key.

    The first caller runs ``fetch_fn``; later callers block on an Event until
    it finishes and then receive the same result, or the same exception.
    """

    def __init__(self, namespace: str = "", timeout: float = 30.0):
        """
        Args:
            namespace: Provider namespace, used in log messages
            timeout: Max seconds a joining caller waits for the in-flight call
        """
        self.namespace = namespace
        self._timeout = timeout
        self._in_flight: Dict[str, InFlightFetch] = {}
        self._lock = threading.Lock()
        self._coalesced = 0

    def run(self, key: str, fetch_fn: Callable[[], Any]) -> Any:
        """
        Run ``fetch_fn`` for ``key`` or join the call already running.

        Raises:
            TimeoutError: If a joining caller waits longer than the timeout
            Exception: Any error from fetch_fn, re-raised to every caller
        """
        with self._lock:
            in_flight = self._in_flight.get(key)
            leader = in_flight is None
            if leader:
                in_flight = InFlightFetch()
                self._in_flight[key] = in_flight
            else:
                in_flight.joined += 1
                self._coalesced += 1

        if leader:
            return self._lead(key, in_flight, fetch_fn)

        logger.debug(f"[{self.namespace}] Joining in-flight fetch for {key} ({in_flight.joined} waiting)")
        if not in_flight.done.wait(timeout=self._timeout):
            logger.error(f"[{self.namespace}] Timed out waiting on in-flight fetch: {key}")
            raise TimeoutError(f"Fetch for {key} timed out after {self._timeout}s")
        if in_flight.error is not None:
            raise in_flight.error
        return in_flight.result

    def _lead(self, key: str, in_flight: InFlightFetch, fetch_fn: Callable[[], Any]) -> Any:
        try:
            in_flight.result = fetch_fn()
            return in_flight.result
        except Exception as e:
            in_flight.error = e
            raise
        finally:
            with self._lock:
                self._in_flight.pop(key, None)
            in_flight.done.set()

    @property
    def active_requests(self) -> int:
        """Number of currently in-flight fetches."""
        with self._lock:
            return len(self._in_flight)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "active_requests": len(self._in_flight),
                "active_keys": list(self._in_flight.keys()),
                "coalesced": self._coalesced,
            }
