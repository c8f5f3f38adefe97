import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RefreshTimer:
    """
    Calls `callback` every `interval` seconds on a daemon thread until stopped.
    start() and stop() are idempotent; stop() may be called from the callback itself.
    """

    def __init__(self, interval: float, callback: Callable[[], object]):
        self.interval = interval
        self.callback = callback
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name="session-refresh",
                daemon=True,
            )
            self._thread.start()
        logger.debug("Session refresh every %ss", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Signal the worker to exit. With a timeout, also wait up to that long for
        an in-flight refresh to finish (never when called from the worker itself).
        """
        with self._lock:
            thread, stop_event = self._thread, self._stop_event
            self._thread = None
            self._stop_event = None
        if thread is None:
            return
        stop_event.set()
        if timeout is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Session refresh still running after %ss", timeout)
        logger.debug("Session refresh stopped")

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Periodic session refresh failed")
