from __future__ import annotations

import logging
import signal
import threading

logger = logging.getLogger(__name__)


class ShutdownFlag:
    """Process-wide stop signal, polled before each uncached fetch."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def is_shutdown(self) -> bool:
        return self._event.is_set()

    def trigger(self) -> None:
        if not self._event.is_set():
            logger.info("Shutdown requested; skipping further fetches")
        self._event.set()


def install_signal_handlers(
    flag: ShutdownFlag, signals: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)
) -> bool:
    """Trigger ``flag`` on the given signals, then defer to any previous handler.

    Handlers can only be installed from the main thread; returns False elsewhere.
    """
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread; shutdown signals not installed")
        return False

    for signum in signals:
        previous = signal.getsignal(signum)

        def _handler(received, frame, previous=previous):
            flag.trigger()
            if callable(previous):
                previous(received, frame)

        signal.signal(signum, _handler)
    return True
