"""Interrupt and process-exit hooks for long running jobs.

Usage::

    notifier = ShutdownNotifier()

    @notifier.on_shutdown
    def report():
        summary.display()

    notifier.install()
    # ... on SIGINT: notice, callbacks, SystemExit(130)
"""

from __future__ import annotations

import atexit
import logging
import signal
import sys
from typing import Any, Callable, Dict, Iterable, List, Optional, TextIO

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class ShutdownNotifier:
    """One-shot interruption channel plus process-exit hooks."""

    def __init__(
        self,
        signals: Iterable[int] = (signal.SIGINT,),
        stream: Optional[TextIO] = None,
    ) -> None:
        self.signals = tuple(signals)
        self.stream = stream
        self._callbacks: List[Callback] = []
        self._exit_hooks: List[Callback] = []
        self._original_handlers: Dict[int, Any] = {}
        self._requested = False

    @property
    def requested(self) -> bool:
        return self._requested

    @property
    def installed(self) -> bool:
        return bool(self._original_handlers)

    def register_callback(self, callback: Callback) -> None:
        """Run ``callback`` when an interruption is received."""

        self._callbacks.append(callback)
        logger.debug("Registered shutdown callback %s", getattr(callback, "__name__", callback))

    def on_shutdown(self, func: Callback) -> Callback:
        self.register_callback(func)
        return func

    def register_exit_hook(self, hook: Callback) -> None:
        """Run ``hook`` at interpreter exit, whatever the cause."""

        atexit.register(hook)
        self._exit_hooks.append(hook)

    def install(self) -> None:
        for signum in self.signals:
            try:
                self._original_handlers[signum] = signal.signal(signum, self._handle_signal)
            except ValueError:
                # signal.signal only works from the main thread.
                logger.warning("Cannot install handler for %s outside the main thread", signum)
        if self._original_handlers:
            logger.debug("Signal handlers installed for %s", list(self._original_handlers))

    def uninstall(self) -> None:
        """Restore the signal handlers that were active before :meth:`install`."""

        for signum, handler in self._original_handlers.items():
            signal.signal(signum, handler)
        self._original_handlers.clear()

    def unregister_exit_hooks(self) -> None:
        for hook in self._exit_hooks:
            atexit.unregister(hook)
        self._exit_hooks.clear()

    def interrupt(self, signum: int = signal.SIGINT) -> None:
        """Run the shutdown path for ``signum`` and terminate the process."""

        name = signal.Signals(signum).name
        if self._requested:
            logger.warning("Shutdown already in progress, ignoring %s", name)
            return
        self._requested = True
        logger.info("Received signal %s (%s)", name, signum)
        print(f"\n\nCaught {name}, exiting\n", file=self.stream or sys.stdout)
        self.run_callbacks()
        raise SystemExit(128 + signum)

    def run_callbacks(self) -> None:
        for callback in list(self._callbacks):
            name = getattr(callback, "__name__", repr(callback))
            try:
                callback()
            except Exception:
                logger.exception("Shutdown callback %s failed", name)

    def _handle_signal(self, signum: int, frame: Any) -> None:
        self.interrupt(signum)


__all__ = ["ShutdownNotifier"]
