"""Progress notifications for mosaic builds."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class ProgressObserver(Protocol):
    """Receives build progress. Both hooks are called from the event loop."""

    def processing(self, iteration: int) -> None: ...

    def complete(self, buffer: bytes) -> None: ...


class CallbackObserver:
    """Adapts plain callables to :class:`ProgressObserver`."""

    def __init__(
        self,
        on_processing: Callable[[int], None] | None = None,
        on_complete: Callable[[bytes], None] | None = None,
    ) -> None:
        self.on_processing = on_processing
        self.on_complete = on_complete

    def processing(self, iteration: int) -> None:
        if self.on_processing is not None:
            self.on_processing(iteration)

    def complete(self, buffer: bytes) -> None:
        if self.on_complete is not None:
            self.on_complete(buffer)


class ProgressEmitter:
    """Fans notifications out to subscribed observers.

    The iteration counter only grows. Observers subscribed mid-build see
    events from that point on; nothing is replayed.
    """

    def __init__(self) -> None:
        self.iteration = 0
        self.completed = False
        self._observers: list[ProgressObserver] = []

    def subscribe(self, observer: ProgressObserver) -> Callable[[], None]:
        """Register *observer*; returns a function that unregisters it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def processing(self) -> int:
        self.iteration += 1
        for observer in list(self._observers):
            observer.processing(self.iteration)
        return self.iteration

    def complete(self, buffer: bytes) -> None:
        if self.completed:
            msg = "complete() already emitted for this build"
            raise RuntimeError(msg)
        self.completed = True
        logger.debug("Build complete after %d iterations (%d bytes)", self.iteration, len(buffer))
        for observer in list(self._observers):
            observer.complete(buffer)
