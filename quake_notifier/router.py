"""Event Router - classifies raw frames and dispatches them to handlers.

Frames are parsed on the connection's reader thread, in arrival order,
and each handler is submitted to a worker pool. Handlers start in frame
order even when several workers are free, but may finish in any order,
and the reader never waits for them.
"""

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable

from quake_notifier.core.events import EVENT_TYPES, Event, FrameParseError, parse_frame


logger = logging.getLogger(__name__)


class EventRouter:
    """Dispatches each feed frame to the handler for its event type.

    Each submitted frame gets a sequence number. A worker holding frame
    N+1 waits until frame N's handler has been started, so start order
    matches frame order. The executor must run tasks in submission
    order (ThreadPoolExecutor does).
    """

    def __init__(
        self,
        handlers: dict[type, Callable[[Event], Any]],
        executor: Executor | None = None,
        max_workers: int = 4,
    ) -> None:
        """Initialize router.

        Args:
            handlers: Handler for every type in EVENT_TYPES
            executor: FIFO worker pool (created if not provided)
            max_workers: Size of the created worker pool

        Raises:
            ValueError: If a handler is missing for an event type
        """
        missing = [t.__name__ for t in EVENT_TYPES if t not in handlers]
        if missing:
            raise ValueError(f"No handler for event types: {', '.join(missing)}")

        self.handlers = handlers
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="event-handler",
        )

        self._submit_lock = threading.Lock()
        self._submitted = 0
        self._start_turn = threading.Condition()
        self._next_start = 0

    def route(self, raw: str | bytes) -> Future | None:
        """Classify a frame and start its handler.

        Args:
            raw: Raw frame from the feed

        Returns:
            Future of the handler's result, or None if the frame was dropped
        """
        try:
            event = parse_frame(raw)
        except FrameParseError as e:
            logger.warning("earthquake: dropping frame: %s", e)
            return None

        handler = self.handlers[type(event)]

        with self._submit_lock:
            seq = self._submitted
            future = self.executor.submit(self._run, seq, handler, event)
            self._submitted += 1

        return future

    def _run(self, seq: int, handler: Callable[[Event], Any], event: Event) -> Any:
        with self._start_turn:
            self._start_turn.wait_for(lambda: self._next_start == seq)
            logger.debug("Dispatching frame %d: %s %s", seq, type(event).__name__, event.id)
            self._next_start += 1
            self._start_turn.notify_all()

        try:
            return handler(event)
        except Exception:
            logger.exception(
                "earthquake: %s handler failed for %s",
                type(event).__name__,
                event.id,
            )
            return None
