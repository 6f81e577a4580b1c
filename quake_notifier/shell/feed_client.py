"""Feed Connection Client - Imperative Shell.

This module owns the long-lived websocket connection to the P2PQuake
feed. Every frame is handed to a callback in arrival order. A closed
connection is always retried after a fixed delay.
"""

import logging
import threading
from enum import Enum
from typing import Callable

import websocket

from quake_notifier.core.config import DEFAULT_FEED_URL


logger = logging.getLogger(__name__)


DEFAULT_RECONNECT_DELAY = 1.0

# Keepalive pings (seconds); the timeout must be shorter than the interval
PING_INTERVAL = 30
PING_TIMEOUT = 10


class ConnectionState(Enum):
    """Lifecycle of the feed connection."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class FeedConnection:
    """Reconnecting websocket client for the event feed.

    State machine: DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED,
    forever. At most one reconnect is scheduled at a time, no matter how
    many close events arrive.

    This is part of the imperative shell - it handles network I/O.
    """

    def __init__(
        self,
        on_frame: Callable[[str | bytes], None],
        url: str = DEFAULT_FEED_URL,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        app_factory: Callable[..., websocket.WebSocketApp] = websocket.WebSocketApp,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
        thread_factory: Callable[..., threading.Thread] = threading.Thread,
    ) -> None:
        """Initialize feed connection.

        Args:
            on_frame: Called with each raw frame, in arrival order
            url: Websocket endpoint
            reconnect_delay: Seconds to wait before reconnecting
            app_factory: Builds the websocket app (injectable for tests)
            timer_factory: Builds the reconnect timer (injectable for tests)
            thread_factory: Builds the reader thread (injectable for tests)
        """
        self.on_frame = on_frame
        self.url = url
        self.reconnect_delay = reconnect_delay
        self._app_factory = app_factory
        self._timer_factory = timer_factory
        self._thread_factory = thread_factory

        self._lock = threading.Lock()
        self._app: websocket.WebSocketApp | None = None
        self._reconnect_timer: threading.Timer | None = None
        self._forever = threading.Event()
        self.state = ConnectionState.DISCONNECTED

    @property
    def reconnect_pending(self) -> bool:
        """True while a reconnect is scheduled."""
        return self._reconnect_timer is not None

    def connect(self) -> None:
        """Open a new connection on a background reader thread."""
        logger.info("earthquake: connecting to %s", self.url)

        app = self._app_factory(
            self.url,
            on_open=self._on_open,
            on_message=self._on_message,
            on_error=self._on_error,
            on_close=self._on_close,
        )

        with self._lock:
            self.state = ConnectionState.CONNECTING
            self._app = app

        thread = self._thread_factory(
            target=app.run_forever,
            kwargs={"ping_interval": PING_INTERVAL, "ping_timeout": PING_TIMEOUT},
            name="feed-connection",
            daemon=True,
        )
        thread.start()

    def run_forever(self) -> None:
        """Connect and block the calling thread for the life of the process."""
        self.connect()
        self._forever.wait()

    def _reconnect(self) -> None:
        with self._lock:
            self._reconnect_timer = None
        self.connect()

    def _on_open(self, ws: websocket.WebSocketApp) -> None:
        with self._lock:
            self.state = ConnectionState.CONNECTED
        logger.info("earthquake: connected")

    def _on_message(self, ws: websocket.WebSocketApp, message: str | bytes) -> None:
        try:
            self.on_frame(message)
        except Exception:
            logger.exception("earthquake: failed to handle frame")

    def _on_error(self, ws: websocket.WebSocketApp, error: Exception) -> None:
        logger.error("earthquake: connection error: %s", error)

    def _on_close(
        self,
        ws: websocket.WebSocketApp,
        close_status_code: int | None,
        close_msg: str | None,
    ) -> None:
        logger.info("earthquake: disconnected [%s] %s", close_status_code, close_msg or "")

        with self._lock:
            if ws is not self._app:
                # Superseded connection
                return

            self.state = ConnectionState.DISCONNECTED

            if self._reconnect_timer is not None:
                return

            timer = self._timer_factory(self.reconnect_delay, self._reconnect)
            timer.daemon = True
            self._reconnect_timer = timer

        logger.info("earthquake: reconnecting in %.1fs", self.reconnect_delay)
        timer.start()
