"""Tests for the feed connection client.

The websocket app, reader thread and reconnect timer are injected as
mocks, so no network or real threads are involved.
"""

from unittest.mock import Mock

import pytest

from quake_notifier.shell.feed_client import (
    ConnectionState,
    FeedConnection,
    PING_INTERVAL,
    PING_TIMEOUT,
)


@pytest.fixture
def on_frame():
    return Mock()


@pytest.fixture
def app_factory():
    factory = Mock()
    factory.side_effect = lambda *args, **kwargs: Mock(name="WebSocketApp")
    return factory


@pytest.fixture
def timer_factory():
    return Mock()


@pytest.fixture
def thread_factory():
    return Mock()


@pytest.fixture
def connection(on_frame, app_factory, timer_factory, thread_factory):
    return FeedConnection(
        on_frame=on_frame,
        url="wss://feed.example/ws",
        reconnect_delay=1.0,
        app_factory=app_factory,
        timer_factory=timer_factory,
        thread_factory=thread_factory,
    )


def callbacks(app_factory, call_index=-1):
    """Get the callbacks passed to the app factory."""
    return app_factory.call_args_list[call_index].kwargs


class TestConnect:
    """Tests for FeedConnection.connect()."""

    def test_starts_reader_thread(self, connection, app_factory, thread_factory):
        connection.connect()

        app = connection._app
        assert app_factory.call_args.args == ("wss://feed.example/ws",)
        thread_factory.assert_called_once_with(
            target=app.run_forever,
            kwargs={"ping_interval": PING_INTERVAL, "ping_timeout": PING_TIMEOUT},
            name="feed-connection",
            daemon=True,
        )
        thread_factory.return_value.start.assert_called_once()

    def test_state_transitions(self, connection, app_factory):
        assert connection.state is ConnectionState.DISCONNECTED

        connection.connect()
        assert connection.state is ConnectionState.CONNECTING

        callbacks(app_factory)["on_open"](connection._app)
        assert connection.state is ConnectionState.CONNECTED

        callbacks(app_factory)["on_close"](connection._app, 1000, "bye")
        assert connection.state is ConnectionState.DISCONNECTED


class TestMessages:
    """Tests for frame handling."""

    def test_frames_forwarded_in_order(self, connection, app_factory, on_frame):
        connection.connect()
        on_message = callbacks(app_factory)["on_message"]

        on_message(connection._app, '{"code": 551}')
        on_message(connection._app, '{"code": 556}')

        assert [c.args[0] for c in on_frame.call_args_list] == ['{"code": 551}', '{"code": 556}']

    def test_frame_handler_error_does_not_escape(self, connection, app_factory, on_frame):
        on_frame.side_effect = [RuntimeError("boom"), None]
        connection.connect()
        on_message = callbacks(app_factory)["on_message"]

        on_message(connection._app, "first")
        on_message(connection._app, "second")

        assert on_frame.call_count == 2


class TestReconnect:
    """Tests for reconnect scheduling."""

    def test_close_schedules_one_reconnect(self, connection, app_factory, timer_factory):
        connection.connect()

        callbacks(app_factory)["on_close"](connection._app, 1006, "")

        timer_factory.assert_called_once_with(1.0, connection._reconnect)
        timer_factory.return_value.start.assert_called_once()
        assert connection.reconnect_pending is True

    def test_repeated_closes_do_not_stack(self, connection, app_factory, timer_factory):
        connection.connect()
        on_close = callbacks(app_factory)["on_close"]

        on_close(connection._app, 1006, "")
        on_close(connection._app, 1006, "")
        on_close(connection._app, 1011, "error")

        assert timer_factory.call_count == 1

    def test_reconnect_opens_new_connection(self, connection, app_factory, timer_factory):
        connection.connect()
        callbacks(app_factory)["on_close"](connection._app, 1006, "")

        connection._reconnect()

        assert app_factory.call_count == 2
        assert connection.reconnect_pending is False
        assert connection.state is ConnectionState.CONNECTING

    def test_close_after_reconnect_schedules_again(self, connection, app_factory, timer_factory):
        connection.connect()
        callbacks(app_factory)["on_close"](connection._app, 1006, "")
        connection._reconnect()

        callbacks(app_factory)["on_close"](connection._app, 1006, "")

        assert timer_factory.call_count == 2

    def test_close_from_superseded_connection_ignored(self, connection, app_factory, timer_factory):
        connection.connect()
        old_app = connection._app
        callbacks(app_factory)["on_close"](old_app, 1006, "")
        connection._reconnect()

        callbacks(app_factory, 0)["on_close"](old_app, 1006, "")

        assert timer_factory.call_count == 1
        assert connection.state is ConnectionState.CONNECTING

    def test_error_is_logged_not_raised(self, connection, app_factory, caplog):
        connection.connect()
        callbacks(app_factory)["on_error"](connection._app, ConnectionRefusedError("refused"))
        assert "refused" in caplog.text
