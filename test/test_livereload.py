"""
Live-reload channel: client lifecycle, broadcast isolation and the watch loop.
"""

import asyncio

from hoxy.engine import livereload as livereload_module
from hoxy.engine.livereload import CLOSED, OPEN, LiveReloadChannel


class FakeSocket:
    """Records what the channel sends."""

    def __init__(self):
        self.sent: list[str] = []

    async def send_text(self, data: str) -> None:
        self.sent.append(data)


class BrokenSocket:
    def __init__(self):
        self.attempts = 0

    async def send_text(self, data: str) -> None:
        self.attempts += 1
        raise ConnectionResetError("peer went away")


def test_register_and_unregister():
    channel = LiveReloadChannel()
    client = channel.register(FakeSocket())
    assert client.state == OPEN
    assert client in channel.clients
    assert len(channel) == 1

    channel.unregister(client)
    assert client.state == CLOSED
    assert len(channel) == 0
    # unregistering twice is harmless
    channel.unregister(client)


def test_same_connection_twice_is_two_clients():
    channel = LiveReloadChannel()
    socket = FakeSocket()
    first = channel.register(socket)
    second = channel.register(socket)
    assert first is not second
    assert len(channel) == 2


def test_two_clients_each_get_one_signal():
    channel = LiveReloadChannel()
    a, b = FakeSocket(), FakeSocket()
    channel.register(a)
    channel.register(b)

    assert asyncio.run(channel.broadcast()) == 2
    assert a.sent == ["reload"]
    assert b.sent == ["reload"]


def test_disconnected_client_gets_nothing():
    channel = LiveReloadChannel()
    stays, leaves = FakeSocket(), FakeSocket()
    channel.register(stays)
    leaving = channel.register(leaves)
    channel.unregister(leaving)

    assert asyncio.run(channel.broadcast()) == 1
    assert stays.sent == ["reload"]
    assert leaves.sent == []


def test_failed_delivery_is_isolated_and_drops_client():
    channel = LiveReloadChannel()
    good_before, broken, good_after = FakeSocket(), BrokenSocket(), FakeSocket()
    channel.register(good_before)
    broken_client = channel.register(broken)
    channel.register(good_after)

    asyncio.run(channel.broadcast())
    assert good_before.sent == ["reload"]
    assert good_after.sent == ["reload"]
    assert broken.attempts == 1
    assert broken_client.state == CLOSED
    assert broken_client not in channel.clients

    # the dead client is not tried again
    asyncio.run(channel.broadcast())
    assert broken.attempts == 1
    assert good_before.sent == ["reload", "reload"]


def test_broadcast_with_no_clients():
    assert asyncio.run(LiveReloadChannel().broadcast()) == 0


def test_custom_message():
    channel = LiveReloadChannel(message="refresh")
    socket = FakeSocket()
    channel.register(socket)
    asyncio.run(channel.broadcast())
    assert socket.sent == ["refresh"]


def _fake_awatch(batches, calls):
    async def fake_awatch(*paths, **kwargs):
        calls.append((paths, kwargs))
        for batch in batches:
            yield batch
    return fake_awatch


def test_watch_broadcasts_once_per_batch(monkeypatch, tmp_path):
    batches = [
        {(1, str(tmp_path / "a.html")), (2, str(tmp_path / "b.css"))},
        {(3, str(tmp_path / "a.html"))},
    ]
    calls = []
    monkeypatch.setattr(livereload_module, "awatch", _fake_awatch(batches, calls))

    channel = LiveReloadChannel()
    socket = FakeSocket()
    channel.register(socket)
    asyncio.run(channel.watch(tmp_path, debounce_ms=20))

    assert socket.sent == ["reload", "reload"]
    (paths, kwargs), = calls
    assert paths == (tmp_path,)
    assert kwargs["debounce"] == 20
    assert kwargs["recursive"] is True


def test_watch_survives_broadcast_errors(monkeypatch, tmp_path):
    batches = [{(1, "x")}, {(1, "y")}, {(1, "z")}]
    monkeypatch.setattr(livereload_module, "awatch", _fake_awatch(batches, []))

    channel = LiveReloadChannel()
    attempts = []

    async def flaky_broadcast():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("boom")
        return 0

    channel.broadcast = flaky_broadcast
    asyncio.run(channel.watch(tmp_path))
    assert len(attempts) == 3


def test_watch_picks_up_real_file_change(tmp_path):
    """End-to-end with watchfiles: one write produces at least one broadcast."""
    channel = LiveReloadChannel()
    socket = FakeSocket()
    channel.register(socket)

    async def scenario():
        stop = asyncio.Event()
        task = asyncio.create_task(channel.watch(tmp_path, stop_event=stop, debounce_ms=50))
        await asyncio.sleep(0.5)
        (tmp_path / "page.html").write_text("<body>changed</body>")
        for _ in range(100):
            if socket.sent:
                break
            await asyncio.sleep(0.05)
        stop.set()
        await asyncio.wait_for(task, timeout=5)

    asyncio.run(scenario())
    assert socket.sent and set(socket.sent) == {"reload"}
