import pytest


class DummyConnection:
    """
    Records every command and replays canned replies in order.
    A reply that is an exception instance is raised from ``receive``.
    """

    def __init__(self, replies=None, send_errors=None, flush_error=None):
        self.replies = list(replies or [])
        self.send_errors = dict(send_errors or {})
        self.flush_error = flush_error
        self.sent = []
        self.flushed = 0
        self.received = 0
        self.closed = False
        self.discarded = False

    def send(self, command, *args):
        pos = len(self.sent)
        if pos in self.send_errors:
            raise self.send_errors[pos]
        self.sent.append((command, *args))

    def flush(self):
        if self.flush_error is not None:
            raise self.flush_error
        self.flushed += 1

    def receive(self):
        self.received += 1
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def close(self):
        self.closed = True

    def discard(self):
        self.discarded = True
        self.closed = True


class DummyTransport:
    def __init__(self, *connections):
        self.connections = list(connections)
        self.acquired = []

    def acquire(self):
        conn = self.connections.pop(0)
        self.acquired.append(conn)
        return conn

    @property
    def sent(self):
        return [cmd for conn in self.acquired for cmd in conn.sent]


@pytest.fixture
def make_transport():
    def _make(*reply_lists, **kwargs):
        conns = [DummyConnection(replies, **kwargs) for replies in reply_lists]
        return DummyTransport(*conns)

    return _make
