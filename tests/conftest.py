"""Shared fixtures: in-process warehouse fakes.

FakeConnector hands out connections whose exec_driver_sql() reads the
pipe named in the load statement, the way the warehouse driver does for
a remote-source external table. By default it reads the real FIFO to
end-of-stream on the loader thread.
"""

import io
import os
import re
import threading
from pathlib import Path

import pytest

from pipeload.core.connector import Connector
from pipeload.core.pipe import Pipe
from pipeload.exceptions import ConnectionError

requires_fifo = pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes not supported")

STATEMENT_PATH = re.compile(r"EXTERNAL '((?:[^']|'')*)'")


def pipe_path_of(statement):
    """Extract the pipe path from a load statement."""
    match = STATEMENT_PATH.search(statement)
    assert match, f"no EXTERNAL path in {statement!r}"
    return match.group(1).replace("''", "'")


def read_fifo(path):
    with open(path, "rb") as f:
        return f.read()


class FakeConnection:
    """Connection running one load statement against a pipe."""

    def __init__(self, connector):
        self.connector = connector

    def exec_driver_sql(self, statement):
        connector = self.connector
        connector.statements.append(statement)
        if connector.fail_before_read:
            raise RuntimeError("ERROR: relation does not exist")

        path = pipe_path_of(statement)
        if connector.fail_after_bytes is not None:
            with open(path, "rb") as f:
                connector.received += f.read(connector.fail_after_bytes)
            raise RuntimeError("ERROR: External Table : count of bad input rows reached maxerrors limit")

        connector.received += connector.reader(path)

    def commit(self):
        self.connector.commits += 1

    def close(self):
        self.connector.closes += 1
        if self.connector.fail_on_close:
            raise RuntimeError("connection reset")


class FakeConnector(Connector):
    """Connector double recording every statement and every byte loaded."""

    def __init__(
        self,
        config=None,
        reader=read_fifo,
        fail_on_connect=False,
        fail_before_read=False,
        fail_after_bytes=None,
        fail_on_close=False,
    ):
        super().__init__(config or {})
        self.reader = reader
        self.fail_on_connect = fail_on_connect
        self.fail_before_read = fail_before_read
        self.fail_after_bytes = fail_after_bytes
        self.fail_on_close = fail_on_close
        self.statements = []
        self.received = b""
        self.commits = 0
        self.closes = 0
        self.disconnects = 0

    def connect(self):
        if self.fail_on_connect:
            raise ConnectionError("Failed to connect to Netezza: host unreachable")
        self.connection = object()

    def disconnect(self):
        self.disconnects += 1
        self.connection = None

    def test_connection(self):
        return not self.fail_on_connect

    def open_connection(self):
        if not self.is_connected:
            self.connect()
        return FakeConnection(self)


class StubStream(io.BytesIO):
    """In-memory write side that can fail on write."""

    def __init__(self, pipe, fail_with=None):
        super().__init__()
        self.pipe = pipe
        self.fail_with = fail_with

    def write(self, data):
        if self.fail_with is not None:
            raise self.fail_with
        return super().write(data)

    def close(self):
        if not self.closed:
            self.pipe.data = self.getvalue()
            self.pipe.closed.set()
        super().close()


class StubPipe(Pipe):
    """Pipe double for driver tests that need precise failure injection."""

    def __init__(self, path, fail_with=None):
        super().__init__(path)
        self.fail_with = fail_with
        self.data = b""
        self.closed = threading.Event()
        self.disposals = 0

    def create(self):
        self._created = True

    def open_for_write(self, should_abort=None, poll_interval=None):
        self._write_opened = True
        return StubStream(self, self.fail_with)

    def dispose(self):
        self.disposals += 1
        self._created = False

    def read_until_closed(self, path):
        self.closed.wait(5)
        return self.data


@pytest.fixture
def fake_connector():
    """Connector whose loader reads the real FIFO to end-of-stream."""
    return FakeConnector()


@pytest.fixture
def attempt_dir(tmp_path):
    """A fresh attempt directory."""
    path = tmp_path / "job" / "20250604_143052_a1b2c3"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def fifo_path(attempt_dir):
    return attempt_dir / "export.fifo"


def loader_threads():
    """Live loader threads."""
    return [t for t in threading.enumerate() if t.name.startswith("pipeload-loader") and t.is_alive()]


def path_exists(path):
    return os.path.lexists(Path(path))
