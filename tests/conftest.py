"""Shared fixtures for the pipebot test suite."""

from threading import Lock
from typing import List

import pytest

from pipebot.lib.chat import InboundMessage
from pipebot.shell.channel import channel


class FakeClient:
    """In-memory chat client fed from a list of messages."""

    def __init__(self, inbound: List[InboundMessage] = None):
        self.inbound = list(inbound or [])
        self.sent = []
        self.joined = []
        self.identified = False
        self._lock = Lock()

    def identify(self):
        self.identified = True

    def join(self, target):
        self.joined.append(target)

    def messages(self):
        yield from self.inbound

    def send(self, target, text):
        with self._lock:
            self.sent.append((target, text))


def run_builtin(func, args, inputs=()):
    """Run a builtin synchronously and return (output, errors)."""
    in_tx, in_rx = channel()
    for item in inputs:
        in_tx.send(item)
    in_tx.drop()

    out_tx, out_rx = channel()
    err_tx, err_rx = channel()
    func(args, in_rx, out_tx, err_tx)
    out_tx.drop()
    err_tx.drop()
    return list(out_rx), list(err_rx)


@pytest.fixture
def fake_client_factory():
    """Build FakeClient instances from (source, target, body) tuples."""
    def factory(*messages):
        return FakeClient([InboundMessage(*m) for m in messages])
    return factory


@pytest.fixture
def builtin_runner():
    """Return a helper that runs a builtin and collects its output and errors."""
    return run_builtin
