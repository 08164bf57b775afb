"""Text-message source/sink abstraction.

The bot only needs to identify itself, join conversation targets, read
inbound messages and send lines back to a target. :class:`StreamClient`
implements that over plain text streams, which is enough for local use and
for driving the bot from another process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Iterator, Protocol, TextIO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InboundMessage:
    """A message received from a conversation."""

    source: str
    target: str
    body: str


class ChatClient(Protocol):
    """Protocol for chat connections."""

    def identify(self) -> None:
        """Announce the bot to the server."""
        ...

    def join(self, target: str) -> None:
        """Join a conversation target."""
        ...

    def messages(self) -> Iterator[InboundMessage]:
        """Yield inbound messages until the connection ends."""
        ...

    def send(self, target: str, text: str) -> None:
        """Send a line of text to a target. Safe to call from any thread."""
        ...


class StreamClient:
    """Chat client over text streams.

    Inbound lines have the form ``<source> <target> <body>``. Outbound lines
    are written as ``<target> <text>``; control lines as ``NICK <name>`` and
    ``JOIN <target>``.
    """

    def __init__(self, instream: TextIO, outstream: TextIO, nickname: str = "pipebot"):
        """Initialize client.

        Args:
            instream: Stream of inbound lines
            outstream: Stream for outbound lines
            nickname: Name to identify as
        """
        self.instream = instream
        self.outstream = outstream
        self.nickname = nickname
        self._lock = Lock()

    def _write(self, line: str) -> None:
        with self._lock:
            self.outstream.write(line + "\n")
            self.outstream.flush()

    def identify(self) -> None:
        self._write(f"NICK {self.nickname}")

    def join(self, target: str) -> None:
        self._write(f"JOIN {target}")

    def messages(self) -> Iterator[InboundMessage]:
        for line in self.instream:
            parts = line.rstrip("\r\n").split(None, 2)
            if len(parts) < 3:
                if parts:
                    logger.warning(f"Ignoring malformed line: {line.rstrip()!r}")
                continue
            yield InboundMessage(source=parts[0], target=parts[1], body=parts[2])

    def send(self, target: str, text: str) -> None:
        for line in text.splitlines() or [""]:
            self._write(f"{target} {line}")
