"""Per-identity session workers.

Each originating identity gets one long-lived worker thread with its own
inbox, so commands from one user run in order while different users run
side by side.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from pipebot.lib.chat import InboundMessage
from pipebot.shell.channel import Receiver, Sender, channel

logger = logging.getLogger(__name__)

MessageHandler = Callable[[InboundMessage], None]


class SessionRegistry:
    """Owns one inbox and worker thread per identity."""

    def __init__(self, handler: MessageHandler):
        """Initialize session registry.

        Args:
            handler: Called on the identity's worker thread for each message
        """
        self.handler = handler
        self._inboxes: Dict[str, Sender[InboundMessage]] = {}
        self._workers: List[threading.Thread] = []
        self._lock = threading.Lock()

    def find_or_spawn(self, identity: str) -> Sender[InboundMessage]:
        """Get the inbox for an identity, starting its worker if needed.

        Args:
            identity: Originating identity (e.g. a nickname)

        Returns:
            Sender for the identity's inbox
        """
        with self._lock:
            inbox = self._inboxes.get(identity)
            if inbox is None:
                inbox, receiver = channel()
                worker = threading.Thread(
                    target=self._work,
                    args=(identity, receiver),
                    name=f"pipebot-session-{identity}",
                    daemon=True
                )
                worker.start()
                self._inboxes[identity] = inbox
                self._workers.append(worker)
                logger.debug(f"Started session for {identity}")
            return inbox

    def dispatch(self, message: InboundMessage) -> None:
        """Queue a message on its sender's session."""
        self.find_or_spawn(message.source).send(message)

    def identities(self) -> List[str]:
        """Identities with a running session."""
        with self._lock:
            return list(self._inboxes)

    def close(self, timeout: Optional[float] = None) -> None:
        """Close every inbox and wait for the workers to drain them.

        Args:
            timeout: Seconds to wait per worker (None waits forever)
        """
        with self._lock:
            inboxes = list(self._inboxes.values())
            workers = list(self._workers)
            self._inboxes.clear()
            self._workers.clear()
        for inbox in inboxes:
            inbox.drop()
        for worker in workers:
            worker.join(timeout)

    def _work(self, identity: str, inbox: Receiver[InboundMessage]) -> None:
        for message in inbox:
            try:
                self.handler(message)
            except Exception:
                logger.exception(f"Session {identity} failed to handle message")
        logger.debug(f"Session for {identity} closed")
