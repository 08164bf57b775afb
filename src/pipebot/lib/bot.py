"""Chat glue: turns leader-prefixed messages into pipeline runs.

A message such as ``#echo hi | count`` from ``alice`` in ``#general`` is run
on alice's session and answered in ``#general`` with ``alice: 1``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from pipebot.lib.chat import ChatClient, InboundMessage
from pipebot.lib.config_parser import Config
from pipebot.lib.sessions import SessionRegistry
from pipebot.lib.store import KeyValueStore, StoreError, create_store
from pipebot.shell.builtins import create_registry
from pipebot.shell.interpreter import PipelineResult, ShellInterpreter

logger = logging.getLogger(__name__)

LEADER_KEY = "leader"


def format_reply(source: str, result: PipelineResult) -> List[str]:
    """Render a pipeline result as reply lines addressed to ``source``.

    Args:
        source: Originating identity
        result: Pipeline result

    Returns:
        One line per output item, a single error line on failure, or no
        lines for a successful empty result
    """
    if not result.success:
        return [f"{source}: {result.render()}"]
    return [f"{source}: {line}" for line in result.output]


class Bot:
    """Connects a chat client to the pipeline interpreter."""

    def __init__(
        self,
        client: ChatClient,
        config: Config,
        store: Optional[KeyValueStore] = None,
        interpreter: Optional[ShellInterpreter] = None
    ):
        """Initialize bot.

        Args:
            client: Chat connection
            config: Bot configuration
            store: Key-value store (created from config if None)
            interpreter: Interpreter (default builtins over ``store`` if None)
        """
        self.client = client
        self.config = config
        self.store = store if store is not None else create_store(config.store)
        self.interpreter = interpreter or ShellInterpreter(create_registry(self.store))
        self.sessions = SessionRegistry(self.handle)

    @property
    def leader(self) -> str:
        """Effective leader: the store's ``leader`` value, else the config's."""
        try:
            value = self.store.get(LEADER_KEY)
        except StoreError:
            return self.config.leader
        return value or self.config.leader

    def join_start_channels(self) -> None:
        """Join every configured conversation target."""
        for target in self.config.get_channels():
            self.client.join(target)
            logger.info(f"Joined {target}")

    def strip_leader(self, body: str) -> Optional[str]:
        """Return the command line if ``body`` starts with the leader."""
        leader = self.leader
        if body.startswith(leader):
            return body[len(leader):]
        return None

    def on_message(self, message: InboundMessage) -> None:
        """Route a leader-prefixed message to its sender's session.

        The queued message carries the command line with the leader removed.
        """
        line = self.strip_leader(message.body)
        if line is not None:
            self.sessions.dispatch(replace(message, body=line))

    def handle(self, message: InboundMessage) -> None:
        """Run a command line and reply. Called on the session's thread."""
        logger.info(f"{message.source} in {message.target}: {message.body}")
        result = self.interpreter.run(message.body)
        for reply in format_reply(message.source, result):
            self.client.send(message.target, reply)

    def run(self) -> None:
        """Identify, join start channels and serve until the client ends."""
        self.client.identify()
        self.join_start_channels()
        try:
            for message in self.client.messages():
                self.on_message(message)
        finally:
            self.sessions.close()
