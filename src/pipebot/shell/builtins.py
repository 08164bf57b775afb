"""Built-in commands for the shell.

Every builtin is called as ``func(args, stdin, stdout, stderr)``: ``args`` is
its full argument list (``args[0]`` is its own name), ``stdin`` yields the
items sent by the previous stage, and ``stdout``/``stderr`` are senders for
output and error lines. A builtin reports a problem by sending a line to
``stderr``; it never needs to raise.
"""

from __future__ import annotations

import argparse
import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from pipebot.lib.store import KeyValueStore, StoreError
from pipebot.shell.channel import Sender
from pipebot.shell.errors import RegistryFrozenError

logger = logging.getLogger(__name__)

Operation = Callable[[Sequence[str], Iterable[str], Sender, Sender], None]


class BuiltinCommand:
    """A registered builtin: name, help text and the operation to run."""

    def __init__(self, name: str, description: str, func: Operation):
        """Initialize builtin command.

        Args:
            name: Command name
            description: Help text
            func: Operation implementing the command
        """
        self.name = name
        self.description = description
        self.func = func

    def __call__(
        self,
        args: Sequence[str],
        stdin: Iterable[str],
        stdout: Sender,
        stderr: Sender
    ) -> None:
        """Run the command."""
        self.func(args, stdin, stdout, stderr)

    def __repr__(self) -> str:
        return f"BuiltinCommand({self.name!r})"


class CommandRegistry:
    """Mapping from command name to builtin.

    Populated once at setup and then frozen; lookups after that are
    read-only and safe from any number of threads.
    """

    def __init__(self):
        """Initialize registry."""
        self.commands: Dict[str, BuiltinCommand] = {}
        self._frozen = False

    def register(self, name: str, func: Operation, description: str = "") -> BuiltinCommand:
        """Register a builtin under an exact, case-sensitive name.

        Args:
            name: Command name
            func: Operation to run
            description: Help text

        Returns:
            The registered command

        Raises:
            RegistryFrozenError: If the registry was already frozen
        """
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register '{name}': registry is frozen")
        cmd = BuiltinCommand(name, description, func)
        self.commands[name] = cmd
        logger.debug(f"Registered builtin: {name}")
        return cmd

    def command(self, name: str, description: str = "") -> Callable[[Operation], Operation]:
        """Decorator to register a builtin.

        Args:
            name: Command name
            description: Help text

        Returns:
            Decorator function
        """
        def decorator(func: Operation) -> Operation:
            self.register(name, func, description)
            return func
        return decorator

    def lookup(self, name: str) -> Optional[BuiltinCommand]:
        """Get a builtin by name, or None if it is not registered."""
        return self.commands.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.commands

    def names(self) -> List[str]:
        """List registered command names in sorted order."""
        return sorted(self.commands)

    def freeze(self) -> CommandRegistry:
        """Make the registry read-only."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen


class UsageError(Exception):
    """Raised by :class:`BuiltinArgumentParser` instead of exiting."""
    pass


class BuiltinArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises on bad input rather than exiting the process."""

    def __init__(self, **kwargs):
        kwargs.setdefault('add_help', False)
        super().__init__(**kwargs)

    def error(self, message: str) -> None:
        raise UsageError(f"{self.prog}: {message}")


def echo_command(args, stdin, stdout, stderr) -> None:
    """Send all arguments joined by single spaces as one line."""
    stdout.send(' '.join(args[1:]))


def cat_command(args, stdin, stdout, stderr) -> None:
    """Forward every input item unchanged."""
    for item in stdin:
        stdout.send(item)


def count_command(args, stdin, stdout, stderr) -> None:
    """Count input items, or count own arguments when any are given."""
    if len(args) > 1:
        stdout.send(str(len(args) - 1))
        return
    total = 0
    for _ in stdin:
        total += 1
    stdout.send(str(total))


def hello_command(args, stdin, stdout, stderr) -> None:
    """Greet quietly, or loudly with ``-l``/``--loud``.

    Usage:
        hello           # sends "hello"
        hello --loud    # sends "HELLO!"
    """
    parser = BuiltinArgumentParser(prog=args[0] if args else 'hello')
    parser.add_argument('-l', '--loud', action='store_true')
    try:
        options = parser.parse_args(list(args[1:]))
    except UsageError as e:
        stderr.send(str(e))
        return
    stdout.send("HELLO!" if options.loud else "hello")


class StoreGetCommand:
    """``get KEY``: send the stored value for a key."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def __call__(self, args, stdin, stdout, stderr) -> None:
        if len(args) != 2:
            stderr.send("usage: get KEY")
            return
        try:
            stdout.send(self.store.get(args[1]))
        except StoreError as e:
            stderr.send(f"get: {e}")


class StoreSetCommand:
    """``set KEY VALUE...``: store the remaining arguments joined by spaces."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def __call__(self, args, stdin, stdout, stderr) -> None:
        if len(args) < 3:
            stderr.send("usage: set KEY VALUE")
            return
        try:
            self.store.set(args[1], ' '.join(args[2:]))
        except StoreError as e:
            stderr.send(f"set: {e}")


class HelpCommand:
    """``help``: list available commands, one per line."""

    def __init__(self, registry: CommandRegistry):
        self.registry = registry

    def __call__(self, args, stdin, stdout, stderr) -> None:
        if len(args) > 1:
            cmd = self.registry.lookup(args[1])
            if cmd is None:
                stderr.send(f"help: no such command: {args[1]}")
            else:
                stdout.send(f"{cmd.name} - {cmd.description}")
            return
        for name in self.registry.names():
            stdout.send(f"{name} - {self.registry.lookup(name).description}")


def create_registry(store: Optional[KeyValueStore] = None) -> CommandRegistry:
    """Build and freeze the registry of default builtins.

    Args:
        store: Key-value store backing ``get``/``set``; those commands are
            only registered when a store is given

    Returns:
        Frozen registry
    """
    registry = CommandRegistry()
    registry.register("echo", echo_command, "Print arguments as one line")
    registry.register("cat", cat_command, "Copy input to output")
    registry.register("count", count_command, "Count input lines, or arguments if given")
    registry.register("hello", hello_command, "Say hello (--loud to shout)")
    registry.register("help", HelpCommand(registry), "List commands")
    if store is not None:
        registry.register("get", StoreGetCommand(store), "Look up a stored value")
        registry.register("set", StoreSetCommand(store), "Store a value")
    return registry.freeze()
