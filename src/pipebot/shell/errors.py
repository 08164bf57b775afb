"""Exceptions raised by the shell before a pipeline runs.

Problems reported by a running builtin are not exceptions; they travel as
ordinary lines on the pipeline's error channel.
"""

from __future__ import annotations


class ShellError(Exception):
    """Base class for lexical and structural pipeline errors."""
    pass


class LexError(ShellError):
    """Raised when a line cannot be tokenized."""
    pass


class UnterminatedString(LexError):
    """Raised when a quoted string is never closed."""

    def __init__(self):
        super().__init__("Quoted string left unclosed.")


class EmptyCommand(ShellError):
    """Raised when a pipeline stage has no tokens."""

    def __init__(self):
        super().__init__("Empty command")


class UnknownCommand(ShellError):
    """Raised when a stage names a command that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown command: {name}")


class RegistryFrozenError(ShellError):
    """Raised when registering into a registry that is already in use."""
    pass
