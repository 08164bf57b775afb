"""Shell module: tokenizer, stage splitter and concurrent pipeline executor.

Runs lines like ``echo a b c | count`` with one thread per stage, wired
together the way Unix pipes are.
"""

from __future__ import annotations

from pipebot.shell.builtins import BuiltinCommand, CommandRegistry, create_registry
from pipebot.shell.channel import ChannelClosed, Receiver, Sender, channel
from pipebot.shell.errors import (
    EmptyCommand,
    LexError,
    RegistryFrozenError,
    ShellError,
    UnknownCommand,
    UnterminatedString,
)
from pipebot.shell.interpreter import (
    ExecutionContext,
    PipelineExecutor,
    PipelineResult,
    ShellInterpreter,
)
from pipebot.shell.lexer import Lexer, Separator, Word, tokenize
from pipebot.shell.parser import Stage, parse_pipeline, split
from pipebot.shell.repl import REPL, run_command, run_repl, run_script

__all__ = [
    "REPL",
    "BuiltinCommand",
    "CommandRegistry",
    "ChannelClosed",
    "EmptyCommand",
    "ExecutionContext",
    "LexError",
    "Lexer",
    "PipelineExecutor",
    "PipelineResult",
    "Receiver",
    "RegistryFrozenError",
    "Sender",
    "Separator",
    "ShellError",
    "ShellInterpreter",
    "Stage",
    "UnknownCommand",
    "UnterminatedString",
    "Word",
    "channel",
    "create_registry",
    "parse_pipeline",
    "run_command",
    "run_repl",
    "run_script",
    "split",
    "tokenize",
]
