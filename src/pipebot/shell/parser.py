"""Parser for shell pipe syntax.

Groups tokens into pipeline stages, e.g. ``echo a b | count`` becomes
``[Stage(('echo', 'a', 'b')), Stage(('count',))]``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from pipebot.shell.lexer import Separator, Token, Word, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """A single command and its arguments within a pipeline.

    ``args[0]`` is the command name; an empty ``args`` is an empty stage.
    """

    args: Tuple[str, ...] = ()

    @property
    def name(self) -> Optional[str]:
        """Command name, or None for an empty stage."""
        return self.args[0] if self.args else None

    def __repr__(self) -> str:
        return f"Stage({list(self.args)!r})"


def split(tokens: Iterable[Token]) -> List[Stage]:
    """Split a token sequence into stages on separator tokens.

    Empty stages are kept, so ``k`` separators always give ``k + 1`` stages.

    Args:
        tokens: Realized token sequence

    Returns:
        List of stages, never empty
    """
    stages: List[Stage] = []
    current: List[str] = []

    for token in tokens:
        if isinstance(token, Separator):
            stages.append(Stage(tuple(current)))
            current = []
        elif isinstance(token, Word):
            current.append(token.text)
        else:
            raise TypeError(f"Unexpected token: {token!r}")

    stages.append(Stage(tuple(current)))
    return stages


def parse_pipeline(command_line: str) -> List[Stage]:
    """Parse a pipeline command line.

    Convenience function that tokenizes and splits the line.

    Args:
        command_line: Command line to parse

    Returns:
        List of stages

    Raises:
        UnterminatedString: If a quote is never closed
    """
    stages = split(tokenize(command_line))
    logger.debug(f"Parsed {len(stages)} stage(s): {stages}")
    return stages
