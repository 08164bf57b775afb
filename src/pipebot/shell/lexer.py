"""Tokenizer for shell pipe syntax.

Turns a line such as ``echo "a b" | count`` into words and separators.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Union

from pipebot.shell.errors import UnterminatedString

logger = logging.getLogger(__name__)

WHITESPACE = frozenset(' \t\r\n')
QUOTE = '"'
SEPARATOR = '|'


@dataclass(frozen=True)
class Word:
    """A quoted or unquoted run of characters."""

    text: str


@dataclass(frozen=True)
class Separator:
    """Stage boundary marker."""

    def __repr__(self) -> str:
        return "Separator()"


Token = Union[Word, Separator]


class LexState(Enum):
    """States of the lexer."""
    SCANNING = "scanning"
    QUOTED = "quoted"
    ERROR = "error"


class Lexer:
    """Lazy tokenizer over a single line.

    Yields :class:`Word` and :class:`Separator` tokens. An unclosed quote
    raises :class:`UnterminatedString` once; the lexer then stays in the
    ``ERROR`` state and yields nothing further.

    Example:
        >>> list(Lexer('echo "a b" | count'))
        [Word(text='echo'), Word(text='a b'), Separator(), Word(text='count')]
    """

    def __init__(self, line: str):
        """Initialize lexer.

        Args:
            line: Source line to tokenize
        """
        self.line = line
        self.pos = 0
        self.state = LexState.SCANNING

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        if self.state is LexState.ERROR:
            raise StopIteration

        self._skip_whitespace()
        if self.pos >= len(self.line):
            raise StopIteration

        char = self.line[self.pos]
        if char == SEPARATOR:
            self.pos += 1
            return Separator()
        if char == QUOTE:
            return self._quoted_word()
        return self._unquoted_word()

    def _skip_whitespace(self) -> None:
        """Advance past any run of whitespace."""
        while self.pos < len(self.line) and self.line[self.pos] in WHITESPACE:
            self.pos += 1

    def _unquoted_word(self) -> Word:
        """Read a word up to whitespace, a separator, a quote or end of input."""
        start = self.pos
        while self.pos < len(self.line):
            char = self.line[self.pos]
            if char in WHITESPACE or char in (SEPARATOR, QUOTE):
                break
            self.pos += 1
        return Word(self.line[start:self.pos])

    def _quoted_word(self) -> Word:
        """Read the contents of a quoted word, excluding the quotes.

        Raises:
            UnterminatedString: If the closing quote is missing
        """
        self.state = LexState.QUOTED
        start = self.pos + 1
        end = self.line.find(QUOTE, start)
        if end == -1:
            self.state = LexState.ERROR
            self.pos = len(self.line)
            logger.debug(f"Unterminated string at column {start - 1}")
            raise UnterminatedString()

        self.pos = end + 1
        self.state = LexState.SCANNING
        return Word(self.line[start:end])


def tokenize(line: str) -> List[Token]:
    """Tokenize a whole line.

    Args:
        line: Line to tokenize

    Returns:
        List of tokens (empty for an empty or blank line)

    Raises:
        UnterminatedString: If a quote is never closed; no tokens are returned
    """
    return list(Lexer(line))
