"""Tests for the tokenizer."""

import pytest

from pipebot.shell.errors import UnterminatedString
from pipebot.shell.lexer import Lexer, LexState, Separator, Word, tokenize


class TestTokenize:
    """Test tokenize() on complete lines."""

    def test_empty(self):
        """Empty input yields no tokens."""
        assert tokenize("") == []

    def test_blank(self):
        """Whitespace-only input yields no tokens."""
        assert tokenize(" \t\r\n ") == []

    def test_single_word(self):
        """A bare word is one token."""
        assert tokenize("string") == [Word("string")]

    def test_two_words(self):
        """Whitespace separates words."""
        assert tokenize("one two") == [Word("one"), Word("two")]

    def test_separator(self):
        """The pipe character is a separator with or without spaces."""
        assert tokenize("one | two") == [Word("one"), Separator(), Word("two")]
        assert tokenize("one|two") == [Word("one"), Separator(), Word("two")]

    def test_adjacent_separators(self):
        """Each pipe yields its own separator."""
        assert tokenize("||") == [Separator(), Separator()]

    def test_quoted_string(self):
        """Quotes are stripped and inner whitespace is kept."""
        assert tokenize('"a b"') == [Word("a b")]

    def test_empty_quoted_string(self):
        """A pair of quotes is an empty word."""
        assert tokenize('""') == [Word("")]

    def test_quoted_separator(self):
        """A pipe inside quotes is ordinary text."""
        assert tokenize('echo "a | b" | cat') == [
            Word("echo"),
            Word("a | b"),
            Separator(),
            Word("cat"),
        ]

    def test_quote_ends_unquoted_word(self):
        """A quote inside a word ends it and opens a quoted string."""
        assert tokenize('a"b c"') == [Word("a"), Word("b c")]

    def test_quote_inside_word_must_close(self):
        """A quote opened mid-word still has to be closed."""
        with pytest.raises(UnterminatedString):
            tokenize('echo a"b')

    def test_mixed(self):
        """Quoted and unquoted words mix freely."""
        tokens = tokenize('foo "bar baz" qux| one two "three" ""')
        assert tokens == [
            Word("foo"),
            Word("bar baz"),
            Word("qux"),
            Separator(),
            Word("one"),
            Word("two"),
            Word("three"),
            Word(""),
        ]

    @pytest.mark.parametrize("line", [
        "echo a b c",
        "  leading and trailing  ",
        "tabs\tand\nnewlines\r\nmixed",
        "single",
    ])
    def test_rejoin_collapses_whitespace(self, line):
        """Rejoining words with single spaces collapses the original whitespace."""
        words = [token.text for token in tokenize(line)]
        assert " ".join(words) == " ".join(line.split())

    def test_unterminated_string(self):
        """An unclosed quote raises and returns no tokens."""
        with pytest.raises(UnterminatedString):
            tokenize('echo "abc')

    def test_unterminated_string_message(self):
        """The error has a readable message."""
        with pytest.raises(UnterminatedString, match="Quoted string left unclosed."):
            tokenize('"')


class TestLexer:
    """Test the lazy Lexer state machine."""

    def test_yields_lazily(self):
        """Tokens before an error are produced one at a time."""
        lexer = Lexer('echo "abc | count')
        assert next(lexer) == Word("echo")
        with pytest.raises(UnterminatedString):
            next(lexer)

    def test_error_is_terminal(self):
        """Nothing is produced after the error, even though input remained."""
        lexer = Lexer('echo | "abc | count')
        assert next(lexer) == Word("echo")
        assert next(lexer) == Separator()
        with pytest.raises(UnterminatedString):
            next(lexer)
        assert lexer.state is LexState.ERROR
        assert list(lexer) == []
        assert list(lexer) == []

    def test_state_returns_to_scanning(self):
        """A closed quote leaves the lexer scanning."""
        lexer = Lexer('"a" b')
        assert next(lexer) == Word("a")
        assert lexer.state is LexState.SCANNING
        assert list(lexer) == [Word("b")]
