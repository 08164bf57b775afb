"""Tests for the command-line entry point and REPL helpers."""

import io

from pipebot.cli import main
from pipebot.shell.interpreter import ExecutionContext
from pipebot.shell.repl import REPL, run_script


class TestMain:
    """Test pipebot subcommands."""

    def test_run(self, capsys):
        """A successful pipeline prints its output."""
        assert main(["-q", "run", "echo a b c | count"]) == 0
        assert capsys.readouterr().out == "1\n"

    def test_run_failure(self, capsys):
        """A failed pipeline prints the error and exits non-zero."""
        assert main(["-q", "run", "nosuch a"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "error: Unknown command: nosuch" in captured.err

    def test_run_with_config(self, tmp_path, capsys):
        """The configured store backs get and set."""
        config = tmp_path / "config.yaml"
        config.write_text("store:\n  backend: json\n  path: store.json\n")
        assert main(["-q", "-c", str(config), "run", "set greeting hi"]) == 0
        assert main(["-q", "-c", str(config), "run", "get greeting"]) == 0
        assert capsys.readouterr().out == "hi\n"

    def test_missing_config(self, tmp_path):
        """A missing config file is an error."""
        assert main(["-q", "-c", str(tmp_path / "nope.yaml"), "run", "echo"]) == 1

    def test_script(self, tmp_path, capsys):
        """Scripts run line by line, skipping comments."""
        script = tmp_path / "script.sh"
        script.write_text("# comment\necho one\n\ncount a b\n")
        assert main(["-q", "script", str(script)]) == 0
        assert capsys.readouterr().out == "one\n2\n"

    def test_serve(self, monkeypatch, capsys):
        """Serve answers chat lines read from stdin."""
        monkeypatch.setattr("sys.stdin", io.StringIO("alice #general #echo hi | count\n"))
        assert main(["-q", "serve"]) == 0
        assert capsys.readouterr().out.splitlines() == ["NICK pipebot", "#general alice: 1"]


class TestRunScript:
    """Test script execution."""

    def test_stops_at_failure(self, tmp_path):
        """Execution stops at the first failing line."""
        script = tmp_path / "script.sh"
        script.write_text("echo one\nnosuch\necho two\n")
        out, err = io.StringIO(), io.StringIO()
        assert not run_script(script, out=out, err=err)
        assert out.getvalue() == "one\n"
        assert err.getvalue() == "Line 2: error: Unknown command: nosuch\n"


class TestREPL:
    """Test REPL line handling without a terminal."""

    def make_repl(self):
        out, err = io.StringIO(), io.StringIO()
        repl = REPL(context=ExecutionContext(), out=out, err=err)
        return repl, out, err

    def test_execute_line(self):
        """Pipelines print their output."""
        repl, out, _ = self.make_repl()
        result = repl.execute_line("echo hi | cat")
        assert result.output == ["hi"]
        assert out.getvalue() == "hi\n"

    def test_error_line(self):
        """Failures are printed to the error stream."""
        repl, _, err = self.make_repl()
        repl.execute_line("nosuch")
        assert err.getvalue() == "error: Unknown command: nosuch\n"

    def test_history_and_exit(self):
        """REPL commands are not run as pipelines."""
        repl, out, _ = self.make_repl()
        repl.execute_line("echo a")
        out.truncate(0)
        out.seek(0)
        assert repl.execute_line(".history") is None
        assert out.getvalue() == "  1. echo a\n"
        repl.running = True
        repl.execute_line(".exit")
        assert not repl.running

    def test_banner_lists_repl_commands(self, monkeypatch):
        """The startup banner names the dot commands."""
        def end_of_input(prompt):
            raise EOFError

        monkeypatch.setattr("pipebot.shell.repl.HAS_READLINE", False)
        monkeypatch.setattr("builtins.input", end_of_input)
        repl, out, _ = self.make_repl()
        repl.run()
        banner = out.getvalue().splitlines()[0]
        assert ".history" in banner
        assert ".exit" in banner
