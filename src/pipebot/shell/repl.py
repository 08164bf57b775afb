"""REPL (Read-Eval-Print Loop) for interactive shell.

Provides a local command-line front-end for the same pipelines the bot runs.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from pipebot.shell.interpreter import ExecutionContext, PipelineResult

logger = logging.getLogger(__name__)

try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False
    logger.debug("readline not available - command history disabled")


class REPL:
    """Read-Eval-Print Loop for interactive shell.

    Lines starting with ``.`` are REPL commands (``.history``, ``.exit``);
    everything else is run as a pipeline.
    """

    def __init__(
        self,
        context: Optional[ExecutionContext] = None,
        prompt: str = "pipebot> ",
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None
    ):
        """Initialize REPL.

        Args:
            context: Execution context (creates new if None)
            prompt: Command prompt string
            out: Stream for output (stdout if None)
            err: Stream for errors (stderr if None)
        """
        self.context = context or ExecutionContext()
        self.prompt = prompt
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.running = False

    def _setup_readline(self) -> None:
        """Setup readline for command history."""
        history_file = Path.home() / ".pipebot_history"
        try:
            readline.read_history_file(str(history_file))
        except OSError:
            pass

        import atexit
        atexit.register(readline.write_history_file, str(history_file))

        readline.set_history_length(1000)

    def run(self) -> None:
        """Run the REPL loop."""
        if HAS_READLINE:
            self._setup_readline()
        self.running = True
        print(
            "pipebot shell - type 'help' for pipeline commands, "
            ".history for past lines, .exit to quit",
            file=self.out
        )
        while self.running:
            try:
                line = input(self.prompt).strip()
            except EOFError:
                # Ctrl+D
                print(file=self.out)
                break
            except KeyboardInterrupt:
                # Ctrl+C
                print(file=self.out)
                continue
            if line:
                self.execute_line(line)

    def execute_line(self, line: str) -> Optional[PipelineResult]:
        """Execute a single line of input.

        Args:
            line: Input line

        Returns:
            Pipeline result, or None for REPL commands
        """
        if line.startswith('.'):
            self._repl_command(line[1:].strip())
            return None

        result = self.context.execute(line)
        print_result(result, self.out, self.err)
        return result

    def _repl_command(self, name: str) -> None:
        if name == 'exit':
            self.running = False
        elif name == 'history':
            for i, cmd in enumerate(self.context.get_history(), 1):
                print(f"  {i}. {cmd}", file=self.out)
        else:
            print(f"Unknown REPL command: .{name}", file=self.err)


def print_result(result: PipelineResult, out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> None:
    """Print a pipeline result.

    Args:
        result: Result to print
        out: Stream for output lines (stdout if None)
        err: Stream for the error line (stderr if None)
    """
    if result.success:
        for line in result.output:
            print(line, file=out or sys.stdout)
    else:
        print(result.render(), file=err or sys.stderr)


def run_repl(context: Optional[ExecutionContext] = None) -> None:
    """Run interactive REPL.

    Args:
        context: Optional execution context
    """
    repl = REPL(context=context)
    repl.run()


def run_command(command: str, context: Optional[ExecutionContext] = None) -> PipelineResult:
    """Run a single command non-interactively.

    Args:
        command: Command to execute
        context: Optional execution context

    Returns:
        Pipeline result
    """
    if context is None:
        context = ExecutionContext()
    return context.execute(command)


def run_script(
    script_path: Path,
    context: Optional[ExecutionContext] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None
) -> bool:
    """Run commands from a script file, stopping at the first failure.

    Blank lines and lines starting with ``#`` are skipped.

    Args:
        script_path: Path to script file
        context: Optional execution context
        out: Stream for output lines
        err: Stream for errors

    Returns:
        True if every line succeeded
    """
    if context is None:
        context = ExecutionContext()

    with open(script_path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()

            if not line or line.startswith('#'):
                continue

            logger.debug(f"Executing line {line_num}: {line}")
            result = run_command(line, context)
            if not result.success:
                logger.error(f"Error on line {line_num}: {result.render()}")
                print(f"Line {line_num}: {result.render()}", file=err or sys.stderr)
                return False
            for output_line in result.output:
                print(output_line, file=out or sys.stdout)

    return True
