"""Shell interpreter for executing parsed pipelines.

Each stage runs on its own thread. Adjacent stages are connected by a
channel, and every stage shares one error channel. A pipeline is finished
once the last stage's output channel and the error channel have both closed,
which happens when every worker has returned and dropped its senders.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from pipebot.shell.builtins import BuiltinCommand, CommandRegistry, create_registry
from pipebot.shell.channel import Receiver, Sender, channel, closed_receiver
from pipebot.shell.errors import EmptyCommand, ShellError, UnknownCommand
from pipebot.shell.parser import Stage, parse_pipeline

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run.

    A result with any errors is a failure and its ``output`` is empty.
    """

    output: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @classmethod
    def failure(cls, errors: Sequence[str]) -> PipelineResult:
        """Create a failed result."""
        return cls(output=[], errors=list(errors))

    def lines(self) -> List[str]:
        """Output lines on success, error lines on failure."""
        return list(self.output) if self.success else list(self.errors)

    def render(self, sep: str = '\n') -> str:
        """Format the result for display.

        Args:
            sep: Separator between output lines

        Returns:
            Output lines joined by ``sep``, or ``error: ...`` on failure
        """
        if self.success:
            return sep.join(self.output)
        return "error: " + "; ".join(self.errors)


class PipelineExecutor:
    """Runs a list of stages concurrently, one thread per stage."""

    def __init__(self, registry: CommandRegistry):
        """Initialize executor.

        Args:
            registry: Registry used to resolve command names
        """
        self.registry = registry

    def validate(self, stages: Sequence[Stage]) -> List[BuiltinCommand]:
        """Resolve every stage before anything is started.

        Args:
            stages: Stages to resolve

        Returns:
            Commands in stage order

        Raises:
            EmptyCommand: If there are no stages or a stage has no tokens
            UnknownCommand: If a stage names an unregistered command
        """
        if not stages:
            raise EmptyCommand()
        commands = []
        for stage in stages:
            if not stage.args:
                raise EmptyCommand()
            cmd = self.registry.lookup(stage.name)
            if cmd is None:
                raise UnknownCommand(stage.name)
            commands.append(cmd)
        return commands

    def execute(self, stages: Sequence[Stage]) -> PipelineResult:
        """Execute a pipeline.

        Blocks until every stage has finished. A stage that never returns
        blocks this call forever; there is no timeout.

        Args:
            stages: Stages in data-flow order

        Returns:
            Aggregated result

        Raises:
            EmptyCommand: If there are no stages or a stage has no tokens
            UnknownCommand: If a stage names an unregistered command
        """
        commands = self.validate(stages)

        err_tx, err_rx = channel()
        out_tx, out_rx = channel()
        stdin: Receiver = closed_receiver()
        workers: List[threading.Thread] = []
        last = len(stages) - 1

        for index, (stage, cmd) in enumerate(zip(stages, commands)):
            if index == last:
                stdout, next_stdin = out_tx, None
            else:
                stdout, next_stdin = channel()

            worker = threading.Thread(
                target=self._run_stage,
                args=(cmd, stage, stdin, stdout, err_tx.clone()),
                name=f"pipebot-stage-{index}-{stage.name}",
                daemon=True
            )
            worker.start()
            workers.append(worker)
            logger.debug(f"Started stage {index}: {stage}")
            stdin = next_stdin

        err_tx.drop()

        output = list(out_rx)
        errors = list(err_rx)
        for worker in workers:
            worker.join()

        if errors:
            logger.debug(f"Pipeline failed with {len(errors)} error(s)")
            return PipelineResult.failure(errors)
        return PipelineResult(output=output)

    def _run_stage(
        self,
        cmd: BuiltinCommand,
        stage: Stage,
        stdin: Receiver,
        stdout: Sender,
        stderr: Sender
    ) -> None:
        """Worker body: run one builtin, then release its senders."""
        try:
            cmd(stage.args, stdin, stdout, stderr)
        except Exception as e:
            logger.exception(f"Builtin '{stage.name}' raised")
            stderr.send(f"{stage.name}: {e}")
        finally:
            stdout.drop()
            stderr.drop()
            logger.debug(f"Finished stage: {stage}")


class ShellInterpreter:
    """Parses command lines and runs them through a :class:`PipelineExecutor`."""

    def __init__(self, registry: Optional[CommandRegistry] = None):
        """Initialize interpreter.

        Args:
            registry: Command registry (default builtins if None)
        """
        self.registry = registry if registry is not None else create_registry()
        self.executor = PipelineExecutor(self.registry)

    def execute(self, command_line: str) -> PipelineResult:
        """Execute a command line.

        Args:
            command_line: Command line to execute

        Returns:
            Pipeline result

        Raises:
            ShellError: On lexical or structural errors; nothing is run
        """
        stages = parse_pipeline(command_line)
        return self.executor.execute(stages)

    def run(self, command_line: str) -> PipelineResult:
        """Execute a command line, reporting shell errors as a failed result.

        Args:
            command_line: Command line to execute

        Returns:
            Pipeline result
        """
        try:
            return self.execute(command_line)
        except ShellError as e:
            logger.debug(f"Rejected {command_line!r}: {e}")
            return PipelineResult.failure([str(e)])


class ExecutionContext:
    """Execution context for interactive use.

    Keeps command history alongside an interpreter.
    """

    def __init__(self, interpreter: Optional[ShellInterpreter] = None):
        """Initialize execution context.

        Args:
            interpreter: Interpreter to use (default builtins if None)
        """
        self.interpreter = interpreter or ShellInterpreter()
        self.history: list[str] = []

    def execute(self, command_line: str) -> PipelineResult:
        """Execute command and update history.

        Args:
            command_line: Command to execute

        Returns:
            Pipeline result
        """
        self.history.append(command_line)
        return self.interpreter.run(command_line)

    def get_history(self) -> list[str]:
        """Get command history."""
        return self.history.copy()

    def clear_history(self) -> None:
        """Clear command history."""
        self.history.clear()
