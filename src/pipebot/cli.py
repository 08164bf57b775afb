from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

from pipebot.lib.bot import Bot
from pipebot.lib.chat import StreamClient
from pipebot.lib.config_parser import Config, load_config
from pipebot.lib.store import create_store
from pipebot.shell.builtins import create_registry
from pipebot.shell.interpreter import ExecutionContext, ShellInterpreter
from pipebot.shell.repl import print_result, run_command, run_repl, run_script


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging.

    Logs go to stderr so they never mix with pipeline output.

    Args:
        verbose: Enable debug logging
        quiet: Suppress info logging
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr
    )


def load_settings(config_path: Optional[Path]) -> Config:
    """Load configuration, falling back to defaults when no file is given.

    Args:
        config_path: Path to config.yaml, or None

    Returns:
        Configuration
    """
    if config_path is None:
        return Config()
    return load_config(config_path).get_config()


def build_context(config: Config) -> ExecutionContext:
    """Create an execution context with the configured store."""
    registry = create_registry(create_store(config.store))
    return ExecutionContext(ShellInterpreter(registry))


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Run Unix-style pipelines of builtin commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  pipebot run 'echo a b c | count'\n"
            "  pipebot repl\n"
            "  pipebot --config config.yaml serve < inbound.txt"
        )
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        default=None,
        help='Path to configuration file (defaults are used if omitted)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (debug) logging'
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress informational output'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    run_parser = subparsers.add_parser('run', help='Execute a single pipeline')
    run_parser.add_argument('line', help='Pipeline to run (e.g. "echo hi | count")')

    subparsers.add_parser('repl', help='Start the interactive shell')

    script_parser = subparsers.add_parser('script', help='Run pipelines from a file')
    script_parser.add_argument('path', type=Path, help='Script file, one pipeline per line')

    subparsers.add_parser(
        'serve',
        help='Serve chat messages read from stdin ("<source> <target> <body>")'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (sys.argv[1:] if None)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    try:
        config = load_settings(args.config)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    if args.command == 'run':
        result = run_command(args.line, build_context(config))
        print_result(result)
        return 0 if result.success else 1

    if args.command == 'repl':
        logger.info("Starting interactive shell...")
        run_repl(build_context(config))
        return 0

    if args.command == 'script':
        try:
            ok = run_script(args.path, build_context(config))
        except OSError as e:
            logger.error(f"Failed to read script: {e}")
            return 1
        return 0 if ok else 1

    if args.command == 'serve':
        client = StreamClient(sys.stdin, sys.stdout, nickname=config.nickname)
        bot = Bot(client, config)
        logger.info(f"Serving as {config.nickname} (leader {bot.leader!r})")
        try:
            bot.run()
        except OSError as e:
            logger.error(f"Failed to start bot: {e}")
            return 1
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
