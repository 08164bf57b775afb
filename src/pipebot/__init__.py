"""pipebot - chat-driven command pipeline interpreter.

Runs Unix-style pipelines of builtin commands sent as chat messages.

Features:
- Quoted-string aware tokenizer
- One thread per pipeline stage, wired with hand-off channels
- Errors from every stage collected into one verdict
- Per-user sessions and a pluggable key-value store
"""

__version__ = "1.0.0"
__license__ = "MIT"

from pipebot.cli import main

__all__ = ["main", "__version__"]
