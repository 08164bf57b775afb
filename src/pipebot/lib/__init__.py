"""pipebot library modules.

Chat glue, configuration, sessions and the key-value store.
"""

__all__ = [
    "bot",
    "chat",
    "config_parser",
    "sessions",
    "store",
]
