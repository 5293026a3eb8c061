from __future__ import annotations

# Process exit codes shared by all subcommands.
OK = 0
INVALID = 1  # config rejected, or warnings under --strict
USER_ERR = 2  # bad usage, unreadable or unparseable config file

__all__ = ["OK", "INVALID", "USER_ERR"]
