from __future__ import annotations

import json
import logging
import sys
from typing import Any

# Verbosity gates
VERBOSE = False
QUIET = False
_HANDLER: logging.Handler | None = None


def set_verbosity(verbose: bool = False, quiet: bool = False) -> None:
    """Set stderr gates and route package logging to stderr at a matching level."""
    global VERBOSE, QUIET, _HANDLER
    VERBOSE, QUIET = bool(verbose), bool(quiet)
    if QUIET:
        level = logging.ERROR
    elif VERBOSE:
        level = logging.DEBUG
    else:
        level = logging.WARNING
    log = logging.getLogger("segwriter")
    if _HANDLER is not None:
        log.removeHandler(_HANDLER)
    _HANDLER = logging.StreamHandler(sys.stderr)
    _HANDLER.setFormatter(logging.Formatter("[segwriter] %(levelname)s %(name)s: %(message)s"))
    log.addHandler(_HANDLER)
    log.setLevel(level)


def eprint_once(msg: str) -> None:
    if not QUIET:
        print(msg, file=sys.stderr)


def print_json(obj: Any) -> None:
    """Dump obj with stable key order and compact separators (no color)."""
    sys.stdout.write(json.dumps(obj, sort_keys=True, separators=(",", ":")) + "\n")
