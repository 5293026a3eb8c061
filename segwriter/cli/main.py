# segwriter/cli/main.py
from __future__ import annotations

import argparse
import sys
from typing import List

from . import defaults, validate
from ._exit import USER_ERR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segwriter",
        description="Segment writer configuration tools",
        allow_abbrev=False,
    )
    try:
        from segwriter import __version__ as _VER  # lazy import to avoid side effects
    except ImportError:
        _VER = "unknown"
    parser.add_argument(
        "--version",
        action="version",
        version=f"segwriter {_VER}",
    )
    subparsers = parser.add_subparsers(dest="command")

    validate.register(subparsers)
    defaults.register(subparsers)

    return parser


def main(argv: List[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    ns = parser.parse_args(argv)
    if not hasattr(ns, "func"):
        parser.print_help(sys.stderr)
        return USER_ERR
    return ns.func(ns)


if __name__ == "__main__":
    raise SystemExit(main())
