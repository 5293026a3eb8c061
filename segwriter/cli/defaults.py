"""CLI subcommand `defaults`: print the default writer properties."""
from __future__ import annotations

import argparse

from ..writer_config import COMPONENT_CODE, DEFAULTS, default_properties
from . import _io
from ._exit import OK, USER_ERR


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = subparsers.add_parser(
        "defaults",
        help="Print the default writer properties",
        description="Print the default writer properties as a .properties document (or JSON).",
    )
    sp.add_argument("-n", "--namespace", default=COMPONENT_CODE,
                    help=f"Component namespace of the keys (default: {COMPONENT_CODE})")
    sp.add_argument("--json", action="store_true", help="JSON output keyed by property name")
    sp.set_defaults(command="defaults", func=_run)


def _run(ns: argparse.Namespace) -> int:
    if not ns.namespace.strip():
        _io.eprint_once("error: namespace must be a non-empty string")
        return USER_ERR
    if ns.json:
        _io.print_json(dict(DEFAULTS))
        return OK
    print(f"# segwriter defaults (namespace={ns.namespace})")
    for k, v in default_properties(ns.namespace).items():
        print(f"{k}={v}")
    return OK
