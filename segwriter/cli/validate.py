"""CLI subcommand `validate`: load a writer config file and report whether it is valid.

Exit codes:
  0 = OK
  1 = Validation errors (or warnings when --strict)
  2 = Load/parse errors or bad usage
"""
from __future__ import annotations

import argparse
import os
from pathlib import Path

from ..errors import ConfigError, format_error
from ..io.properties import apply_env_overrides, load_properties_file
from ..writer_config import COMPONENT_CODE, load_verbose
from . import _io
from ._config import discover_config_path
from ._exit import INVALID, OK, USER_ERR

_HELP = "Validate a writer configuration file"


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = subparsers.add_parser(
        "validate",
        help=_HELP,
        description=(
            "Validate writer configuration (.properties, .yaml or .json). "
            "Without a path, the config is discovered from $SEGWRITER_CONFIG, "
            "./configs/writer.properties, then $XDG_CONFIG_HOME/segwriter/writer.properties; "
            "if none exists the defaults are validated."
        ),
    )
    sp.add_argument("path", nargs="?", default=None, help="Path to config file")
    sp.add_argument("-n", "--namespace", default=COMPONENT_CODE,
                    help=f"Component namespace of the keys (default: {COMPONENT_CODE})")
    sp.add_argument("--strict", action="store_true",
                    help="Treat warnings as errors (non-zero exit if warnings present).")
    sp.add_argument("--json", action="store_true", help="JSON output (stable, machine-readable)")
    sp.add_argument("--no-env", action="store_true",
                    help="Ignore SEGWRITER_<ns>__<property> environment overrides")
    verbosity = sp.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="increase stderr verbosity")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="suppress non-essential stderr")
    sp.set_defaults(command="validate", func=_run)


def _run(ns: argparse.Namespace) -> int:
    _io.set_verbosity(ns.verbose, ns.quiet)

    path, source = discover_config_path(ns.path, Path.cwd(), os.environ)
    if source == "explicit-missing":
        _io.eprint_once(f"error: config file not found: {path}")
        return USER_ERR
    if _io.VERBOSE:
        _io.eprint_once(f"[segwriter] config: selected={path if path else 'none'} (source={source})")

    try:
        props = load_properties_file(path) if path is not None else {}
    except ConfigError as e:
        _io.eprint_once(f"error: {format_error(e)}")
        return USER_ERR
    if not ns.no_env:
        props = apply_env_overrides(props, os.environ)

    try:
        cfg, warnings = load_verbose(props, ns.namespace)
    except ValueError as e:
        _io.eprint_once(f"error: {e}")
        return USER_ERR
    except ConfigError as e:
        if ns.json:
            _io.print_json({"ok": False, "errors": [format_error(e)], "source": source})
        else:
            print("CONFIG INVALID\n" + format_error(e))
        return INVALID

    failed = bool(ns.strict and warnings)
    if ns.json:
        _io.print_json(
            {
                "ok": not failed,
                "namespace": ns.namespace,
                "source": source,
                "config": cfg.as_dict(),
                "warnings": warnings,
            }
        )
        return INVALID if failed else OK

    if failed:
        print("CONFIG WARNINGS (treated as errors due to --strict)")
        for w in warnings:
            print(w)
        return INVALID

    print("OK")
    for k, v in sorted(cfg.to_properties(ns.namespace).items()):
        print(f"{k}={v}")
    return OK
