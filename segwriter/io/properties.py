from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SEGWRITER_"
# SEGWRITER_writer__flushThresholdBytes -> writer.flushThresholdBytes
ENV_KEY_SEPARATOR = "__"

_YAML_SUFFIXES = {".yaml", ".yml"}
_ESCAPE = re.compile(r"\\(.)")


# ---- small helpers --------------------------------------------------------

def _split_property_line(line: str) -> tuple[str, str]:
    """Split a logical `.properties` line into (key, value) at the first unescaped separator."""
    i, n = 0, len(line)
    while i < n:
        c = line[i]
        if c == "\\":
            i += 2
            continue
        if c in "=:" or c.isspace():
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return _ESCAPE.sub(r"\1", key), rest


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parse Java-style `.properties` text into a flat dict.
    Supported:
      * '#' and '!' comment lines, blank lines
      * 'key=value', 'key: value' and 'key value'
      * a trailing backslash continues the value on the next line (leading blanks dropped)
    The last occurrence of a duplicate key wins. Values are kept as strings.
    """
    out: Dict[str, str] = {}
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip(" \t\f") if not pending else raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        # an odd number of trailing backslashes means continuation
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        logical = pending + line
        pending = ""
        key, value = _split_property_line(logical)
        if key:
            out[key] = value
    if pending:
        key, value = _split_property_line(pending)
        if key:
            out[key] = value
    return out


def flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys. Non-mapping leaves are kept as-is."""
    out: Dict[str, Any] = {}
    for k, v in data.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, Mapping):
            out.update(flatten(v, key))
        else:
            out[key] = v
    return out


# ---- loaders --------------------------------------------------------------

def load_properties_file(path: str | os.PathLike) -> Dict[str, Any]:
    """
    Read a configuration file into a flat key/value source.
    Behavior:
      * .yaml / .yml -> yaml.safe_load, nested sections flattened to dotted keys
      * .json        -> json.load, flattened the same way
      * anything else is parsed as a Java-style .properties file
    An empty document yields {}. Raises ConfigError when the file cannot be read or parsed,
    or when a YAML/JSON document is not a mapping.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config file {str(p)!r}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"config file {str(p)!r} is not valid UTF-8: {e.reason} at byte {e.start}") from e

    suffix = p.suffix.lower()
    logger.debug("Reading configuration from %s", p)
    if suffix in _YAML_SUFFIXES or suffix == ".json":
        try:
            data = yaml.safe_load(text) if suffix in _YAML_SUFFIXES else json.loads(text or "null")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"failed to parse {str(p)!r}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise ConfigError(f"{str(p)!r}: top-level document must be a mapping, got {type(data).__name__}")
        return flatten(data)
    return parse_properties(text)


def env_overrides(env: Optional[Mapping[str, str]] = None, prefix: str = ENV_PREFIX) -> Dict[str, str]:
    """Collect `<prefix><ns>__<property>` variables as {'<ns>.<property>': value}."""
    env = os.environ if env is None else env
    out: Dict[str, str] = {}
    for name in sorted(env):
        if not name.startswith(prefix):
            continue
        rest = name[len(prefix):]
        if ENV_KEY_SEPARATOR not in rest:
            continue
        out[rest.replace(ENV_KEY_SEPARATOR, ".")] = env[name]
    return out


def apply_env_overrides(
    props: Mapping[str, Any],
    env: Optional[Mapping[str, str]] = None,
    prefix: str = ENV_PREFIX,
) -> Dict[str, Any]:
    """Return a new source with environment overrides merged over `props` (input not mutated)."""
    merged = dict(props)
    overrides = env_overrides(env, prefix)
    for k, v in overrides.items():
        logger.debug("Environment override for %s", k)
        merged[k] = v
    return merged


__all__ = [
    "ENV_PREFIX",
    "apply_env_overrides",
    "env_overrides",
    "flatten",
    "load_properties_file",
    "parse_properties",
]
