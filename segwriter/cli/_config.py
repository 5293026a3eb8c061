from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Tuple

# Relative default searched under the current working directory
DEFAULT_REL = Path("configs") / "writer.properties"
# XDG subpath under $XDG_CONFIG_HOME (or ~/.config if unset)
XDG_SUBPATH = Path("segwriter") / "writer.properties"
ENV_CONFIG = "SEGWRITER_CONFIG"


def _coerce_candidate(p: Path) -> Optional[Path]:
    """Return a concrete config file path if the candidate exists.

    Accepts a file path *or* a directory; directories are resolved to
    "writer.properties" inside that directory. Returns the resolved file path
    if it exists, else None.
    """
    if p.is_dir():
        p = p / DEFAULT_REL.name
    if p.is_file():
        return p.resolve()
    return None


def discover_config_path(
    explicit: Optional[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[Optional[Path], str]:
    """Deterministic config discovery.

    Order (only when `explicit` is not provided):
      1) $SEGWRITER_CONFIG (file or dir -> writer.properties)
      2) CWD: ./configs/writer.properties
      3) XDG: ${XDG_CONFIG_HOME:-$HOME/.config}/segwriter/writer.properties

    Returns a tuple: (selected_path or None, source_tag).
    Source tags: 'explicit', 'explicit-missing', 'env:SEGWRITER_CONFIG',
    'cwd:configs/writer.properties', 'xdg', 'none'.
    """
    cwd = cwd or Path.cwd()
    env = dict(env or {})

    # explicit path always wins; report it even if missing
    if explicit:
        expanded = Path(os.path.expandvars(explicit)).expanduser()
        sel = _coerce_candidate(expanded)
        if sel is not None:
            return sel, "explicit"
        return expanded, "explicit-missing"

    cenv = env.get(ENV_CONFIG)
    if cenv:
        sel = _coerce_candidate(Path(os.path.expandvars(cenv)).expanduser())
        if sel is not None:
            return sel, f"env:{ENV_CONFIG}"

    sel = _coerce_candidate(cwd / DEFAULT_REL)
    if sel is not None:
        return sel, f"cwd:{DEFAULT_REL.as_posix()}"

    xdg_base = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    sel = _coerce_candidate(Path(xdg_base).expanduser() / XDG_SUBPATH)
    if sel is not None:
        return sel, "xdg"

    return None, "none"


__all__ = [
    "DEFAULT_REL",
    "ENV_CONFIG",
    "XDG_SUBPATH",
    "discover_config_path",
]
