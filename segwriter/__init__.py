"""segwriter: segment writer configuration loader (public API surface).

Only `segwriter` and `segwriter.errors` are public. Everything else is internal.
This module also resolves `__version__` across installs.
"""
from __future__ import annotations

from typing import Any as _Any
from . import errors as errors  # re-export for star-import; noqa: F401

from importlib.metadata import version as _pkg_version, PackageNotFoundError


def _version_from_metadata() -> str | None:
    try:
        return _pkg_version("segwriter")
    except PackageNotFoundError:
        return None


__version__ = _version_from_metadata() or "0+unknown"

_LAZY = {
    "COMPONENT_CODE": "COMPONENT_CODE",
    "WriterConfig": "WriterConfig",
    "load_writer_config": "load",
    "load_writer_config_verbose": "load_verbose",
    "validate_writer_config_api": "validate_api",
}


def __getattr__(name: str) -> _Any:  # PEP 562 lazy exports keep `import segwriter` cheap
    if name in _LAZY:
        from . import writer_config as _wc

        value = getattr(_wc, _LAZY[name])
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(__all__)


# Star-export surface (deterministic ordering). Tests require __all__ to be lexicographically sorted.
__all__ = [
    "COMPONENT_CODE",
    "WriterConfig",
    "__version__",
    "errors",
    "load_writer_config",
    "load_writer_config_verbose",
    "validate_writer_config_api",
]
