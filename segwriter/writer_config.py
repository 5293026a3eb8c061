"""
Segment writer configuration: defaults, typed parsing and invariant validation.

Public API:
    load(source, namespace="writer") -> WriterConfig
    load_verbose(source, namespace="writer") -> (WriterConfig, warnings)
    validate_api(source, namespace="writer") -> (ok, errors, WriterConfig | None)

- `source` is a flat mapping of full dotted keys ("writer.flushThresholdBytes") to raw values.
- Absent keys take the defaults in DEFAULTS.
- Raises InvalidPropertyValueError for unparseable values and ConstraintViolationError for
  the first broken invariant. Nothing is returned on failure.
- No I/O; the source is only read.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .component import ComponentProperties, full_key
from .errors import ConfigError, ConstraintViolationError, format_error

__all__ = [
    "COMPONENT_CODE",
    "DEFAULTS",
    "WriterConfig",
    "default_properties",
    "load",
    "load_verbose",
    "validate_api",
]

logger = logging.getLogger(__name__)

COMPONENT_CODE = "writer"

PROPERTY_FLUSH_THRESHOLD_BYTES = "flushThresholdBytes"
PROPERTY_FLUSH_THRESHOLD_MILLIS = "flushThresholdMillis"
PROPERTY_MAX_FLUSH_SIZE_BYTES = "maxFlushSizeBytes"
PROPERTY_MAX_ITEMS_TO_READ_AT_ONCE = "maxItemsToReadAtOnce"
PROPERTY_MIN_READ_TIMEOUT_MILLIS = "minReadTimeoutMillis"
PROPERTY_MAX_READ_TIMEOUT_MILLIS = "maxReadTimeoutMillis"

# ------------------------------
# Defaults
# ------------------------------

DEFAULTS: Dict[str, int] = {
    PROPERTY_FLUSH_THRESHOLD_BYTES: 4 * 1024 * 1024,     # 4 MiB
    PROPERTY_FLUSH_THRESHOLD_MILLIS: 30 * 1000,          # 30s
    PROPERTY_MAX_FLUSH_SIZE_BYTES: 4 * 1024 * 1024,
    PROPERTY_MAX_ITEMS_TO_READ_AT_ONCE: 100,
    PROPERTY_MIN_READ_TIMEOUT_MILLIS: 2 * 1000,          # 2s
    PROPERTY_MAX_READ_TIMEOUT_MILLIS: 30 * 60 * 1000,    # 30min
}

_ZERO = timedelta(0)
_ONE_MS = timedelta(milliseconds=1)


def _millis(td: timedelta) -> int:
    # floor division keeps the count exact for large durations
    return td // _ONE_MS


def _check_invariants(
    flush_threshold_bytes: int,
    max_items_to_read_at_once: int,
    min_read_timeout: timedelta,
    max_read_timeout: timedelta,
    namespace: str,
) -> None:
    """Raise ConstraintViolationError for the first broken invariant, in a fixed order."""
    if flush_threshold_bytes < 0:
        k = full_key(namespace, PROPERTY_FLUSH_THRESHOLD_BYTES)
        raise ConstraintViolationError(f"Property '{k}' must be a non-negative integer.", [k])
    if max_items_to_read_at_once <= 0:
        k = full_key(namespace, PROPERTY_MAX_ITEMS_TO_READ_AT_ONCE)
        raise ConstraintViolationError(f"Property '{k}' must be a positive integer.", [k])
    if min_read_timeout < _ZERO:
        k = full_key(namespace, PROPERTY_MIN_READ_TIMEOUT_MILLIS)
        raise ConstraintViolationError(f"Property '{k}' must be a non-negative integer.", [k])
    if min_read_timeout > max_read_timeout:
        k_min = full_key(namespace, PROPERTY_MIN_READ_TIMEOUT_MILLIS)
        k_max = full_key(namespace, PROPERTY_MAX_READ_TIMEOUT_MILLIS)
        raise ConstraintViolationError(
            f"Property '{k_min}' must be smaller than or equal to '{k_max}'.", [k_min, k_max]
        )


@dataclass(frozen=True)
class WriterConfig:
    """Validated, immutable writer settings.

    flush_threshold_bytes: minimum bytes to aggregate for a segment before flushing to storage.
    flush_threshold_time: minimum time to wait before flushing aggregated data.
    max_flush_size_bytes: maximum bytes written by a single flush.
    max_items_to_read_at_once: maximum batch size per read from the operation log.
    min_read_timeout / max_read_timeout: bounds of the adaptive read timeout.
    """

    flush_threshold_bytes: int = DEFAULTS[PROPERTY_FLUSH_THRESHOLD_BYTES]
    flush_threshold_time: timedelta = timedelta(milliseconds=DEFAULTS[PROPERTY_FLUSH_THRESHOLD_MILLIS])
    max_flush_size_bytes: int = DEFAULTS[PROPERTY_MAX_FLUSH_SIZE_BYTES]
    max_items_to_read_at_once: int = DEFAULTS[PROPERTY_MAX_ITEMS_TO_READ_AT_ONCE]
    min_read_timeout: timedelta = timedelta(milliseconds=DEFAULTS[PROPERTY_MIN_READ_TIMEOUT_MILLIS])
    max_read_timeout: timedelta = timedelta(milliseconds=DEFAULTS[PROPERTY_MAX_READ_TIMEOUT_MILLIS])

    def __post_init__(self) -> None:
        for name in ("flush_threshold_time", "min_read_timeout", "max_read_timeout"):
            if not isinstance(getattr(self, name), timedelta):
                raise TypeError(f"{name} must be a datetime.timedelta")
        for name in ("flush_threshold_bytes", "max_flush_size_bytes", "max_items_to_read_at_once"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"{name} must be an int")
        _check_invariants(
            self.flush_threshold_bytes,
            self.max_items_to_read_at_once,
            self.min_read_timeout,
            self.max_read_timeout,
            COMPONENT_CODE,
        )

    @classmethod
    def from_properties(cls, source: Mapping[str, Any], namespace: str = COMPONENT_CODE) -> "WriterConfig":
        return load(source, namespace)

    def as_dict(self) -> Dict[str, int]:
        """Property name -> value, durations as integer milliseconds."""
        return {
            PROPERTY_FLUSH_THRESHOLD_BYTES: self.flush_threshold_bytes,
            PROPERTY_FLUSH_THRESHOLD_MILLIS: _millis(self.flush_threshold_time),
            PROPERTY_MAX_FLUSH_SIZE_BYTES: self.max_flush_size_bytes,
            PROPERTY_MAX_ITEMS_TO_READ_AT_ONCE: self.max_items_to_read_at_once,
            PROPERTY_MIN_READ_TIMEOUT_MILLIS: _millis(self.min_read_timeout),
            PROPERTY_MAX_READ_TIMEOUT_MILLIS: _millis(self.max_read_timeout),
        }

    def to_properties(self, namespace: str = COMPONENT_CODE) -> Dict[str, str]:
        """Serialize back into a source that `load` turns into an equal config."""
        return {full_key(namespace, k): str(v) for k, v in self.as_dict().items()}


def default_properties(namespace: str = COMPONENT_CODE) -> Dict[str, str]:
    return {full_key(namespace, k): str(v) for k, v in DEFAULTS.items()}


def load(source: Mapping[str, Any], namespace: str = COMPONENT_CODE) -> WriterConfig:
    """Resolve, validate and freeze the writer settings found in `source` under `namespace`."""
    props = ComponentProperties(source, namespace)

    for name in DEFAULTS:
        if not props.has(name):
            logger.debug("%s not set; using default %s", props.full_key(name), DEFAULTS[name])

    # Resolve every value first so a format error wins over any invariant failure.
    flush_threshold_bytes = props.get_int32(PROPERTY_FLUSH_THRESHOLD_BYTES, DEFAULTS[PROPERTY_FLUSH_THRESHOLD_BYTES])
    flush_threshold_time = props.get_millis(PROPERTY_FLUSH_THRESHOLD_MILLIS, DEFAULTS[PROPERTY_FLUSH_THRESHOLD_MILLIS])
    max_flush_size_bytes = props.get_int32(PROPERTY_MAX_FLUSH_SIZE_BYTES, DEFAULTS[PROPERTY_MAX_FLUSH_SIZE_BYTES])
    max_items = props.get_int32(PROPERTY_MAX_ITEMS_TO_READ_AT_ONCE, DEFAULTS[PROPERTY_MAX_ITEMS_TO_READ_AT_ONCE])
    min_read_timeout = props.get_millis(PROPERTY_MIN_READ_TIMEOUT_MILLIS, DEFAULTS[PROPERTY_MIN_READ_TIMEOUT_MILLIS])
    max_read_timeout = props.get_millis(PROPERTY_MAX_READ_TIMEOUT_MILLIS, DEFAULTS[PROPERTY_MAX_READ_TIMEOUT_MILLIS])

    _check_invariants(flush_threshold_bytes, max_items, min_read_timeout, max_read_timeout, namespace)

    cfg = WriterConfig(
        flush_threshold_bytes=flush_threshold_bytes,
        flush_threshold_time=flush_threshold_time,
        max_flush_size_bytes=max_flush_size_bytes,
        max_items_to_read_at_once=max_items,
        min_read_timeout=min_read_timeout,
        max_read_timeout=max_read_timeout,
    )
    logger.info("Loaded writer config (namespace=%s): %s", namespace, cfg.as_dict())
    return cfg


# ------------------------------
# Warnings (non-fatal)
# ------------------------------

def _lev(a: str, b: str) -> int:
    """Tiny Levenshtein distance (edit distance) for did-you-mean suggestions."""
    dp = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        prev = dp[0]
        dp[0] = i
        for j, cb in enumerate(b, 1):
            ins = dp[j] + 1
            dele = dp[j - 1] + 1
            sub = prev + (0 if ca == cb else 1)
            prev, dp[j] = dp[j], min(ins, dele, sub)
    return dp[-1]


def _suggest_key(bad: str, allowed: Iterable[str]) -> Optional[str]:
    """Return closest allowed key within distance <= 2, else None. Ties resolve lexicographically."""
    best_key, best_dist = None, 99
    for k in sorted(allowed):
        d = _lev(bad.lower(), k.lower())
        if d < best_dist:
            best_key, best_dist = k, d
    return best_key if best_dist <= 2 else None


def _collect_warnings(props: ComponentProperties, cfg: WriterConfig) -> List[str]:
    warnings: List[str] = []
    for name in props.keys():
        if name in DEFAULTS:
            continue
        hint = _suggest_key(name, DEFAULTS)
        msg = f"W[{props.full_key(name)}]: unknown property; ignored."
        if hint:
            msg += f" Did you mean '{hint}'?"
        warnings.append(msg)

    k_max_flush = props.full_key(PROPERTY_MAX_FLUSH_SIZE_BYTES)
    if cfg.max_flush_size_bytes <= 0:
        warnings.append(f"W[{k_max_flush}]: expected a positive integer; value is not enforced.")
    elif cfg.max_flush_size_bytes < cfg.flush_threshold_bytes:
        warnings.append(
            f"W[{k_max_flush}]: smaller than {props.full_key(PROPERTY_FLUSH_THRESHOLD_BYTES)}; "
            "a single flush cannot drain a full threshold."
        )
    if cfg.flush_threshold_time < _ZERO:
        warnings.append(
            f"W[{props.full_key(PROPERTY_FLUSH_THRESHOLD_MILLIS)}]: negative; time-based flushes trigger immediately."
        )
    return warnings


def load_verbose(source: Mapping[str, Any], namespace: str = COMPONENT_CODE) -> Tuple[WriterConfig, List[str]]:
    """Like `load`, but also return sorted non-fatal warnings. Warnings never alter the config."""
    cfg = load(source, namespace)
    warnings = _collect_warnings(ComponentProperties(source, namespace), cfg)
    for w in warnings:
        logger.warning("%s", w)
    return cfg, sorted(warnings)


def validate_api(source: Mapping[str, Any], namespace: str = COMPONENT_CODE):
    """Stable, test-friendly API.

    Returns a tuple: (ok: bool, errs: list[str], cfg_or_none).
    - On success: (True, [], WriterConfig)
    - On configuration error: (False, ["ErrorClass: message"], None)
    Does not raise for configuration errors; bad arguments (empty namespace) still raise.
    """
    try:
        return True, [], load(source, namespace)
    except ConfigError as e:
        return False, [format_error(e)], None
