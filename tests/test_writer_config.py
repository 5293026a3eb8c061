from __future__ import annotations

import dataclasses
import logging
from datetime import timedelta

import pytest

from segwriter.errors import ConfigError, ConstraintViolationError, InvalidPropertyValueError
from segwriter.writer_config import (
    COMPONENT_CODE,
    DEFAULTS,
    WriterConfig,
    default_properties,
    load,
    load_verbose,
    validate_api,
)


def _src(**props):
    return {f"writer.{k}": v for k, v in props.items()}


def test_empty_source_yields_documented_defaults():
    cfg = load({})
    assert cfg.flush_threshold_bytes == 4194304
    assert cfg.flush_threshold_time == timedelta(seconds=30)
    assert cfg.max_flush_size_bytes == 4194304
    assert cfg.max_items_to_read_at_once == 100
    assert cfg.min_read_timeout == timedelta(seconds=2)
    assert cfg.max_read_timeout == timedelta(minutes=30)
    # Direct construction with no arguments agrees with the loader
    assert cfg == WriterConfig()


def test_values_are_read_from_the_namespace():
    cfg = load(
        _src(
            flushThresholdBytes="1024",
            flushThresholdMillis="500",
            maxFlushSizeBytes=2048,
            maxItemsToReadAtOnce=" 7 ",
            minReadTimeoutMillis=0,
            maxReadTimeoutMillis="+10",
        )
    )
    assert cfg.flush_threshold_bytes == 1024
    assert cfg.flush_threshold_time == timedelta(milliseconds=500)
    assert cfg.max_flush_size_bytes == 2048
    assert cfg.max_items_to_read_at_once == 7
    assert cfg.min_read_timeout == timedelta(0)
    assert cfg.max_read_timeout == timedelta(milliseconds=10)


def test_other_namespaces_are_ignored():
    src = {"reader.flushThresholdBytes": "-1", "writerx.maxItemsToReadAtOnce": "0"}
    assert load(src) == WriterConfig()
    cfg = load({"seg.maxItemsToReadAtOnce": "3"}, namespace="seg")
    assert cfg.max_items_to_read_at_once == 3


@pytest.mark.parametrize("ns", ["", "   ", None])
def test_namespace_must_be_non_empty(ns):
    with pytest.raises(ValueError):
        load({}, ns)


def test_config_is_immutable():
    cfg = load({})
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.flush_threshold_bytes = 1  # type: ignore[misc]


def test_negative_flush_threshold_bytes_is_a_constraint_violation():
    with pytest.raises(ConstraintViolationError) as ei:
        load(_src(flushThresholdBytes=-1))
    assert "flushThresholdBytes" in str(ei.value)
    assert ei.value.properties == ("writer.flushThresholdBytes",)


@pytest.mark.parametrize("n", [0, -5])
def test_non_positive_max_items_is_a_constraint_violation(n):
    with pytest.raises(ConstraintViolationError) as ei:
        load(_src(maxItemsToReadAtOnce=n))
    assert "maxItemsToReadAtOnce" in str(ei.value)


def test_negative_min_read_timeout_is_a_constraint_violation():
    with pytest.raises(ConstraintViolationError) as ei:
        load(_src(minReadTimeoutMillis=-1))
    assert ei.value.properties == ("writer.minReadTimeoutMillis",)


def test_min_read_timeout_above_max_is_a_constraint_violation():
    with pytest.raises(ConstraintViolationError) as ei:
        load(_src(minReadTimeoutMillis=5000, maxReadTimeoutMillis=1000))
    msg = str(ei.value)
    assert "minReadTimeoutMillis" in msg and "maxReadTimeoutMillis" in msg
    assert ei.value.properties == ("writer.minReadTimeoutMillis", "writer.maxReadTimeoutMillis")


def test_min_equal_to_max_read_timeout_is_valid():
    cfg = load(_src(minReadTimeoutMillis=1000, maxReadTimeoutMillis=1000))
    assert cfg.min_read_timeout == cfg.max_read_timeout


def test_first_violated_invariant_is_reported():
    # every invariant is broken; the byte threshold is checked first
    src = _src(
        flushThresholdBytes=-1,
        maxItemsToReadAtOnce=0,
        minReadTimeoutMillis=-1,
        maxReadTimeoutMillis=-2,
    )
    with pytest.raises(ConstraintViolationError) as ei:
        load(src)
    assert ei.value.properties == ("writer.flushThresholdBytes",)

    del src["writer.flushThresholdBytes"]
    with pytest.raises(ConstraintViolationError) as ei:
        load(src)
    assert ei.value.properties == ("writer.maxItemsToReadAtOnce",)

    del src["writer.maxItemsToReadAtOnce"]
    with pytest.raises(ConstraintViolationError) as ei:
        load(src)
    assert ei.value.properties == ("writer.minReadTimeoutMillis",)


def test_non_numeric_value_is_a_format_error_regardless_of_other_keys():
    src = _src(flushThresholdMillis="abc", flushThresholdBytes=-1, maxItemsToReadAtOnce=0)
    with pytest.raises(InvalidPropertyValueError) as ei:
        load(src)
    assert ei.value.key == "writer.flushThresholdMillis"
    assert ei.value.value == "abc"


@pytest.mark.parametrize(
    "key,value",
    [
        ("flushThresholdBytes", "2147483648"),   # past int32
        ("maxItemsToReadAtOnce", "1.5"),
        ("maxFlushSizeBytes", True),
        ("minReadTimeoutMillis", 2.0),
        ("maxReadTimeoutMillis", "9223372036854775808"),  # past int64
        ("flushThresholdMillis", "9223372036854775807"),  # int64, but too large for a duration
        ("flushThresholdBytes", ""),
        ("flushThresholdBytes", "1_000"),
    ],
)
def test_unparseable_values_raise_invalid_property_value(key, value):
    with pytest.raises(InvalidPropertyValueError) as ei:
        load(_src(**{key: value}))
    assert ei.value.key == f"writer.{key}"


def test_max_flush_size_is_not_validated():
    cfg = load(_src(maxFlushSizeBytes=-1, flushThresholdBytes=10))
    assert cfg.max_flush_size_bytes == -1


def test_negative_flush_threshold_time_is_accepted():
    cfg = load(_src(flushThresholdMillis=-5))
    assert cfg.flush_threshold_time == timedelta(milliseconds=-5)


def test_none_values_count_as_absent():
    assert load(_src(flushThresholdBytes=None)) == WriterConfig()


@pytest.mark.parametrize(
    "src",
    [
        {},
        _src(flushThresholdBytes=0, flushThresholdMillis=0, maxItemsToReadAtOnce=1),
        _src(minReadTimeoutMillis=123, maxReadTimeoutMillis=86_400_000_000, maxFlushSizeBytes=-7),
        _src(flushThresholdMillis="-1", flushThresholdBytes=str(2 ** 31 - 1)),
    ],
)
def test_reload_of_serialized_config_is_identical(src):
    cfg = load(src)
    props = cfg.to_properties()
    assert all(isinstance(v, str) for v in props.values())
    assert load(props) == cfg
    # and under another namespace
    assert load(cfg.to_properties("other"), "other") == cfg


def test_as_dict_reports_millis():
    d = load(_src(maxReadTimeoutMillis=4000)).as_dict()
    assert d["maxReadTimeoutMillis"] == 4000
    assert set(d) == set(DEFAULTS)


def test_default_properties_round_trip():
    props = default_properties()
    assert props["writer.maxItemsToReadAtOnce"] == "100"
    assert load(props) == load({})
    assert all(k.startswith(COMPONENT_CODE + ".") for k in props)


def test_from_properties_matches_load():
    src = _src(maxItemsToReadAtOnce=9)
    assert WriterConfig.from_properties(src) == load(src)


def test_direct_construction_enforces_invariants():
    with pytest.raises(ConstraintViolationError):
        WriterConfig(max_items_to_read_at_once=0)
    with pytest.raises(ConstraintViolationError):
        WriterConfig(min_read_timeout=timedelta(seconds=5), max_read_timeout=timedelta(seconds=1))
    with pytest.raises(TypeError):
        WriterConfig(min_read_timeout=1000)  # type: ignore[arg-type]


def test_verbose_warns_on_unknown_keys_with_suggestion():
    cfg, warnings = load_verbose(_src(flushThresholdByte="1", maxItems="2"))
    assert cfg == WriterConfig()
    assert any("writer.flushThresholdByte" in w and "'flushThresholdBytes'" in w for w in warnings)
    assert any(w.startswith("W[writer.maxItems]") and "Did you mean" not in w for w in warnings)
    assert warnings == sorted(warnings)


def test_verbose_warns_on_max_flush_size():
    _, warnings = load_verbose(_src(maxFlushSizeBytes=0))
    assert any(w.startswith("W[writer.maxFlushSizeBytes]") for w in warnings)
    _, warnings = load_verbose(_src(maxFlushSizeBytes=10, flushThresholdBytes=20))
    assert any("smaller than writer.flushThresholdBytes" in w for w in warnings)


def test_verbose_defaults_have_no_warnings():
    cfg, warnings = load_verbose({})
    assert cfg == WriterConfig()
    assert warnings == []


def test_verbose_still_raises_on_errors():
    with pytest.raises(ConstraintViolationError):
        load_verbose(_src(maxItemsToReadAtOnce=0))


def test_validate_api_does_not_raise():
    ok, errs, cfg = validate_api({})
    assert ok and errs == [] and cfg == WriterConfig()

    ok, errs, cfg = validate_api(_src(maxItemsToReadAtOnce=0))
    assert not ok and cfg is None
    assert errs[0].startswith("ConstraintViolationError:")

    ok, errs, cfg = validate_api(_src(flushThresholdMillis="abc"))
    assert not ok and errs[0].startswith("InvalidPropertyValueError:")


def test_all_failures_are_config_errors():
    for src in (_src(flushThresholdBytes=-1), _src(flushThresholdMillis="x")):
        with pytest.raises(ConfigError):
            load(src)


def test_defaulted_keys_are_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="segwriter")
    load(_src(maxItemsToReadAtOnce=3))
    assert "writer.flushThresholdBytes not set; using default 4194304" in caplog.text
    assert "writer.maxItemsToReadAtOnce not set" not in caplog.text
    assert "Loaded writer config (namespace=writer)" in caplog.text


def test_verbose_warns_on_negative_flush_threshold_time():
    cfg, warnings = load_verbose(_src(flushThresholdMillis=-5))
    assert cfg == load(_src(flushThresholdMillis=-5))
    assert any(w.startswith("W[writer.flushThresholdMillis]") for w in warnings)


@pytest.mark.parametrize(
    "field,value",
    [
        ("max_flush_size_bytes", True),
        ("max_flush_size_bytes", "5"),
        ("flush_threshold_bytes", 1.0),
        ("max_items_to_read_at_once", "10"),
    ],
)
def test_direct_construction_rejects_non_int_counts(field, value):
    with pytest.raises(TypeError):
        WriterConfig(**{field: value})
