"""Tests for intrinsic list parsing and the intrinsic list constraints."""

import pytest

from flagcheck.constraints.intrinsics import control_intrinsic, disable_intrinsic
from flagcheck.constraints.schema import Mode
from flagcheck.flags.intrinsics import MAX_REPORTED_TOKEN, IntrinsicRegistry, IntrinsicToken


@pytest.fixture
def registry() -> IntrinsicRegistry:
    return IntrinsicRegistry()


def test_parse_accepts_commas_and_whitespace(registry):
    tokens = registry.parse("_hashCode, _dsin\n_arraycopy", signed=False)

    assert [t.name for t in tokens] == ["_hashCode", "_dsin", "_arraycopy"]
    assert registry.unrecognized("_hashCode, _dsin\n_arraycopy", signed=False) == []


def test_parse_signed_entries(registry):
    tokens = registry.parse("+_hashCode,-c2:_dsin", signed=True)

    assert tokens == [
        IntrinsicToken(raw="+_hashCode", name="_hashCode", enabled=True),
        IntrinsicToken(raw="-c2:_dsin", name="_dsin", enabled=False, tier="c2"),
    ]


@pytest.mark.parametrize("entry", ["_hashCode", "+c3:_dsin", "+", "-c1:"])
def test_malformed_signed_entries_are_unrecognized(registry, entry):
    assert registry.unrecognized(entry, signed=True) == [entry]


def test_unrecognized_keeps_list_order(registry):
    value = "_bogus,_hashCode,_alsoBogus"
    assert registry.unrecognized(value, signed=False) == ["_bogus", "_alsoBogus"]


def test_reported_entries_are_truncated(registry):
    entry = "+_" + "x" * 100
    [reported] = registry.unrecognized(entry, signed=True)

    assert len(reported) == MAX_REPORTED_TOKEN
    assert entry.startswith(reported)


def test_extra_names_extend_the_registry():
    registry = IntrinsicRegistry(extra=["_vendorIntrinsic"])

    assert "_vendorIntrinsic" in registry
    assert "_hashCode" in registry
    assert registry.unrecognized("_vendorIntrinsic", signed=False) == []


def test_empty_list_is_valid(make_ctx):
    assert disable_intrinsic("", make_ctx()) is None
    assert control_intrinsic("  ", make_ctx()) is None


@pytest.mark.parametrize("mode", [Mode.STRICT, Mode.VERIFY])
def test_unknown_disable_entry_fails_in_every_mode(make_ctx, store, sink, mode):
    violation = disable_intrinsic("_hashCode,_bogus", make_ctx(mode))

    assert violation is not None
    assert violation.message == "Unrecognized intrinsic detected in DisableIntrinsic: _bogus"
    assert store.get("DisableIntrinsic") == ""
    assert sink.messages("correction") == []


def test_control_intrinsic_requires_signs(make_ctx):
    assert control_intrinsic("+_hashCode -_dsin", make_ctx()) is None

    violation = control_intrinsic("+_hashCode,_dsin", make_ctx(Mode.VERIFY))
    assert violation is not None
    assert violation.message.endswith("ControlIntrinsic: _dsin")


def test_quiet_context_prints_nothing(make_ctx, sink):
    violation = control_intrinsic("+_bogus", make_ctx(verbose=False))

    assert violation is not None
    assert sink.messages() == []


def test_context_registry_is_consulted(make_ctx):
    ctx = make_ctx(intrinsics=IntrinsicRegistry(extra=["_vendorIntrinsic"]))
    assert control_intrinsic("+_vendorIntrinsic", ctx) is None
