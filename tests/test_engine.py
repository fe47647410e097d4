"""Tests for constraint ordering, whole-store validation and proposals."""

import pytest

from flagcheck.constraints.engine import ConstraintEngine
from flagcheck.constraints.registry import CONSTRAINTS
from flagcheck.constraints.schema import ConstraintDef, Mode, Outcome
from flagcheck.flags.platform import ARCHES, Platform
from flagcheck.flags.store import FlagStore, Origin


def _accept(value, ctx):
    return None


@pytest.fixture
def engine(store, platform, sink) -> ConstraintEngine:
    return ConstraintEngine(store, platform, sink=sink)


def test_evaluation_order_respects_dependencies(engine):
    order = engine.evaluation_order()

    assert order.index("CompileThreshold") < order.index("OnStackReplacePercentage")
    assert order.index("CodeEntryAlignment") < order.index("OptoLoopAlignment")
    assert order.index("OptoLoopAlignment") < order.index("CodeCacheSegmentSize")
    assert order.index("CodeEntryAlignment") < order.index("InteriorEntryAlignment")


def test_evaluation_order_lists_only_constrained_flags(engine):
    order = engine.evaluation_order()

    assert sorted(order) == sorted(CONSTRAINTS)
    assert "AllocatePrefetchStyle" not in order
    # Independent constraints keep registry order.
    assert order[0] == "CICompilerCount"


def test_dependency_cycle_is_rejected(store, platform):
    constraints = {
        "CompileThreshold": ConstraintDef(
            flag="CompileThreshold", func=_accept, depends_on=("OnStackReplacePercentage",)
        ),
        "OnStackReplacePercentage": ConstraintDef(
            flag="OnStackReplacePercentage", func=_accept, depends_on=("CompileThreshold",)
        ),
    }

    with pytest.raises(ValueError, match="cycle"):
        ConstraintEngine(store, platform, constraints=constraints)


def test_unknown_dependency_is_rejected(store, platform):
    constraints = {
        "CompileThreshold": ConstraintDef(flag="CompileThreshold", func=_accept, depends_on=("NoSuchFlag",)),
    }

    with pytest.raises(ValueError, match="NoSuchFlag"):
        ConstraintEngine(store, platform, constraints=constraints)


def test_defaults_are_valid(engine, sink):
    report = engine.check_all()

    assert report.ok
    assert report.corrections == []
    assert report.skipped == []
    assert len(report.results) == len(CONSTRAINTS)
    assert sink.messages() == []


def test_c2_only_constraints_are_skipped(store, sink):
    engine = ConstraintEngine(store, Platform(compiler2=False), sink=sink)

    report = engine.check_all()

    assert set(report.skipped) == {"InteriorEntryAlignment", "NodeLimitFudgeFactor", "LoopStripMiningIter"}
    assert report.result("InteriorEntryAlignment") is None


def test_check_all_verify_mixes_corrections_and_violations(platform, sink):
    store = FlagStore.from_values({"TypeProfileLevel": 3, "CodeEntryAlignment": 48})
    engine = ConstraintEngine(store, platform, sink=sink)

    report = engine.check_all(mode=Mode.VERIFY)

    assert not report.ok
    assert report.violations[0].flag == "CodeEntryAlignment"
    assert [(c.flag, c.original, c.corrected) for c in report.corrections] == [("TypeProfileLevel", 3, 2)]
    assert store.get("TypeProfileLevel") == 2
    assert store.origin("TypeProfileLevel") is Origin.ERGONOMIC


def test_readers_of_an_invalid_flag_fail_closed(platform, sink):
    store = FlagStore.from_values({"CodeEntryAlignment": 48, "OptoLoopAlignment": 100})
    engine = ConstraintEngine(store, platform, sink=sink)

    report = engine.check_all(mode=Mode.VERIFY)

    assert {v.flag for v in report.violations} == {
        "CodeEntryAlignment",
        "OptoLoopAlignment",
        "InteriorEntryAlignment",
        "CodeCacheSegmentSize",
    }
    opto = report.result("OptoLoopAlignment")
    assert opto.violation.message == "OptoLoopAlignment cannot be validated because CodeEntryAlignment value is invalid"
    assert opto.corrections == []
    assert store.get("OptoLoopAlignment") == 100


def test_fail_closed_cascades_through_readers(platform, sink):
    store = FlagStore.from_values({"CodeEntryAlignment": 48})
    engine = ConstraintEngine(store, platform, sink=sink)

    report = engine.check_all()

    # CodeCacheSegmentSize reads both alignments; the first invalid one is named.
    message = report.result("CodeCacheSegmentSize").violation.message
    assert "because CodeEntryAlignment value is invalid" in message


_OUT_OF_RANGE = {
    "CICompilerCount": 0,
    "AllocatePrefetchDistance": 600,
    "AllocatePrefetchStepSize": 13,
    "AllocatePrefetchInstr": 7,
    "CompileThreshold": 2**40,
    "OnStackReplacePercentage": 5,
    "OptoLoopAlignment": 100,
    "InteriorEntryAlignment": 100,
    "TypeProfileLevel": 1311,
    "NodeLimitFudgeFactor": 100,
    "RTMTotalCountIncrRate": 100,
    "LoopStripMiningIter": 0,
}


@pytest.mark.parametrize("arch", sorted(ARCHES))
@pytest.mark.parametrize("flag", sorted(f for f, d in CONSTRAINTS.items() if d.correctable))
def test_corrected_values_pass_strict_recheck(sink, flag, arch):
    store = FlagStore.from_values({"AllocatePrefetchStyle": 3, "UseRTMLocking": True})
    engine = ConstraintEngine(store, Platform(arch=arch, rtm=True), sink=sink)

    assert engine.check(flag, mode=Mode.VERIFY, value=_OUT_OF_RANGE[flag]).ok
    assert engine.check(flag, mode=Mode.STRICT).ok


def test_check_all_strict_leaves_values_alone(platform, sink):
    store = FlagStore.from_values({"TypeProfileLevel": 3})
    engine = ConstraintEngine(store, platform, sink=sink)

    report = engine.check_all(flags=["TypeProfileLevel"])

    assert report.result("TypeProfileLevel").outcome is Outcome.VIOLATED
    assert store.get("TypeProfileLevel") == 3


def test_check_given_value_is_not_stored(engine, store):
    result = engine.check("CompileThreshold", value=-5)

    assert not result.ok
    assert store.get("CompileThreshold") == 10000


def test_check_rejects_unconstrained_flag(engine):
    with pytest.raises(ValueError, match="No constraint"):
        engine.check("ProfileInterpreter")


def test_violated_proposal_leaves_store_unchanged(engine, store):
    report = engine.propose("CodeEntryAlignment", 48, mode=Mode.VERIFY)

    assert not report.ok
    assert store.get("CodeEntryAlignment") == 32
    assert store.is_default("CodeEntryAlignment")


def test_accepted_proposal_is_committed_and_dependents_rechecked(engine, store):
    report = engine.propose("CompileThreshold", 20000)

    assert report.ok
    assert store.get("CompileThreshold") == 20000
    assert store.origin("CompileThreshold") is Origin.MANAGEMENT
    assert report.result("OnStackReplacePercentage") is not None


def test_corrected_proposal_keeps_corrected_value(engine, store):
    report = engine.propose("OptoLoopAlignment", 100, mode=Mode.VERIFY)

    assert report.ok
    assert store.get("OptoLoopAlignment") == 32
    assert store.origin("OptoLoopAlignment") is Origin.ERGONOMIC
    assert report.result("CodeCacheSegmentSize").ok


def test_proposal_for_unconstrained_flag_corrects_dependents(engine, store):
    report = engine.propose("InterpreterProfilePercentage", 200, mode=Mode.VERIFY)

    assert store.get("InterpreterProfilePercentage") == 200
    assert store.get("OnStackReplacePercentage") == 200
    assert [c.flag for c in report.corrections] == ["OnStackReplacePercentage"]


def test_proposal_type_is_checked(engine):
    with pytest.raises(ValueError):
        engine.propose("CompileThreshold", "fast")


def test_proposed_flag_counts_as_explicit(engine, store, sink):
    engine.propose("LoopStripMiningIter", 0)

    assert store.get("LoopStripMiningIter") == 1
    assert any("at least 1" in m for m in sink.messages("error"))


def test_disabling_safepoints_turns_off_strip_mining(engine, store):
    report = engine.propose("UseCountedLoopSafepoints", False)

    assert report.ok
    assert store.get("LoopStripMiningIter") == 0


def test_reconfigure_applies_dependencies_first(engine, store):
    # OptoLoopAlignment 64 is only valid once CodeEntryAlignment is 64.
    report = engine.reconfigure(
        {"OptoLoopAlignment": 64, "CodeEntryAlignment": 64, "CompileThreshold": 10000},
    )

    assert report.ok
    assert store.get("CodeEntryAlignment") == 64
    assert store.get("OptoLoopAlignment") == 64
    assert report.result("CompileThreshold") is None
    assert report.result("CodeCacheSegmentSize") is not None
    assert report.result("InteriorEntryAlignment") is not None


def test_reconfigure_reports_rejected_values(engine, store):
    report = engine.reconfigure({"AVX3Threshold": 3000, "CompileThreshold": 5000})

    assert [v.flag for v in report.violations] == ["AVX3Threshold"]
    assert store.get("AVX3Threshold") == 4096
    assert store.get("CompileThreshold") == 5000


def test_reconfigure_rechecks_rejected_dependent(engine, store):
    store.set("CodeEntryAlignment", 64)
    store.set("OptoLoopAlignment", 64)

    report = engine.reconfigure({"CodeEntryAlignment": 32, "OptoLoopAlignment": 48})

    assert store.get("CodeEntryAlignment") == 32
    assert store.get("OptoLoopAlignment") == 64
    # The kept value 64 no longer fits the committed CodeEntryAlignment.
    latest = report.result("OptoLoopAlignment")
    assert "CodeEntryAlignment (32)" in latest.violation.message
