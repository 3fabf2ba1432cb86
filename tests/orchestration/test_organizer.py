"""
Tests for Organizer: ordered execution and global rollback.

Covers declaration (class attribute and organize()), execution order,
failure at every position of a pipeline, nested organizers sharing one
ledger, and the quiet/loud entry points.
"""

from __future__ import annotations

import pytest

from unitline import BusinessFailure, FieldSpec, MissingInput, Organizer, SharedState, Unit, before
from unitline.core.errors import OrganizerDefinitionError

from tests._support import Journal, recording_unit
from tests._support.fault_injection import install_fault


def _pipeline(journal: Journal, names: list[str]) -> type[Organizer]:
    units = tuple(recording_unit(name, journal) for name in names)
    return type("Pipeline", (Organizer,), {"organized": units})


# ---------------------------------------------------------------------------
# Declaration
# ---------------------------------------------------------------------------


class TestDeclaration:
    def test_class_attribute(self, journal):
        A = recording_unit("A", journal)

        class Flow(Organizer):
            organized = [A]

        assert Flow.organized == (A,)

    def test_organize_replaces(self, journal):
        A = recording_unit("A", journal)
        B = recording_unit("B", journal)

        class Flow(Organizer):
            organized = (A,)

        Flow.organize(B, A)
        assert Flow.organized == (B, A)
        Flow.organize([A])
        assert Flow.organized == (A,)

    def test_inherited_unless_redeclared(self, journal):
        A = recording_unit("A", journal)

        class Flow(Organizer):
            organized = (A,)

        class Variant(Flow):
            pass

        assert Variant.organized == (A,)

    def test_rejects_non_units(self):
        with pytest.raises(OrganizerDefinitionError):

            class Broken(Organizer):
                organized = (object,)

        class Flow(Organizer):
            pass

        with pytest.raises(OrganizerDefinitionError):
            Flow.organize(lambda: None)

    def test_empty_organizer_succeeds(self):
        class Empty(Organizer):
            pass

        state = Empty.call(foo=1)
        assert state.is_success()
        assert state.foo == 1


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class TestExecution:
    def test_runs_in_order_on_one_state(self, journal):
        Pipeline = _pipeline(journal, ["A", "B", "C"])
        state = Pipeline.call()

        assert journal.actions("perform") == ["A", "B", "C"]
        assert state.is_success()
        assert state.a_done and state.b_done and state.c_done
        assert [type(unit).__name__ for unit in state.ledger] == ["A", "B", "C", "Pipeline"]

    @pytest.mark.parametrize("failing", [0, 1, 2, 3])
    @pytest.mark.parametrize("kind", ["failure", "error"])
    def test_failure_at_any_position(self, journal, failing, kind):
        names = ["U0", "U1", "U2", "U3"]
        Pipeline = _pipeline(journal, names)
        install_fault(names[failing], kind=kind)

        if kind == "failure":
            state = Pipeline.call()
            assert state.is_failure()
        else:
            with pytest.raises(RuntimeError):
                Pipeline.call()

        assert journal.actions("perform") == names[: failing + 1]
        assert journal.actions("rollback") == list(reversed(names[:failing]))
        for name in names:
            assert journal.count(name, "rollback") <= 1

    def test_call_strict_raises(self, journal):
        Pipeline = _pipeline(journal, ["A", "B"])
        install_fault("B", kind="failure", message="nope")

        with pytest.raises(BusinessFailure) as exc_info:
            Pipeline.call_strict()
        assert exc_info.value.state.is_failure()
        assert journal.actions("rollback") == ["A"]

    def test_contract_violation_mid_pipeline(self, journal):
        A = recording_unit("A", journal)
        NeedsToken = recording_unit("NeedsToken", journal, inputs=(FieldSpec("token", str),))

        class Flow(Organizer):
            organized = (A, NeedsToken)

        with pytest.raises(MissingInput):
            Flow.call()

        assert journal.actions("perform") == ["A"]
        assert journal.actions("rollback") == ["A"]

    def test_organizer_hooks_wrap_whole_run(self, journal):
        A = recording_unit("A", journal)

        class Flow(Organizer):
            organized = (A,)

            @before
            def open(self):
                journal.record("Flow", "before")

        Flow.call()
        journal.assert_order([("Flow", "before"), ("A", "perform")])


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_missing_required_input_is_loud(self):
        class Greet(Unit):
            inputs = (FieldSpec("name", optional=False),)

        with pytest.raises(MissingInput):
            Greet.call({})

    def test_charge_then_ship_fails(self, journal):
        Charge = recording_unit("Charge", journal)
        Ship = recording_unit("Ship", journal)
        install_fault("Ship", kind="failure", message="out of stock")

        class Checkout(Organizer):
            organized = (Charge, Ship)

        state = Checkout.call()

        assert state.is_failure()
        assert journal.count("Charge", "rollback") == 1
        assert journal.count("Ship", "rollback") == 0

    def test_nested_organizer_unwinds_in_completion_order(self, journal):
        OuterStep = recording_unit("OuterStep", journal)
        A = recording_unit("A", journal)
        B = recording_unit("B", journal)
        install_fault("B", kind="failure")

        class InnerOrganizer(Organizer):
            organized = (A, B)

        class Outer(Organizer):
            organized = (OuterStep, InnerOrganizer)

        state = Outer.call()

        assert state.is_failure()
        assert journal.actions("perform") == ["OuterStep", "A", "B"]
        assert journal.actions("rollback") == ["A", "OuterStep"]
        assert state.ledger == ()

    def test_untouched_attributes_pass_through(self):
        class Noop(Unit):
            pass

        assert Noop.call({"foo": 1}).get("foo") == 1

    def test_rollback_twice_is_noop(self, journal):
        Pipeline = _pipeline(journal, ["A", "B"])
        state = Pipeline.call()
        assert state.rollback() is True
        assert state.rollback() is False
        assert journal.actions("rollback") == ["B", "A"]

    def test_shared_state_passed_in_is_used(self, journal):
        Pipeline = _pipeline(journal, ["A"])
        state = SharedState(seed=1)
        assert Pipeline.call_strict(state) is state
        assert state.a_done is True
