"""Property-based tests for the call lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from conftest import StubExecutor
from hypothesis import given, settings
from hypothesis import strategies as st

from pytest_bastion.bastion import Bastion
from pytest_bastion.events import (
    BastionErrorEvent,
    BastionFailedEvent,
    BastionFinishedEvent,
    BastionStartedEvent,
    EventRecorder,
)
from pytest_bastion.execution.response import Response
from pytest_bastion.model import Decoded, ResponseModelConverter
from pytest_bastion.request import GeneralRequest


@dataclass
class Item:
    value: int


class ScriptedConverter(ResponseModelConverter):
    """Returns a scripted result: decline, the right type, or the wrong type."""

    def __init__(self, behaviour: str) -> None:
        self.behaviour = behaviour

    def decode(self, response, hints):
        if self.behaviour == "item":
            return Decoded(Item(response.status_code))
        if self.behaviour == "wrong":
            return Decoded("not an item")
        return None


def _unit(behaviour: str):
    def unit(status_code, model_response, model):
        if behaviour == "assertion":
            raise AssertionError("unit failed")
        if behaviour == "error":
            raise RuntimeError("unit crashed")

    return unit


converter_behaviours = st.lists(st.sampled_from(["none", "item", "wrong"]), max_size=4)
unit_behaviours = st.sampled_from(["ok", "assertion", "error"])


def _run(
    converters: list[str],
    assertions: str,
    callback: str,
    status_code: int,
    transport_fails: bool,
    suppress: bool,
) -> EventRecorder:
    recorder = EventRecorder()
    executor = StubExecutor(Response(status_code), error=RuntimeError("down") if transport_fails else None)
    bastion: Bastion[Any] = Bastion("prop", GeneralRequest.get("/items/1"), executor)
    for behaviour in converters:
        bastion.register_model_converter(ScriptedConverter(behaviour))
    bastion.register_listener(recorder)
    bastion.set_suppress_assertions(suppress)
    bastion.bind(Item).with_assertions(_unit(assertions)).then_do(_unit(callback)).call()
    return recorder


class TestLifecycleProperties:
    """Invariants that hold for every call."""

    @settings(max_examples=200)
    @given(
        converters=converter_behaviours,
        assertions=unit_behaviours,
        callback=unit_behaviours,
        status_code=st.integers(min_value=100, max_value=599),
        transport_fails=st.booleans(),
        suppress=st.booleans(),
    )
    def test_started_first_finished_last(self, converters, assertions, callback, status_code, transport_fails, suppress):
        """Test one started event leads, one finished event trails, and at most one outcome sits between."""
        events = _run(converters, assertions, callback, status_code, transport_fails, suppress).events

        assert isinstance(events[0], BastionStartedEvent)
        assert isinstance(events[-1], BastionFinishedEvent)
        assert sum(isinstance(e, BastionStartedEvent) for e in events) == 1
        assert sum(isinstance(e, BastionFinishedEvent) for e in events) == 1
        assert len(events) in (2, 3)
        assert all(isinstance(e, (BastionFailedEvent, BastionErrorEvent)) for e in events[1:-1])

    @given(
        converters=st.lists(st.sampled_from(["none", "wrong"]), max_size=4),
        assertions=unit_behaviours,
        callback=unit_behaviours,
        suppress=st.booleans(),
    )
    def test_undecodable_is_always_a_failure(self, converters, assertions, callback, suppress):
        """Test a chain that never yields the bound type fails with no model response."""
        events = _run(converters, assertions, callback, 200, False, suppress).events

        assert [type(e) for e in events] == [BastionStartedEvent, BastionFailedEvent, BastionFinishedEvent]
        assert events[1].model_response is None
        assert events[2].model_response is None

    @given(
        prefix=st.lists(st.just("none"), max_size=3),
        suffix=converter_behaviours,
        status_code=st.integers(min_value=100, max_value=599),
    )
    def test_first_item_converter_decides(self, prefix, suffix, status_code):
        """Test the first converter returning a result supplies the model."""
        events = _run([*prefix, "item", *suffix], "ok", "ok", status_code, False, False).events

        assert events[-1].model_response.model == Item(status_code)

    @given(assertions=unit_behaviours, callback=unit_behaviours)
    def test_outcome_classification(self, assertions, callback):
        """Test assertion failures are failed events and everything else is an error."""
        recorder = _run(["item"], assertions, callback, 200, False, False)

        if assertions == "assertion":
            expected = "failed"
        elif assertions == "error" or callback != "ok":
            expected = "error"
        else:
            expected = "passed"
        assert recorder.outcome == expected
