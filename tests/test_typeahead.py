from __future__ import annotations

import pytest

from fakes import FakeClock, FakeDocument, FakeElement, FakeFrame
from legacy_ui_driver.config import DriverConfig, FieldPolicy, TypeaheadConfig
from legacy_ui_driver.errors import SynchronizationTimeout, ValidationFailed
from legacy_ui_driver.models import ElementLocator
from legacy_ui_driver.session import Session

ROWS = TypeaheadConfig().suggestion_rows
DESTOM = "20.746.370/0001-80 - DESTOM"


def _page(field_id: str, rows: list[str], *, typed_trigger: str = "DESTOM"):
    frame = FakeFrame()
    field = frame.add(ElementLocator.id(field_id), FakeElement(value=""))
    row_elements = [
        FakeElement(text=text, handlers={"onclick": lambda text=text: field.set_value(text)})
        for text in rows
    ]

    def _suggest(value: str) -> None:
        if value == typed_trigger:
            for element in row_elements:
                frame.add(ROWS, element)

    field.on_type = _suggest
    return frame, field, row_elements


def _session(frame: FakeFrame, config=None) -> tuple[Session, FakeDocument, FakeClock]:
    clock = FakeClock()
    document = FakeDocument(frame)
    return Session(document, config, clock=clock.time, sleep=clock.sleep), document, clock


def test_selects_full_entry_after_typing_prefix() -> None:
    frame, field, _ = _page("cliente", [DESTOM, "11.111.111/0001-11 - OUTRA"])
    session, document, clock = _session(frame)

    result = session.typeahead.select_suggestion(ElementLocator.id("cliente"), "DESTOM", DESTOM)

    assert result.value == DESTOM
    assert field.value() == DESTOM
    assert result.exact is True
    assert result.match_count == 1
    assert result.completion_fired is True
    assert [e for e in field.events if e.startswith("type:")] == [f"type:{c}" for c in "DESTOM"]
    assert clock.sleeps.count(session.config.timing.keystroke_delay) == len("DESTOM")
    assert field.dispatched == ["change", "blur"]
    assert "press:Tab" in field.events
    hooks = [script for script, _ in document.executed if "loadCustomer" in script]
    assert len(hooks) == 1


def test_field_without_completion_events() -> None:
    frame, field, _ = _page("vendedor", [DESTOM])
    session, _, _ = _session(frame)

    result = session.typeahead.select_suggestion(ElementLocator.id("vendedor"), "DESTOM", DESTOM)

    assert result.completion_fired is False
    assert field.dispatched == []
    assert "press:Tab" not in field.events


def test_field_policies_are_configurable() -> None:
    frame, field, _ = _page("transportadora", [DESTOM])
    config = DriverConfig()
    config.typeahead.field_policies = [FieldPolicy(match="transport", fire_completion=False)]
    session, _, _ = _session(frame, config)

    result = session.typeahead.select_suggestion(
        ElementLocator.id("transportadora"), "DESTOM", DESTOM
    )

    assert result.completion_fired is False
    assert session.typeahead.policy_for(ElementLocator.id("produto")).fire_completion is True


def test_already_filled_field_is_left_alone() -> None:
    frame, field, _ = _page("cliente", [DESTOM])
    field.set_value(DESTOM)
    session, _, _ = _session(frame)

    result = session.typeahead.select_suggestion(ElementLocator.id("cliente"), "DESTOM", DESTOM)

    assert result.already_filled is True
    assert field.events == []


def test_zero_matches_times_out_with_visible_rows() -> None:
    frame, _, _ = _page("cliente", ["11.111.111/0001-11 - OUTRA"])
    session, _, _ = _session(frame)

    with pytest.raises(SynchronizationTimeout) as excinfo:
        session.typeahead.select_suggestion(ElementLocator.id("cliente"), "DESTOM", DESTOM)

    assert excinfo.value.details["available"] == ["11.111.111/0001-11 - OUTRA"]
    assert excinfo.value.details["typed"] == "DESTOM"


def test_ambiguous_rows_pick_first_and_report_count() -> None:
    second = "99.999.999/0001-99 - DESTOM LTDA"
    frame, field, rows = _page("cliente", [DESTOM, second])
    session, _, _ = _session(frame)

    result = session.typeahead.select_suggestion(ElementLocator.id("cliente"), "DESTOM", "DESTOM")

    assert result.ambiguous is True
    assert result.candidates == [DESTOM, second]
    assert field.value() == DESTOM
    assert rows[1].events == []


def test_unchanged_prefix_fails_validation() -> None:
    frame, field, rows = _page("cliente", [DESTOM])
    rows[0].handlers["onclick"] = lambda: None
    session, _, _ = _session(frame)

    with pytest.raises(ValidationFailed) as excinfo:
        session.typeahead.select_suggestion(ElementLocator.id("cliente"), "DESTOM", DESTOM)

    assert excinfo.value.actual == "DESTOM"
    assert excinfo.value.expected == DESTOM


def test_empty_field_fails_validation() -> None:
    frame, field, rows = _page("cliente", [DESTOM])
    rows[0].handlers["onclick"] = lambda: field.set_value("")
    session, _, _ = _session(frame)

    with pytest.raises(ValidationFailed):
        session.typeahead.select_suggestion(ElementLocator.id("cliente"), "DESTOM", DESTOM)


def test_partial_value_is_accepted_as_inexact() -> None:
    frame, field, rows = _page("cliente", [DESTOM])
    rows[0].handlers["onclick"] = lambda: field.set_value("20.746.370/0001-80")
    session, _, _ = _session(frame)

    result = session.typeahead.select_suggestion(ElementLocator.id("cliente"), "DESTOM", DESTOM)

    assert result.exact is False
    assert result.value == "20.746.370/0001-80"
