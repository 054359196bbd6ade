from __future__ import annotations

import pytest

from fakes import FakeClock, FakeDocument, FakeElement, FakeFrame
from legacy_ui_driver.errors import ValidationFailed
from legacy_ui_driver.models import DropdownMode, ElementLocator
from legacy_ui_driver.session import Session

OPTIONS = [("", "Selecione"), ("170", "São Paulo"), ("171", "São Paulo - Capital")]
DISPLAY = ElementLocator.css("#s2id_estado .select2-chosen")
OPTION_ROWS = ElementLocator.css(".select2-result-label")


def _widget() -> tuple[FakeFrame, FakeElement, FakeElement, FakeElement]:
    frame = FakeFrame()
    select = frame.add(
        ElementLocator.id("estado"), FakeElement(value="", options=OPTIONS, displayed=False)
    )
    display = frame.add(DISPLAY, FakeElement(text="Selecione"))

    def _open() -> None:
        for value, label in OPTIONS[1:][::-1]:
            frame.add(OPTION_ROWS, FakeElement(text=label, on_click=_chooser(value, label)))

    def _chooser(value: str, label: str):
        def _choose() -> None:
            select.set_value(value)
            display.set_text(label)

        return _choose

    container = frame.add(ElementLocator.id("s2id_estado"), FakeElement(on_click=_open))
    return frame, select, display, container


def _session(frame: FakeFrame) -> Session:
    clock = FakeClock()
    return Session(FakeDocument(frame), clock=clock.time, sleep=clock.sleep)


def test_select_by_value_updates_select_and_display() -> None:
    frame, select, display, container = _widget()
    session = _session(frame)

    result = session.dropdown.select_option("estado", value="170")

    assert result.mode == DropdownMode.VALUE
    assert result.value == "170"
    assert result.displayed_text == "São Paulo"
    assert select.value() == "170"
    assert select.dispatched == ["change"]
    assert display.text() == "São Paulo"
    assert container.events == []


def test_select_by_unknown_value_keeps_current_selection() -> None:
    frame, select, display, _ = _widget()
    select.set_value("171")
    display.set_text("São Paulo - Capital")
    session = _session(frame)

    with pytest.raises(ValidationFailed):
        session.dropdown.select_option("estado", value="999")

    assert select.value() == "171"
    assert select.dispatched == []
    assert display.text() == "São Paulo - Capital"


def test_jquery_pages_get_a_single_change_trigger() -> None:
    frame, select, _, _ = _widget()
    frame.jquery = True
    session = _session(frame)

    session.dropdown.select_option("estado", value="170")
    session.dropdown.select_option_direct("estado", "Capital")

    assert select.dispatched == ["jquery:change", "jquery:change"]


def test_select_by_text_prefers_exact_row() -> None:
    frame, select, display, container = _widget()
    session = _session(frame)

    result = session.dropdown.select_option("estado", text="São Paulo")

    assert result.mode == DropdownMode.TEXT
    assert container.events == ["scroll", "click"]
    assert select.value() == "170"
    assert result.value == "170"
    assert result.displayed_text == "São Paulo"


def test_select_by_text_without_display_checks_underlying_value() -> None:
    frame, select, display, _ = _widget()
    frame.remove(DISPLAY, display)
    session = _session(frame)

    result = session.dropdown.select_option("estado", text="Capital")

    assert result.displayed_text is None
    assert result.value == "171"


def test_select_option_requires_exactly_one_criterion() -> None:
    frame, _, _, _ = _widget()
    session = _session(frame)

    with pytest.raises(ValueError):
        session.dropdown.select_option("estado")
    with pytest.raises(ValueError):
        session.dropdown.select_option("estado", text="São Paulo", value="170")


def test_direct_selection_matches_option_text() -> None:
    frame, select, _, container = _widget()
    session = _session(frame)

    result = session.dropdown.select_option_direct("estado", "Capital")

    assert result.mode == DropdownMode.DIRECT
    assert result.value == "171"
    assert select.dispatched == ["change"]
    assert container.events == []


def test_direct_selection_lists_options_when_text_is_unknown() -> None:
    frame, _, _, _ = _widget()
    session = _session(frame)

    with pytest.raises(ValidationFailed) as excinfo:
        session.dropdown.select_option_direct("estado", "Rio de Janeiro")

    assert excinfo.value.details["available"] == [label for _, label in OPTIONS]
