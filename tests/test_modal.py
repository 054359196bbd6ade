from __future__ import annotations

import pytest

from fakes import FakeClock, FakeDocument, FakeElement, FakeFrame
from legacy_ui_driver.browser.base import BrowserActionError
from legacy_ui_driver.errors import ModalDismissFailed
from legacy_ui_driver.models import ElementLocator, ModalOutcome, ModalState
from legacy_ui_driver.session import Session

OVERLAY = ElementLocator.css(".swal2-popup.swal2-show")
CONFIRM = ElementLocator.css("button.swal2-confirm")


def _page_with_modal(*, closes: bool = True) -> tuple[FakeFrame, FakeElement, FakeElement]:
    frame = FakeFrame()
    overlay = frame.add(OVERLAY, FakeElement())
    frame.add(ElementLocator.css("#swal2-title"), FakeElement(text="Sucesso"))
    frame.add(ElementLocator.css("#swal2-html-container"), FakeElement(text="Pedido gravado"))

    def _close() -> None:
        if closes:
            overlay.displayed = False

    confirm = frame.add(CONFIRM, FakeElement(text="OK", on_click=_close))
    return frame, overlay, confirm


def _session(frame: FakeFrame) -> tuple[Session, FakeClock]:
    clock = FakeClock()
    return Session(FakeDocument(frame), clock=clock.time, sleep=clock.sleep), clock


def test_no_modal_is_nothing_to_do_within_detection_timeout() -> None:
    session, clock = _session(FakeFrame())

    report = session.modal.detect_and_dismiss()

    assert report.outcome == ModalOutcome.NOTHING_TO_DO
    assert 0 < clock.now <= session.config.timing.modal_detect_timeout
    assert session.recent_actions() == []


def test_hidden_overlay_counts_as_absent() -> None:
    frame, overlay, _ = _page_with_modal()
    overlay.rendered = False
    session, _ = _session(frame)

    assert session.modal.detect(timeout=1) == ModalState.ABSENT


def test_visible_modal_is_dismissed() -> None:
    frame, overlay, confirm = _page_with_modal()
    session, _ = _session(frame)

    report = session.modal.detect_and_dismiss()

    assert report.outcome == ModalOutcome.DISMISSED
    assert report.title == "Sucesso"
    assert report.message == "Pedido gravado"
    assert overlay.displayed is False
    assert confirm.events == ["click"]
    assert session.modal.detect(timeout=1) == ModalState.ABSENT


def test_dismiss_falls_back_to_script_click() -> None:
    frame, overlay, confirm = _page_with_modal()
    confirm.click_error = BrowserActionError("click intercepted")
    session, _ = _session(frame)

    session.modal.detect_and_dismiss()

    assert overlay.displayed is False
    assert session.recent_actions()[-1].strategy == "script-click"


def test_dismiss_uses_enter_key_as_last_resort() -> None:
    frame, _, confirm = _page_with_modal(closes=False)
    confirm.click_error = BrowserActionError("click intercepted")
    confirm.script_click_error = BrowserActionError("script blocked")
    session, _ = _session(frame)

    with pytest.raises(ModalDismissFailed):
        session.modal.dismiss()

    assert confirm.events == ["press:Enter"]


def test_overlay_that_stays_raises() -> None:
    frame, _, _ = _page_with_modal(closes=False)
    session, _ = _session(frame)

    with pytest.raises(ModalDismissFailed) as excinfo:
        session.modal.detect_and_dismiss()

    assert "cause" in excinfo.value.details
    assert isinstance(excinfo.value.__cause__, Exception)
