"""Diagnostic snapshots of the remote document's window and frame layout."""

from __future__ import annotations

import logging
from typing import List, Tuple

from ..browser.base import BrowserActionError, RemoteDocument
from ..models import ContextDiagnostics, FrameInfo, InputInfo, LocatorStrategy

LOGGER = logging.getLogger(__name__)

FRAME_SELECTOR = "iframe, frame"
MAX_LISTED_INPUTS = 10
MAX_LISTED_DEPTH = 3


def describe_frames(document: RemoteDocument) -> List[FrameInfo]:
    """Return id/name/src of the frame elements in the active context."""

    frames = []
    base = document.current_context().frame_path
    for index, element in enumerate(document.query(LocatorStrategy.CSS, FRAME_SELECTOR)):
        frames.append(
            FrameInfo(
                path=base + (index,),
                id=element.attribute("id"),
                name=element.attribute("name"),
                src=element.attribute("src"),
            )
        )
    return frames


def collect_diagnostics(document: RemoteDocument, reason: str) -> ContextDiagnostics:
    """Capture the state needed to debug a failed resolution without a live session.

    Inputs of the active context are listed first; the frame tree is then
    enumerated from the window root, so the document is left at the root.
    Problems met along the way are recorded instead of raised.
    """

    snapshot = ContextDiagnostics(reason=reason)
    try:
        snapshot.context = document.current_context()
        snapshot.url = document.current_url()
        snapshot.title = document.title()
        snapshot.window_handles = document.window_handles()
    except BrowserActionError as exc:
        snapshot.errors.append(f"context: {exc}")
    try:
        for element in document.query(LocatorStrategy.CSS, "input")[:MAX_LISTED_INPUTS]:
            snapshot.inputs.append(
                InputInfo(
                    id=element.attribute("id"),
                    name=element.attribute("name"),
                    type=element.attribute("type"),
                )
            )
    except BrowserActionError as exc:
        snapshot.errors.append(f"inputs: {exc}")
    try:
        document.switch_to_root()
        _walk_frames(document, (), snapshot)
    except BrowserActionError as exc:
        snapshot.errors.append(f"frames: {exc}")
    finally:
        try:
            document.switch_to_root()
        except BrowserActionError as exc:
            snapshot.errors.append(f"root: {exc}")
    LOGGER.debug(
        "Collected diagnostics: url=%s windows=%d frames=%d",
        snapshot.url,
        snapshot.window_count,
        len(snapshot.frames),
    )
    return snapshot


def _walk_frames(
    document: RemoteDocument,
    path: Tuple[int, ...],
    snapshot: ContextDiagnostics,
) -> None:
    if len(path) >= MAX_LISTED_DEPTH:
        return
    frames = describe_frames(document)
    snapshot.frames.extend(frames)
    for info in frames:
        index = info.path[-1]
        try:
            document.switch_to_frame(index)
            _walk_frames(document, path + (index,), snapshot)
        except BrowserActionError as exc:
            snapshot.errors.append(f"frame {info.path}: {exc}")
        finally:
            _reenter(document, path)


def _reenter(document: RemoteDocument, path: Tuple[int, ...]) -> None:
    document.switch_to_root()
    for index in path:
        document.switch_to_frame(index)
