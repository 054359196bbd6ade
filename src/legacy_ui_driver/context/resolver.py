"""Locate the browsing context that holds freshly navigated content."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, NoReturn, Optional, Sequence, Tuple

from ..browser.base import BrowserActionError, RemoteDocument, RemoteElement
from ..config import TimingConfig
from ..errors import ContextResolutionFailed, SynchronizationTimeout
from ..models import ContentTarget, ContextState, LocatorStrategy, Resolution
from ..sync.engine import SynchronizationEngine
from .diagnostics import FRAME_SELECTOR, collect_diagnostics

LOGGER = logging.getLogger(__name__)

FrameMatcher = Callable[[RemoteElement], bool]


@dataclass(frozen=True)
class _FrameMatch:
    path: Tuple[int, ...]
    src: Optional[str]


class ContextResolver:
    """Search windows and frames to find where the application rendered content.

    The application decides at runtime whether a navigation opens a new
    window, loads a frame whose id embeds a timestamp, or replaces the
    current document. Resolution therefore checks them in that order and always
    ends with an anchor check inside the chosen context.
    """

    def __init__(
        self,
        document: RemoteDocument,
        sync: SynchronizationEngine,
        timing: Optional[TimingConfig] = None,
    ) -> None:
        self._document = document
        self._sync = sync
        self._timing = timing or sync.timing
        self._state = ContextState.UNRESOLVED
        self._window_state = ContextState.MAIN_DOCUMENT
        self._baseline_handles: Optional[List[str]] = None

    @property
    def state(self) -> ContextState:
        return self._state

    def mark_trigger(self) -> None:
        """Record the open windows before an action that may open a new one."""

        self._baseline_handles = list(self._document.window_handles())
        LOGGER.debug("Recorded %d window(s) before trigger", len(self._baseline_handles))

    def return_to_root(self) -> None:
        """Re-enter the top-level document of the active window."""

        self._document.switch_to_root()
        if self._state == ContextState.FRAME_PATH:
            self._state = self._window_state

    def resolve_after_navigation_trigger(self, target: ContentTarget) -> Resolution:
        """Find and enter the context holding ``target``.

        Raises :class:`ContextResolutionFailed` when the anchor element is not
        interactable in the context the search settled on.
        """

        LOGGER.info("Resolving context for %s", target.name)
        baseline = self._baseline_handles
        if baseline is None:
            # Unmarked trigger: only windows opened from here on count as new.
            baseline = list(self._document.window_handles())
        self._baseline_handles = None
        self.return_to_root()

        popup = self._await_new_window(baseline)
        if popup is not None:
            LOGGER.info("Content opened in a new window (%s)", popup)
            self._document.switch_to_window(popup)
            self._window_state = ContextState.POPUP_WINDOW
            self._state = ContextState.POPUP_WINDOW
            self._sync.settle_after_load()
        else:
            LOGGER.debug(
                "No new window; staying in %s", self._document.current_window_handle()
            )
            self._state = self._window_state

        match = self._find_frame(target)
        if match is not None:
            LOGGER.info("Content loaded in frame %s (src=%s)", match.path, match.src)
            self._state = ContextState.FRAME_PATH
            self._sync.settle_after_load()
        else:
            LOGGER.info("No content frame found; content rendered in place")
            self.return_to_root()
            self._state = self._window_state

        self._verify_anchor(target)
        return Resolution(
            target=target.name,
            state=self._state,
            context=self._document.current_context(),
            popup_handle=popup,
            frame_src=match.src if match else None,
        )

    def enter_frame(self, target: ContentTarget) -> Resolution:
        """Enter a known content frame of the active window from its root."""

        self.return_to_root()
        match = self._find_frame(target)
        if match is None:
            self._fail(target, f"No frame matching {target.name} in the active window")
        self._state = ContextState.FRAME_PATH
        self._sync.settle_after_load()
        self._verify_anchor(target)
        return Resolution(
            target=target.name,
            state=self._state,
            context=self._document.current_context(),
            frame_src=match.src,
        )

    def _await_new_window(self, baseline: Sequence[str]) -> Optional[str]:
        def _new_handles() -> List[str]:
            return [h for h in self._document.window_handles() if h not in baseline]

        handles = self._sync.wait_until(
            _new_handles,
            self._timing.window_probe_timeout,
            description="a new window",
            critical=False,
        )
        return handles[0] if handles else None

    def _find_frame(self, target: ContentTarget) -> Optional[_FrameMatch]:
        matchers: List[FrameMatcher] = []
        if target.frame_url_fragment:
            matchers.append(_attribute_matcher("src", (target.frame_url_fragment,)))
        if target.frame_id_markers:
            matchers.append(_attribute_matcher("id", target.frame_id_markers))
        if not matchers:
            return None

        def _search() -> Optional[_FrameMatch]:
            for matcher in matchers:
                self._document.switch_to_root()
                found = self._search(matcher, (), target.max_frame_depth)
                if found is not None:
                    return found
            return None

        return self._sync.wait_until(
            _search,
            self._timing.frame_probe_timeout,
            description=f"frame for {target.name}",
            critical=False,
        )

    def _search(
        self,
        matcher: FrameMatcher,
        path: Tuple[int, ...],
        depth_left: int,
    ) -> Optional[_FrameMatch]:
        frames = self._document.query(LocatorStrategy.CSS, FRAME_SELECTOR)
        for index, element in enumerate(frames):
            if matcher(element):
                src = element.attribute("src")
                self._document.switch_to_frame(element)
                return _FrameMatch(path + (index,), src)
        if depth_left <= 1:
            return None
        for index in range(len(frames)):
            self._reenter(path)
            try:
                self._document.switch_to_frame(index)
            except BrowserActionError as exc:
                LOGGER.debug("Could not enter frame %s: %s", path + (index,), exc)
                continue
            self._sync.document_ready(self._timing.frame_settle_timeout)
            found = self._search(matcher, path + (index,), depth_left - 1)
            if found is not None:
                return found
        self._reenter(path)
        return None

    def _reenter(self, path: Tuple[int, ...]) -> None:
        self._document.switch_to_root()
        for index in path:
            self._document.switch_to_frame(index)

    def _verify_anchor(self, target: ContentTarget) -> None:
        try:
            self._sync.wait_for_element(
                target.anchor,
                interactable=True,
                timeout=self._timing.anchor_timeout,
            )
        except SynchronizationTimeout as exc:
            self._fail(target, f"Anchor {target.anchor} not interactable: {exc}", cause=exc)
        LOGGER.info("Anchor %s is interactable in %s", target.anchor, self._state.value)

    def _fail(
        self,
        target: ContentTarget,
        reason: str,
        *,
        cause: Optional[BaseException] = None,
    ) -> NoReturn:
        diagnostics = collect_diagnostics(self._document, reason)
        self._state = ContextState.UNRESOLVED
        LOGGER.error(
            "Context resolution for %s failed: %s (url=%s, windows=%d, frames=%d)",
            target.name,
            reason,
            diagnostics.url,
            diagnostics.window_count,
            len(diagnostics.frames),
        )
        raise ContextResolutionFailed(
            f"Could not resolve context for {target.name}", diagnostics
        ) from cause


def _attribute_matcher(attribute: str, fragments: Sequence[str]) -> FrameMatcher:
    def _matches(element: RemoteElement) -> bool:
        try:
            value = element.attribute(attribute)
        except BrowserActionError:
            return False
        return bool(value) and all(fragment in value for fragment in fragments)

    return _matches
