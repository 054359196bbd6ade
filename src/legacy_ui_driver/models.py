"""Shared value objects used across the legacy UI driver."""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LocatorStrategy(str, enum.Enum):
    """How a selector string is interpreted by the remote document."""

    CSS = "css"
    XPATH = "xpath"
    ID = "id"


class ElementLocator(BaseModel):
    """Immutable description of how to find an element in the active context.

    A locator is never a handle: it is resolved again on every use, so no
    element reference survives a context switch or a wait.
    """

    model_config = ConfigDict(frozen=True)

    strategy: LocatorStrategy
    selector: str
    text: Optional[str] = Field(
        default=None,
        description="Only match elements whose visible text contains this value.",
    )
    description: Optional[str] = None

    @classmethod
    def css(cls, selector: str, **kwargs: object) -> "ElementLocator":
        return cls(strategy=LocatorStrategy.CSS, selector=selector, **kwargs)

    @classmethod
    def xpath(cls, selector: str, **kwargs: object) -> "ElementLocator":
        return cls(strategy=LocatorStrategy.XPATH, selector=selector, **kwargs)

    @classmethod
    def id(cls, element_id: str, **kwargs: object) -> "ElementLocator":
        return cls(strategy=LocatorStrategy.ID, selector=element_id, **kwargs)

    def with_text(self, text: str) -> "ElementLocator":
        return self.model_copy(update={"text": text})

    def __str__(self) -> str:
        label = self.description or f"{self.strategy.value}={self.selector}"
        if self.text is not None:
            return f"{label} [text~{self.text!r}]"
        return label


class BrowsingContext(BaseModel):
    """Coordinate of a window plus a (possibly nested) frame path."""

    model_config = ConfigDict(frozen=True)

    window_handle: Optional[str] = None
    frame_path: tuple[int, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.frame_path

    def __str__(self) -> str:
        path = "/".join(str(index) for index in self.frame_path) or "root"
        return f"{self.window_handle or '?'}:{path}"


class ContextState(str, enum.Enum):
    """Where the resolver last found the target content."""

    UNRESOLVED = "unresolved"
    MAIN_DOCUMENT = "main_document"
    POPUP_WINDOW = "popup_window"
    FRAME_PATH = "frame_path"


class FrameInfo(BaseModel):
    """Attributes of one frame element seen while enumerating a document."""

    path: tuple[int, ...]
    id: Optional[str] = None
    name: Optional[str] = None
    src: Optional[str] = None


class InputInfo(BaseModel):
    """Short description of an input element, used in failure payloads."""

    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None


class ContextDiagnostics(BaseModel):
    """Structured snapshot captured when context resolution fails."""

    reason: str
    url: Optional[str] = None
    title: Optional[str] = None
    context: Optional[BrowsingContext] = None
    window_handles: list[str] = Field(default_factory=list)
    frames: list[FrameInfo] = Field(default_factory=list)
    inputs: list[InputInfo] = Field(default_factory=list)
    errors: list[str] = Field(
        default_factory=list,
        description="Problems met while collecting the snapshot itself.",
    )

    @property
    def window_count(self) -> int:
        return len(self.window_handles)


class Resolution(BaseModel):
    """Result of resolving the context that holds a content target."""

    target: str
    state: ContextState
    context: BrowsingContext
    popup_handle: Optional[str] = None
    frame_src: Optional[str] = None


class StrategyFailure(BaseModel):
    """Why one physical strategy did not complete."""

    strategy: str
    error_type: str
    message: str


class ActionOutcome(BaseModel):
    """Which strategy realised a logical action, and what failed before it."""

    action: str
    strategy: str
    attempt: int
    failures: list[StrategyFailure] = Field(default_factory=list)


class SuggestionSelection(BaseModel):
    """Outcome of a typeahead selection."""

    field: str
    value: str
    match_count: int = 0
    candidates: list[str] = Field(default_factory=list)
    completion_fired: bool = False
    exact: bool = True
    already_filled: bool = False

    @property
    def ambiguous(self) -> bool:
        return self.match_count > 1


class DropdownMode(str, enum.Enum):
    """Path taken to select a composite dropdown option."""

    TEXT = "text"
    VALUE = "value"
    DIRECT = "direct"


class DropdownSelection(BaseModel):
    """Outcome of a composite dropdown selection."""

    control_id: str
    mode: DropdownMode
    value: Optional[str] = None
    displayed_text: Optional[str] = None


class ModalState(str, enum.Enum):
    ABSENT = "absent"
    VISIBLE = "visible"


class ModalOutcome(str, enum.Enum):
    NOTHING_TO_DO = "nothing_to_do"
    DISMISSED = "dismissed"


class ModalReport(BaseModel):
    """What ``detect_and_dismiss`` found and did."""

    outcome: ModalOutcome
    title: Optional[str] = None
    message: Optional[str] = None


class MenuStepMode(str, enum.Enum):
    CLICK = "click"
    HOVER = "hover"


class MenuStep(BaseModel):
    """One level of a mouse-event driven navigation menu."""

    model_config = ConfigDict(frozen=True)

    locator: ElementLocator
    mode: MenuStepMode = MenuStepMode.CLICK
    handler_attribute: Optional[str] = Field(
        default=None,
        description="Inline handler to invoke (e.g. onmouseover, onmouseup).",
    )
    reveal: Optional[ElementLocator] = Field(
        default=None,
        description="Submenu container forced visible after a hover step.",
    )


class ContentTarget(BaseModel):
    """Content the resolver should locate after a navigation trigger."""

    model_config = ConfigDict(frozen=True)

    name: str
    anchor: ElementLocator
    frame_url_fragment: Optional[str] = None
    frame_id_markers: tuple[str, ...] = ()
    max_frame_depth: int = Field(default=2, ge=1)
