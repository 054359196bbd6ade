"""Configuration models for the legacy UI driver."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import ElementLocator


class BrowserConfig(BaseModel):
    """Settings for the browser backend."""

    profile_path: Optional[Path] = None
    headless: bool = False
    viewport_width: int = 1280
    viewport_height: int = 720
    base_url: Optional[str] = None


class TimingConfig(BaseModel):
    """Timeouts and named settle delays, all in seconds."""

    poll_interval: float = Field(default=0.5, gt=0)
    default_timeout: float = 15.0
    document_ready_timeout: float = 15.0
    network_idle_timeout: float = 10.0
    window_probe_timeout: float = 5.0
    frame_probe_timeout: float = 5.0
    anchor_timeout: float = 30.0
    frame_settle_timeout: float = 1.0
    strategy_timeout: float = 5.0
    keystroke_delay: float = Field(
        default=0.15,
        description="Pause between typed characters; suggestions are keystroke driven.",
    )
    field_prepare_settle: float = 0.2
    suggestion_render_delay: float = 1.5
    hover_settle: float = 0.3
    click_settle: float = 1.5
    completion_event_settle: float = 0.3
    completion_fetch_delay: float = 2.0
    dropdown_open_settle: float = 0.8
    dropdown_render_delay: float = 0.5
    dropdown_selection_settle: float = 1.0
    modal_detect_timeout: float = 3.0
    modal_click_settle: float = 0.5
    menu_settle: float = 1.0


class FieldPolicy(BaseModel):
    """Completion-event rule for typeahead fields whose selector contains ``match``."""

    match: str
    fire_completion: bool = True
    hook_script: Optional[str] = Field(
        default=None,
        description="Extra script run with the field as arguments[0] when firing.",
    )


def _default_field_policies() -> list[FieldPolicy]:
    return [
        FieldPolicy(
            match="cliente",
            fire_completion=True,
            hook_script=(
                "if (typeof loadCustomer === 'function') "
                "{ loadCustomer('cliente', arguments[0]); }"
            ),
        ),
        # These fields clear themselves when they lose focus.
        FieldPolicy(match="vendedor", fire_completion=False),
        FieldPolicy(match="representante", fire_completion=False),
    ]


class TypeaheadConfig(BaseModel):
    """Settings for server-generated suggestion lists."""

    suggestion_rows: ElementLocator = Field(
        default_factory=lambda: ElementLocator.xpath(
            "//div[contains(@onclick, 'Autocomplete')]",
            description="typeahead suggestion row",
        )
    )
    field_policies: list[FieldPolicy] = Field(default_factory=_default_field_policies)
    fire_completion_by_default: bool = True


class DropdownConfig(BaseModel):
    """Selectors of the composite (Select2 style) dropdown widget."""

    container_prefix: str = "s2id_"
    option_rows_css: str = ".select2-result-label"
    display_css: str = ".select2-chosen"


class ModalConfig(BaseModel):
    """Selectors of the modal confirmation overlay (SweetAlert2 style)."""

    overlay_css: str = ".swal2-popup.swal2-show"
    confirm_css: str = "button.swal2-confirm"
    title_css: str = "#swal2-title"
    message_css: str = "#swal2-html-container"


class DriverConfig(BaseSettings):
    """Top-level configuration for a driver session."""

    model_config = SettingsConfigDict(
        env_prefix="LEGACY_UI_DRIVER_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    typeahead: TypeaheadConfig = Field(default_factory=TypeaheadConfig)
    dropdown: DropdownConfig = Field(default_factory=DropdownConfig)
    modal: ModalConfig = Field(default_factory=ModalConfig)
    action_history_size: int = Field(default=50)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> DriverConfig:
    """Build the driver configuration.

    Sources apply lowest first: field defaults, ``LEGACY_UI_DRIVER_*``
    variables (and ``env_file``), the YAML document at ``path``, then
    ``overrides``. Nested sections merge key by key, so a file that sets one
    timing value keeps the others from the environment.
    """

    explicit = _merged(_read_yaml(path) if path else {}, overrides)
    settings_kwargs: dict[str, Any] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    environment = DriverConfig(**settings_kwargs)
    if not explicit:
        return environment
    return DriverConfig.model_validate(
        _merged(environment.model_dump(mode="python"), explicit)
    )


def _read_yaml(path: Path) -> dict[str, Any]:
    document = yaml.safe_load(path.read_text(encoding="utf-8"))
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ValueError(
            f"{path} must hold a mapping of settings, not {type(document).__name__}"
        )
    return dict(document)


def _merged(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``base`` with ``updates`` laid over it, section by section."""

    result = dict(base)
    for key, value in updates.items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = _merged(current, value)
        else:
            result[key] = value
    return result
