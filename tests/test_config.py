from pathlib import Path

import pytest

from legacy_ui_driver.config import load_config
from legacy_ui_driver.models import LocatorStrategy


def test_load_config_reads_env_file(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "LEGACY_UI_DRIVER_BROWSER__HEADLESS=true",
                "LEGACY_UI_DRIVER_TIMING__DEFAULT_TIMEOUT=20",
                "LEGACY_UI_DRIVER_MODAL__CONFIRM_CSS=button.confirm",
                "LEGACY_UI_DRIVER_ACTION_HISTORY_SIZE=10",
            ]
        )
    )

    config = load_config(env_file=env_path)

    assert config.browser.headless is True
    assert config.timing.default_timeout == 20
    assert config.modal.confirm_css == "button.confirm"
    assert config.action_history_size == 10


def test_load_config_prioritises_overrides(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "LEGACY_UI_DRIVER_TIMING__POLL_INTERVAL=0.25",
                "LEGACY_UI_DRIVER_TIMING__ANCHOR_TIMEOUT=45",
            ]
        )
    )

    config_path = tmp_path / "driver.yaml"
    config_path.write_text(
        "\n".join(
            [
                "timing:",
                "  anchor_timeout: 60",
                "  keystroke_delay: 0.3",
                "browser:",
                "  base_url: https://erp.example/sistema",
            ]
        )
    )

    config = load_config(config_path, env_file=env_path, timing={"keystroke_delay": 0.05})

    assert config.timing.anchor_timeout == 60
    assert config.timing.keystroke_delay == 0.05
    assert config.browser.base_url == "https://erp.example/sistema"
    assert config.timing.default_timeout == 15


def test_defaults_cover_widget_selectors() -> None:
    config = load_config()

    assert config.typeahead.suggestion_rows.strategy == LocatorStrategy.XPATH
    assert [policy.match for policy in config.typeahead.field_policies] == [
        "cliente",
        "vendedor",
        "representante",
    ]
    assert config.dropdown.container_prefix == "s2id_"
    assert config.modal.overlay_css == ".swal2-popup.swal2-show"


def test_field_policies_load_from_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "driver.yaml"
    config_path.write_text(
        "\n".join(
            [
                "typeahead:",
                "  field_policies:",
                "    - match: transportadora",
                "      fire_completion: false",
                "  suggestion_rows:",
                "    strategy: css",
                "    selector: div.autocomplete-row",
            ]
        )
    )

    config = load_config(config_path)

    assert len(config.typeahead.field_policies) == 1
    assert config.typeahead.field_policies[0].fire_completion is False
    assert config.typeahead.suggestion_rows.selector == "div.autocomplete-row"


def test_yaml_section_keeps_environment_siblings(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("LEGACY_UI_DRIVER_TIMING__POLL_INTERVAL=0.25\n")
    config_path = tmp_path / "driver.yaml"
    config_path.write_text("timing:\n  modal_detect_timeout: 1.5\n")

    config = load_config(config_path, env_file=env_path, modal={"confirm_css": "button.ok"})

    assert config.timing.poll_interval == 0.25
    assert config.timing.modal_detect_timeout == 1.5
    assert config.modal.confirm_css == "button.ok"
    assert config.modal.overlay_css == ".swal2-popup.swal2-show"


def test_empty_yaml_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "driver.yaml"
    config_path.write_text("")

    assert load_config(config_path).timing.poll_interval == 0.5


def test_yaml_must_be_a_mapping(tmp_path: Path) -> None:
    config_path = tmp_path / "driver.yaml"
    config_path.write_text("- headless\n- true\n")

    with pytest.raises(ValueError, match="mapping"):
        load_config(config_path)
