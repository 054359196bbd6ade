from __future__ import annotations

from typer.testing import CliRunner

from fakes import FakeBrowserSession, FakeClock, FakeFrame
from legacy_ui_driver.cli import app
from legacy_ui_driver.config import DriverConfig
from legacy_ui_driver.session import Session


def _page() -> FakeFrame:
    root = FakeFrame(title="ERP")
    root.add_frame(FakeFrame(), id="menu", src="menu.php")
    return root


def _patch(monkeypatch, browser: FakeBrowserSession, load_args: dict[str, object]) -> None:
    def fake_load_config(path, *, env_file=None, **overrides):  # type: ignore[no-untyped-def]
        load_args["path"] = path
        load_args["env_file"] = env_file
        load_args["overrides"] = overrides
        return DriverConfig.model_validate({})

    def fake_build_session(config: DriverConfig) -> Session:
        clock = FakeClock()
        return Session(browser, config, clock=clock.time, sleep=clock.sleep)

    monkeypatch.setattr("legacy_ui_driver.cli.load_config", fake_load_config)
    monkeypatch.setattr("legacy_ui_driver.cli.build_session", fake_build_session)


def test_version_command() -> None:
    result = CliRunner().invoke(app, ["version"])

    assert result.exit_code == 0
    assert result.stdout.strip()


def test_inspect_prints_layout(monkeypatch, tmp_path) -> None:
    runner = CliRunner()
    config_path = tmp_path / "driver.yaml"
    config_path.write_text("timing: {}\n")
    browser = FakeBrowserSession(_page())
    load_args: dict[str, object] = {}
    _patch(monkeypatch, browser, load_args)

    result = runner.invoke(
        app,
        ["inspect", "https://erp.example/index.php", "--config", str(config_path), "--headless"],
    )

    assert result.exit_code == 0, result.stdout
    assert load_args["path"] == config_path
    assert load_args["overrides"] == {"browser": {"headless": True}}
    assert browser.started is True
    assert browser.stopped is True
    assert browser.visited == ["https://erp.example/index.php"]
    assert "https://erp.example/index.php" in result.stdout
    assert "menu.php" in result.stdout


def test_inspect_exits_non_zero_when_anchor_is_missing(monkeypatch) -> None:
    runner = CliRunner()
    browser = FakeBrowserSession(_page())
    load_args: dict[str, object] = {}
    _patch(monkeypatch, browser, load_args)

    result = runner.invoke(
        app,
        ["inspect", "https://erp.example/index.php", "--anchor-css", "#pedido"],
    )

    assert result.exit_code == 1
    assert "Error:" in result.stdout
    assert load_args["overrides"] == {}
    assert browser.stopped is True
