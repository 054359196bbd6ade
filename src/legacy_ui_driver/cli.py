"""Command line interface for legacy-ui-driver."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console

from .browser.base import BrowserActionError
from .config import load_config
from .context.diagnostics import collect_diagnostics
from .errors import DriverError
from .factory import build_session
from .models import ContentTarget, ElementLocator

app = typer.Typer(help="Legacy UI driver entry point")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("legacy-ui-driver"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def inspect(
    url: Annotated[str, typer.Argument(help="Page to open.")],
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to YAML configuration."),
    ] = None,
    env_file: Annotated[
        Optional[Path],
        typer.Option(
            "--env-file",
            help="Path to an .env file with default configuration values.",
        ),
    ] = None,
    headless: Annotated[
        Optional[bool],
        typer.Option("--headless/--headed", help="Run the browser in headless mode (or headed)."),
    ] = None,
    frame_fragment: Annotated[
        Optional[str],
        typer.Option("--frame-fragment", help="Resolve the frame whose src contains this text."),
    ] = None,
    anchor_css: Annotated[
        Optional[str],
        typer.Option("--anchor-css", help="Element that proves the content is ready."),
    ] = None,
) -> None:
    """Open a page and print its window and frame layout as JSON."""

    overrides: dict[str, Any] = {}
    if headless is not None:
        overrides["browser"] = {"headless": headless}
    config = load_config(config_path, env_file=env_file, **overrides)
    console = Console()

    session = build_session(config)
    try:
        with session:
            session.open(url)
            if anchor_css:
                target = ContentTarget(
                    name=url,
                    anchor=ElementLocator.css(anchor_css),
                    frame_url_fragment=frame_fragment,
                )
                resolution = session.resolver.resolve_after_navigation_trigger(target)
                console.print(
                    f"Resolved {resolution.state.value} at {resolution.context}", style="green"
                )
            diagnostics = collect_diagnostics(session.document, "inspect")
    except (DriverError, BrowserActionError) as exc:
        console.print(f"Error: {exc}", style="red", markup=False)
        details = getattr(exc, "details", None)
        if details:
            console.print_json(data=details)
        raise typer.Exit(code=1) from exc
    console.print_json(diagnostics.model_dump_json())


if __name__ == "__main__":
    app()
