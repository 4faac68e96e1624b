# main.py
import asyncio
from typing import get_args

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console

from pagefetch.cli_app import app
from pagefetch.config import Backend, Settings
from pagefetch.core import AppContext, FetchError, FetchRequest
from pagefetch.renderers.browser import install_browser
from pagefetch.utils import echo_json, error

load_dotenv()

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose/debug logging"
    ),
) -> None:
    """pagefetch - fetch web pages safely through a headless browser."""
    try:
        config = Settings(verbose=True) if verbose else Settings()
    except ValidationError as e:
        error(f"Invalid configuration: {e}")
        raise typer.Exit(1)
    ctx.obj = AppContext(config=config)
    if verbose:
        ctx.obj.logger.debug("verbose_mode_enabled")


@app.command()
def fetch(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL to fetch"),
    full: bool = typer.Option(
        False, "--full", "-f", help="Return the full rendered HTML"
    ),
    debug: bool = typer.Option(
        False, "--debug", "-d", help="Include error details in the response"
    ),
    backend: str = typer.Option(
        None, "--backend", "-b", help="Renderer backend: browser or static"
    ),
) -> None:
    """
    Fetch a page and print title, meta description and first heading as JSON.

    Examples:
        pagefetch fetch https://example.com
        pagefetch fetch https://example.com --full --backend static
    """
    app_ctx: AppContext = ctx.obj

    if backend:
        if backend not in get_args(Backend):
            error(f"Unknown backend: '{backend}' (choose from {', '.join(get_args(Backend))})")
            raise typer.Exit(1)
        app_ctx = AppContext(config=app_ctx.config.model_copy(update={"backend": backend}))

    request = FetchRequest.from_flags(url, full_content=full, debug=debug)
    try:
        result = asyncio.run(app_ctx.orchestrator.fetch(request))
    except FetchError as e:
        echo_json(e.to_response(debug=debug))
        raise typer.Exit(1)

    echo_json(result.to_response())


@app.command()
def check(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL whose host to check"),
) -> None:
    """
    Check whether a URL's host is safe to fetch, without fetching it.

    Examples:
        pagefetch check https://example.com
    """
    app_ctx: AppContext = ctx.obj
    verdict = asyncio.run(app_ctx.checker.check(url))

    if not verdict:
        console.print(f"[bold red]Rejected[/bold red] {url} ({verdict.reason})")
        raise typer.Exit(1)

    console.print(f"[bold green]Allowed[/bold green] {verdict.hostname}")
    for address in verdict.addresses:
        console.print(f"  {address}")


@app.command(name="install-browser")
def install_browser_command() -> None:
    """Install the Chromium build used by the browser backend."""
    with console.status("[bold dim]Installing Chromium...[/bold dim]"):
        result = install_browser()

    if result.returncode != 0:
        error(f"Failed to install browser: {result.stderr}")
        raise typer.Exit(1)

    console.print("Chromium installed.")


if __name__ == "__main__":
    app()
