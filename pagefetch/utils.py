import json

import typer


def error(message: str) -> None:
    """Print an error message to stderr."""
    typer.echo(f"Error: {message}", err=True)


def echo_json(data: dict) -> None:
    """Print a response body as indented JSON on stdout."""
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
