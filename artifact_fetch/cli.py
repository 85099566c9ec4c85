"""
Command-line interface for artifact-fetch.

Downloads the newest ``<version>.zip`` from the Google Drive folder named
after the application and unpacks it into the destination directory.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from artifact_fetch.config import get_settings
from artifact_fetch.google_drive.client import create_drive_client
from artifact_fetch.models import Options
from artifact_fetch.pipeline import AUTHENTICATE, ArtifactFetcher, stage, validate_options
from artifact_fetch.utils.errors import ArtifactFetchError, InvalidOptionsError
from artifact_fetch.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="artifact-fetch",
    help="Download and unpack the latest build artifact from Google Drive",
    add_completion=False,
)
console = Console()
logger = get_logger(__name__)


@app.command()
def main(
    ctx: typer.Context,
    application: Optional[str] = typer.Option(
        None,
        "--application",
        "-a",
        help="name of the application (mandatory)",
    ),
    credentials: Optional[str] = typer.Option(
        None,
        "--credentials",
        "-c",
        help="path and name of file with google credentials (mandatory)",
    ),
    version: Optional[str] = typer.Option(
        None,
        "--version",
        "-v",
        help="version of the application (mandatory)",
    ),
    destination: str = typer.Option(
        get_settings().default_destination,
        "--destination",
        "-d",
        help="path to the destination",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write JSON logs to this file",
    ),
):
    """Fetch the latest artifact of an application version."""
    try:
        setup_logging(log_level="DEBUG" if debug else None, log_file_path=log_file)
    except OSError as e:
        console.print(f"[red]✗[/red] Failed to configure logging: {escape(str(e))}")
        raise typer.Exit(1)

    options = Options(
        destination=destination,
        application=application or "",
        version=version or "",
        credentials_file=credentials or None,
    )

    # Missing mandatory options only print usage; the exit status stays 0
    try:
        validate_options(options)
    except InvalidOptionsError as e:
        logger.debug(str(e))
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        with stage(AUTHENTICATE):
            client = create_drive_client(options.credentials_file)

        fetcher = ArtifactFetcher(client)

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            download_task = progress.add_task("Downloading artifact...", total=100)
            extract_task = progress.add_task("Unzipping artifact...", total=None, visible=False)

            def on_download(percent: float) -> None:
                progress.update(download_task, completed=percent)

            def on_extract(done: int, total: int, name: str) -> None:
                progress.update(
                    extract_task,
                    completed=done,
                    total=total,
                    visible=True,
                    description=f"Unzipping {escape(name)}",
                )

            result = fetcher.fetch(
                options,
                download_progress=on_download,
                extract_progress=on_extract,
            )

    except ArtifactFetchError as e:
        step = e.stage or "get artifact"
        console.print(f"[red]✗[/red] Failed to {step}: {escape(str(e))}")
        raise typer.Exit(1)
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        console.print(f"[red]✗[/red] Failed to get artifact: {escape(str(e))}")
        raise typer.Exit(1)

    console.print(
        f"[green]✓[/green] artifact successfully downloaded! "
        f"{escape(result.artifact.name)} ({result.artifact.id}) -> {escape(str(result.destination))}"
    )


if __name__ == "__main__":
    app()
