"""Main Typer application.

Entry point: ``kamalx`` (configured via pyproject.toml console_scripts).

``kamalx deploy -d production`` runs ``kamal deploy -d production`` under
the dashboard.  Options kamalx does not know are passed through to kamal.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from kamalx import __version__
from kamalx.config import config
from kamalx.core.state import DashboardState
from kamalx.models.geometry import compute_geometry
from kamalx.monitor.surface import LiveSurface
from kamalx.runner.loop import RunLoop
from kamalx.runner.process import ProcessLineSource

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    name="kamalx",
    help="kamalx: a live terminal dashboard for Kamal deployments.",
    rich_markup_mode="rich",
    add_completion=False,
)


def configure_logging(level: str, log_file: Path | None) -> None:
    """Send kamalx logs to ``log_file``; drop them when no file is given."""
    if log_file is None:
        return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    package_logger = logging.getLogger("kamalx")
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())


def _arm_forced_exit(seconds: float) -> None:
    """Hard-exit the interpreter if a graceful stop takes too long."""
    timer = threading.Timer(seconds, os._exit, args=(1,))
    timer.daemon = True
    timer.start()


def _install_signal_handlers(run_loop: RunLoop, force_exit_seconds: float) -> None:
    if sys.platform == "win32":
        return

    def _on_signal() -> None:
        _arm_forced_exit(force_exit_seconds)
        run_loop.request_stop()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _on_signal)


async def run_dashboard(
    argv: list[str],
    *,
    blink_interval: float,
    hold_on_finish: bool,
    shutdown_grace: float,
    force_exit_seconds: float,
    progress_height: int,
    spacer_height: int,
) -> int:
    """Run ``argv`` under the full-screen dashboard and return its exit code."""
    with LiveSurface(console=console) as surface:
        width, height = surface.size
        geometry = compute_geometry(
            width, height, progress_height=progress_height, spacer_height=spacer_height
        )
        run_loop = RunLoop(
            DashboardState(geometry),
            surface,
            blink_interval=blink_interval,
            hold_on_finish=hold_on_finish,
            shutdown_grace=shutdown_grace,
        )
        _install_signal_handlers(run_loop, force_exit_seconds)
        return await run_loop.run(ProcessLineSource(argv))


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"kamalx {__version__}")
        raise typer.Exit()


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_cmd(
    kamal_args: Optional[list[str]] = typer.Argument(
        None,
        help="Arguments passed to kamal, e.g. [cyan]deploy -d production[/cyan].",
    ),
    command: str = typer.Option(
        config.command,
        "--command",
        help="Executable to run instead of kamal.",
    ),
    blink_interval: float = typer.Option(
        config.blink_interval,
        "--blink-interval",
        min=0.05,
        help="Seconds between progress cursor blinks.",
    ),
    hold: bool = typer.Option(
        config.hold_on_finish,
        "--hold/--no-hold",
        help="Keep the dashboard open after kamal exits (Ctrl+C to close).",
    ),
    log_file: Optional[Path] = typer.Option(
        config.log_file,
        "--log-file",
        help="Write kamalx logs to this file.",
    ),
    log_level: str = typer.Option(
        config.log_level,
        "--log-level",
        help="Log level for --log-file.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the kamalx version and exit.",
    ),
) -> None:
    """Run kamal with a live progress, stage history and output dashboard."""
    configure_logging(log_level, log_file)
    argv = [command, *(kamal_args or [])]
    command_line = escape(" ".join(argv))
    logger.info("Running %s", " ".join(argv))

    try:
        exit_code = asyncio.run(
            run_dashboard(
                argv,
                blink_interval=blink_interval,
                hold_on_finish=hold,
                shutdown_grace=config.shutdown_grace_seconds,
                force_exit_seconds=config.force_exit_seconds,
                progress_height=config.progress_height,
                spacer_height=config.spacer_height,
            )
        )
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(code=130)

    if exit_code == 0:
        console.print(f"[green]{command_line} finished successfully.[/green]")
    else:
        console.print(f"[bold red]{command_line} exited with status {exit_code}.[/bold red]")
    raise typer.Exit(code=exit_code)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
