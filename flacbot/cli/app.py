"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from flacbot import __version__
from flacbot.api.client import CatalogClient
from flacbot.bot.runner import run_bot
from flacbot.core.coordinator import SearchOutcome, WorkflowCoordinator
from flacbot.media.downloader import Downloader
from flacbot.models.config import BotConfig
from flacbot.storage.config_manager import ConfigManager, get_config_dir
from flacbot.storage.session_store import SessionStore

from .formatters import print_config, print_download_result, print_search_results

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("flacbot")

app = typer.Typer(
    name="flacbot",
    help=(
        "A Telegram bot that searches the Qobuz catalog and delivers FLAC tracks."
        " Use 'flacbot <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"

DEMO_QUERIES = ["Bohemian Rhapsody Queen", "The Beatles Abbey Road", "Daft Punk"]


def _configure_logging(ctx: typer.Context, default: str = "WARNING") -> None:
    verbose = (ctx.obj or {}).get("verbose", 0)
    log_level = default
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("flacbot").setLevel(log_level)


def _load_config(cli_options: dict | None = None, require_token: bool = False) -> BotConfig:
    return ConfigManager(CONFIG_FILE).load_config(cli_options, require_token=require_token)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """FlacBot"""
    if version:
        console.print(f"[bold]flacbot[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    ctx.obj = {"verbose": verbose}
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def run(
    ctx: typer.Context,
    quality: str | None = typer.Option(
        None,
        "-q",
        "--quality",
        help="Quality code. 1: MP3 320, 2: CD, 3: Hi-Res, 4: Hi-Res+ (default).",
    ),
    download_dir: Path | None = typer.Option(
        None, "-d", "--download-dir", help="Where files are stored before sending."
    ),
):
    """Start the Telegram bot. Requires BOT_TOKEN."""
    _configure_logging(ctx, default="INFO")
    config = _load_config(
        {"quality": quality, "download_dir": download_dir}, require_token=True
    )
    asyncio.run(run_bot(config))


@app.command()
def search(
    ctx: typer.Context,
    query: list[str] = typer.Argument(..., help="What to search for."),  # noqa: B008
    offset: int = typer.Option(0, "--offset", help="Skip this many catalog results."),
):
    """Search the catalog and print the results."""
    _configure_logging(ctx)
    config = _load_config()

    async def _search():
        async with CatalogClient(config.api_base_url, timeout=config.api_timeout) as client:
            return await client.search(" ".join(query), offset=offset)

    result = asyncio.run(_search())
    print_search_results(console, SearchOutcome.from_result(result))


@app.command()
def demo(
    ctx: typer.Context,
    queries: list[str] | None = typer.Argument(  # noqa: B008
        None, help="Queries to simulate. Defaults to three sample searches."
    ),
    keep: bool = typer.Option(
        False, "--keep", help="Keep the downloaded files instead of cleaning up."
    ),
):
    """Simulate chat interactions: search, pick the first result, download it."""
    _configure_logging(ctx)
    config = _load_config()

    async def _demo():
        client = CatalogClient(config.api_base_url, timeout=config.api_timeout)
        downloader = Downloader(timeout=config.download_timeout)
        coordinator = WorkflowCoordinator(
            client,
            SessionStore(max_age=config.session_max_age),
            config.download_dir,
            downloader=downloader,
            quality=config.quality,
        )
        try:
            for query in queries or DEMO_QUERIES:
                console.rule(f"[bold cyan]🔍 User searches for: {query}[/bold cyan]")
                outcome = await coordinator.search("demo", query)
                print_search_results(console, outcome)
                if not outcome.found:
                    continue

                track = outcome.tracks[0]
                console.print(f"⬬ User selects [cyan]{track.id}[/cyan]: {track.label}")
                result = await coordinator.select_and_download("demo", track.id)
                print_download_result(console, result)
                if not keep:
                    await coordinator.cleanup(result.local_path)
                    console.print("  [dim]🧹 File cleaned up after delivery.[/dim]")
        finally:
            await client.close()
            await downloader.close()

    console.print("[bold]🎵 FlacBot Demo - simulating Telegram interactions 🎵[/bold]\n")
    asyncio.run(_demo())
    console.print("\n[bold green]✨ Demo completed![/bold green]")


@app.command(name="config")
def show_config(ctx: typer.Context):
    """Display the effective configuration."""
    _configure_logging(ctx)
    config = _load_config()
    sources = "defaults + environment"
    if CONFIG_FILE.is_file():
        sources = f"{CONFIG_FILE} + environment"
    print_config(config, sources)
