"""
Functions for formatting and displaying data in the console using Rich.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from flacbot.core.coordinator import SearchOutcome
from flacbot.models.config import BotConfig, get_quality_info
from flacbot.models.track import DownloadResult, Provenance
from flacbot.utils.formatting import format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Set BOT_TOKEN in the environment or in a .env file.",
            "• Check the values in your config.ini [flacbot] section.",
            "• Run `flacbot config` to see the effective settings.",
        ],
        "LocalIOError": [
            "• Check that the download directory exists and is writable.",
            "• Set FLACBOT_DOWNLOAD_DIR to a directory with free space.",
        ],
        "RemoteUnavailableError": [
            "• The catalog API might be temporarily unavailable.",
            "• Check your internet connection.",
            "• Point QOBUZ_BASE_URL at a reachable catalog proxy.",
        ],
        "TelegramUnauthorizedError": [
            "• The bot token was rejected by Telegram.",
            "• Create a new token with @BotFather and update BOT_TOKEN.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_search_results(console: Console, outcome: SearchOutcome) -> None:
    """Displays search results in catalog order, numbered from 1."""
    if not outcome.found:
        console.print(f"[yellow]❌ No results found for '{escape(outcome.query)}'.[/yellow]")
        return

    table = Table(title=f"🎵 Results for \"{escape(outcome.query)}\"", title_justify="left")
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Artist", style="green")
    table.add_column("Album")
    table.add_column("Length", justify="right")
    table.add_column("Quality", style="magenta")
    for i, track in enumerate(outcome.tracks, 1):
        table.add_row(
            str(i),
            track.id,
            escape(track.title),
            escape(track.artist),
            escape(track.album),
            track.duration_display,
            track.quality_display,
        )
    console.print(table)

    style = "green" if outcome.provenance is Provenance.REMOTE else "yellow"
    console.print(Panel(outcome.status_message, border_style=style, expand=False))


def print_download_result(console: Console, result: DownloadResult) -> None:
    size = result.local_path.stat().st_size if result.local_path.exists() else 0
    kind = "[yellow]placeholder[/yellow]" if result.used_fallback else "[green]audio[/green]"
    console.print(
        f"  [green]✓[/] Saved {kind} file [dim]{result.local_path}[/dim] "
        f"({format_size(size)}, strategy: {result.strategy})"
    )


def print_config(config: BotConfig, sources: str) -> None:
    """Displays the effective configuration, hiding the bot token."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    quality_info = get_quality_info(config.quality)
    table.add_row("Bot Token:", "[green]set[/green]" if config.bot_token else "[red]missing[/red]")
    table.add_row("Catalog API:", config.api_base_url)
    table.add_row("Quality:", f"({config.quality}) {quality_info['name']} → .{quality_info['ext']}")
    table.add_row("Timeouts:", f"API {config.api_timeout:g}s, download {config.download_timeout:g}s")
    table.add_row("Download Dir:", f"[dim]{config.download_dir}[/dim]")
    table.add_row(
        "Sessions:",
        f"expire after {config.session_max_age:g}s, swept every {config.sweep_interval:g}s",
    )
    table.add_row("Event Log Dir:", str(config.log_dir) if config.log_dir else "✗ Disabled")

    console.print(
        Panel(table, title=f"Configuration ([dim]{sources}[/dim])", border_style="cyan")
    )
