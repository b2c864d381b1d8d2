"""
User-visible texts sent by the bot.
"""

from flacbot.core.coordinator import SearchOutcome
from flacbot.models.track import DownloadResult, Track

WELCOME_TEXT = """
🎵 Welcome to FlacBot! 🎵

I can help you search and download high-quality FLAC music files.

📖 Commands:
• Send me any text to search for music
• /search <query> - Search for music
• /help - Show this help message

🎧 Just type the name of a song, artist, or album to get started!
""".strip()

HELP_TEXT = """
🎵 FlacBot Help 🎵

📖 Available commands:
• /start - Show welcome message
• /search <query> - Search for music
• /help - Show this help message

🔍 How to use:
1. Send me a search query (song name, artist, or album)
2. I'll show you search results with inline buttons
3. Click on a track to download it
4. I'll send you the FLAC file

💡 Tips:
• Be specific with your search terms for better results
• You can search by artist name, song title, or album
• All files are delivered in high-quality FLAC format

🎧 Example: "Bohemian Rhapsody Queen"
""".strip()

SEARCH_USAGE_TEXT = "🔍 Usage: /search <query>\nOr just send me the name of a song."
SEARCHING_TEXT = "🔍 Searching for music..."
NO_RESULTS_TEXT = "❌ No results found. Try a different search term."
SEARCH_FAILED_TEXT = "❌ An error occurred while searching. Please try again."
NEW_SEARCH_TEXT = "🔍 Send me a new search query:"
DOWNLOAD_FAILED_TEXT = "❌ Failed to download track. Please try again."
CALLBACK_ERROR_TEXT = "An error occurred. Please try again."


def format_results_text(outcome: SearchOutcome) -> str:
    return (
        f'🎵 Found {len(outcome.tracks)} results for "{outcome.query}":\n\n'
        f"{outcome.status_message}\n\n"
        "Click on a track to download:"
    )


def format_track_caption(track: Track) -> str:
    return (
        f"🎵 {track.title}\n"
        f"👤 {track.artist}\n"
        f"💿 {track.album}\n"
        f"⏱️ {track.duration_display}\n"
        f"🎧 {track.quality_display}"
    )


def format_downloading_text(track: Track) -> str:
    kind = "demo file" if track.is_fallback else "FLAC track"
    return f"⬬ Downloading {kind}: {track.title} by {track.artist}..."


def format_delivered_text(result: DownloadResult) -> str:
    track = result.track
    if result.used_fallback:
        return (
            f"✅ Demo file sent: {track.title} by {track.artist}\n"
            "🚧 This is demonstration content. Real music will be available "
            "when the catalog is accessible."
        )
    return f"✅ Successfully sent: {track.title} by {track.artist}"
