"""
Structured event logging for the search and download workflow.
Events go to the standard logger as '[event] key=value' lines and, when a log
directory is configured, to a JSON-lines file as well.
"""

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import IO, Any


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable events.

    Usage:
        logger = StructuredLogger("flacbot.events")
        logger.info("download_completed",
                    owner_id=1234,
                    track_id="42",
                    strategy="remote")
    """

    def __init__(self, name: str, log_dir: Path | None = None):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
        """
        self.name = name
        self._logger = logging.getLogger(name)
        self._json_file: IO[str] | None = None
        self._context: dict[str, Any] = {
            "process_id": f"{int(time.time())}_{id(self)}",
        }

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self._json_file = open(  # noqa: SIM115
                log_dir / f"flacbot_{timestamp}.jsonl", "a", encoding="utf-8"
            )

    @property
    def json_enabled(self) -> bool:
        return self._json_file is not None and not self._json_file.closed

    def set_context(self, **kwargs: Any) -> None:
        """Set context that appears in every JSON entry."""
        self._context.update(kwargs)

    def _emit(self, level: int, event: str, **context: Any) -> None:
        parts = [f"[{event}]"] + [f"{key}={value}" for key, value in context.items()]
        self._logger.log(level, " ".join(parts))

        if not self.json_enabled:
            return
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": logging.getLevelName(level),
            "event": event,
            **self._context,
            **context,
        }
        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, ValueError) as e:
            self._logger.warning(f"JSON event logging failed: {e}")

    def debug(self, event: str, **context: Any) -> None:
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context: Any) -> None:
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context: Any) -> None:
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context: Any) -> None:
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self.json_enabled:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SearchEventLogger:
    """Specialized logger for search events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def search_completed(
        self, owner_id: Any, query: str, result_count: int, provenance: str
    ) -> None:
        self.logger.info(
            "search_completed",
            owner_id=owner_id,
            query=query,
            result_count=result_count,
            provenance=provenance,
        )

    def search_fallback(self, query: str, error: str) -> None:
        self.logger.warning("search_fallback", query=query, error=error)

    def session_expired(self, owner_id: Any, track_id: str, reason: str) -> None:
        self.logger.info(
            "session_expired", owner_id=owner_id, track_id=track_id, reason=reason
        )


class DownloadEventLogger:
    """Specialized logger for download events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def strategy_failed(self, track_id: str, strategy: str, error: str) -> None:
        self.logger.warning(
            "download_strategy_failed",
            track_id=track_id,
            strategy=strategy,
            error=error,
        )

    def download_completed(
        self,
        owner_id: Any,
        track_id: str,
        strategy: str,
        size_bytes: int,
        duration_s: float,
    ) -> None:
        self.logger.info(
            "download_completed",
            owner_id=owner_id,
            track_id=track_id,
            strategy=strategy,
            size_bytes=size_bytes,
            duration_s=round(duration_s, 2),
        )


def create_structured_logger(
    log_dir: Path | None = None,
) -> tuple[StructuredLogger, SearchEventLogger, DownloadEventLogger]:
    """
    Create all structured loggers.

    Returns:
        Tuple of (base_logger, search_logger, download_logger)
    """
    base = StructuredLogger("flacbot.events", log_dir=log_dir)
    return base, SearchEventLogger(base), DownloadEventLogger(base)
