import logging
import sys
from functools import lru_cache
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log directory (backend/logs/)
_LOG_DIR = Path(__file__).parent.parent.parent / "logs"

# Symbols used to draw the render flow
FLOW_SYMBOLS = {
    "start": "╔",
    "node": "║",
    "arrow": "→",
    "end": "╚",
    "route": "◆",
}


def _configure_root_logger(level: LogLevel) -> None:
    """Configure the root logger with console and file handlers."""
    root = logging.getLogger()
    if root.handlers:
        return

    # Quiet noisy third-party loggers
    noisy_loggers = [
        "watchfiles",
        "watchfiles.main",
        "httpx",
        "httpcore",
        "httpcore.http11",
        "httpcore.connection",
        "hpack",
        "urllib3",
        "asyncio",
    ]
    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    # Daily rotating file handler (keeps 7 days)
    try:
        _LOG_DIR.mkdir(exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            _LOG_DIR / "riskify.log",
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        # Read-only filesystems still get console logging
        root.warning(f"File logging disabled: {e}")

    root.setLevel(level)


@lru_cache(maxsize=128)
def get_logger(name: str) -> logging.Logger:
    """
    Return a configured logger for the given module.

    Usage:
        from riskify.core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Message")
    """
    from riskify.core.config import settings

    _configure_root_logger(settings.log_level)
    return logging.getLogger(name)


class RenderLogger:
    """Flow logger for tracing a document through the renderer chain."""

    def __init__(self, component: str):
        self._logger = get_logger(f"render.{component}")
        self.component = component

    def render_start(self, document_id: str, tiers: list[str]) -> None:
        """Log the start of a render request."""
        chain = f" {FLOW_SYMBOLS['arrow']} ".join(tiers)
        self._logger.info("=" * 70)
        self._logger.info(f"{FLOW_SYMBOLS['start']}══ RENDER START ════════════════════════════════════════════════════")
        self._logger.info(f"{FLOW_SYMBOLS['node']} Document: {document_id}")
        self._logger.info(f"{FLOW_SYMBOLS['node']} Chain: {chain}")
        self._logger.info("=" * 70)

    def tier_attempt(self, backend: str, timeout: float) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['node']} [{backend.upper()}] {FLOW_SYMBOLS['arrow']} Attempting (timeout {timeout:.0f}s)")

    def tier_failed(self, backend: str, kind: str, error: str) -> None:
        """Log a tier failure that triggers fallthrough."""
        self._logger.warning(f"{FLOW_SYMBOLS['route']} FALLTHROUGH: {backend} failed ({kind}) | {error}")

    def tier_succeeded(self, backend: str, size: int) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['node']} [{backend.upper()}] {FLOW_SYMBOLS['arrow']} {size} bytes")

    def render_end(self, document_id: str, backend: str, size: int, attempts: int) -> None:
        """Log the end of a successful render with a summary."""
        self._logger.info("=" * 70)
        self._logger.info(f"{FLOW_SYMBOLS['end']}══ RENDER COMPLETE ═════════════════════════════════════════════════")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Document: {document_id}")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Backend Used: {backend}")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Attempts: {attempts}")
        self._logger.info(f"   {FLOW_SYMBOLS['route']} Size: {size} bytes")
        self._logger.info("=" * 70)

    def render_failed(self, document_id: str, failures: list[str]) -> None:
        self._logger.error(f"{FLOW_SYMBOLS['end']}══ RENDER FAILED ══ {document_id} | {len(failures)} tier(s) exhausted")
        for failure in failures:
            self._logger.error(f"   └─ {failure}")

    def error(self, node: str, error: Exception) -> None:
        self._logger.error(f"{FLOW_SYMBOLS['node']} [{node.upper()}] ERROR: {type(error).__name__}: {error}", exc_info=True)

    def debug(self, node: str, message: str) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['node']} [{node}] {message}")
