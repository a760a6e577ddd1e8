"""
Centralized Logger with Rich Console
====================================
Console output via Rich, plus a per-run rotating log file.

Usage:
    from rent_reclaimer.shared.system.logging import Logger

    Logger.info("[RECLAIM] Starting reclaim scan", owner=owner, dry_run=True)
    Logger.success("[SENDER] Closed token account", sig=sig)
    Logger.warning("[DISCOVERY] Skip: could not parse token account")
    Logger.error("[RUN] Fatal")
    Logger.section("Reclaim Run")

Keyword arguments are appended to the message as key=value fields.
"""

import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.text import Text

LOG_DIR = os.getenv(
    "RECLAIMER_LOG_DIR",
    os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__)))), "logs"),
)
os.makedirs(LOG_DIR, exist_ok=True)

# Per-run session log file
_run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
log_file = os.path.join(LOG_DIR, f"reclaimer_{_run_id}.log")

handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
handler.setFormatter(formatter)

file_logger = logging.getLogger("RentReclaimer")
file_logger.setLevel(logging.INFO)
if not file_logger.handlers:
    file_logger.addHandler(handler)


# =============================================================================
# SOURCE ICONS (for visual scanning)
# =============================================================================

SOURCE_ICONS = {
    "SYSTEM": "🛸",
    "RECLAIM": "♻️",
    "DISCOVERY": "🔍",
    "SENDER": "📡",
    "RELAY": "🛰️",
    "RUN": "📋",
    "WATCH": "⏱️",
    "TG": "📣",
    "CONFIG": "⚙️",
}

_console = Console()

LEVEL_STYLES = {
    "INFO": "cyan",
    "SUCCESS": "green bold",
    "WARNING": "yellow",
    "ERROR": "red bold",
    "DEBUG": "dim",
    "CRITICAL": "red bold reverse",
    "SECTION": "magenta bold",
}

LEVEL_NUMBERS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# =============================================================================
# LOGGER CLASS
# =============================================================================

class Logger:
    """
    Centralized logger with Rich console output.

    Features:
    - Color-coded console output
    - File logging with rotation
    - Source-based icon prefixes parsed from a leading [SOURCE] tag
    - key=value structured fields
    """

    _silent_mode = False
    _console_level = logging.INFO

    @staticmethod
    def _timestamp() -> str:
        """High-precision timestamp (HH:MM:SS.ms)."""
        now = datetime.now()
        return f"{now.strftime('%H:%M:%S')}.{now.microsecond // 1000:03d}"

    @staticmethod
    def _parse_source(message: str) -> tuple:
        """Extract [SOURCE] tag from message if present."""
        stripped = message.strip()
        if stripped.startswith("[") and "]" in stripped:
            tag_end = stripped.index("]")
            source = stripped[1:tag_end].upper()
            if len(source) < 15:
                return source, stripped[tag_end + 1:].strip()
        return "SYSTEM", message

    @staticmethod
    def _with_fields(message: str, fields: dict) -> str:
        if not fields:
            return message
        rendered = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{message} | {rendered}"

    @staticmethod
    def _format_console(level: str, message: str, source: str) -> None:
        """Output to console with Rich formatting."""
        if Logger._silent_mode:
            return
        if LEVEL_NUMBERS.get(level, logging.INFO) < Logger._console_level:
            return

        ts = Logger._timestamp()
        icon = SOURCE_ICONS.get(source.upper(), "")
        msg_with_icon = f"{icon} {message}" if icon else message

        style = LEVEL_STYLES.get(level, "white")
        line = Text()
        line.append(f"{ts} ", style="dim")
        line.append(f"| {level[:8].ljust(8)} ", style=style)
        line.append(f"| {source[:10].ljust(10)} | ", style="dim")
        line.append(msg_with_icon)
        _console.print(line)

    @staticmethod
    def _log_to_file(level: str, message: str, source: str = "") -> None:
        """Write to file logger."""
        full_msg = f"[{source}] {message}" if source else message
        file_logger.log(LEVEL_NUMBERS.get(level, logging.INFO), full_msg)

    @staticmethod
    def _emit(level: str, message: str, fields: dict, prefix: str = "") -> None:
        source, msg = Logger._parse_source(message)
        msg = Logger._with_fields(f"{prefix}{msg}", fields)
        Logger._format_console(level, msg, source)
        Logger._log_to_file(level, msg, source)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @staticmethod
    def info(message: str, **fields) -> None:
        Logger._emit("INFO", message, fields)

    @staticmethod
    def success(message: str, **fields) -> None:
        Logger._emit("SUCCESS", message, fields)

    @staticmethod
    def warning(message: str, **fields) -> None:
        Logger._emit("WARNING", message, fields)

    @staticmethod
    def error(message: str, **fields) -> None:
        Logger._emit("ERROR", message, fields)

    @staticmethod
    def debug(message: str, **fields) -> None:
        source, msg = Logger._parse_source(message)
        msg = Logger._with_fields(msg, fields)
        if Logger._console_level <= logging.DEBUG:
            Logger._format_console("DEBUG", msg, source)
        Logger._log_to_file("DEBUG", msg, source)

    @staticmethod
    def critical(message: str, **fields) -> None:
        Logger._emit("CRITICAL", message, fields, prefix="🛑 ")

    @staticmethod
    def section(title: str) -> None:
        """Print a section header."""
        if not Logger._silent_mode:
            _console.print()
            _console.rule(f"[bold magenta]{title}[/]", style="dim")
        Logger._log_to_file("INFO", f"=== {title} ===", "SYSTEM")

    @staticmethod
    def set_level(level: str) -> None:
        """Set the minimum level for console and file output (e.g. 'info', 'debug')."""
        number = LEVEL_NUMBERS.get(level.upper())
        if number is None:
            number = logging.getLevelName(level.upper())
            if not isinstance(number, int):
                raise ValueError(f"Unknown log level: {level}")
        Logger._console_level = number
        file_logger.setLevel(number)

    @staticmethod
    def set_silent(silent: bool) -> None:
        """Enable/disable console output."""
        Logger._silent_mode = silent
