import logging
import os
from pathlib import Path
from typing import Optional
from logging.handlers import TimedRotatingFileHandler
from rich.logging import RichHandler

from streamwave.constants import LOG_FILENAME
from streamwave.core.console import console as console_manager


def default_log_dir() -> Path:
    xdg_state = os.environ.get("XDG_STATE_HOME")
    if xdg_state:
        return Path(xdg_state) / "streamwave" / "logs"
    return Path.home() / ".local" / "state" / "streamwave" / "logs"


def setup_logging(log_dir: Optional[str] = None, debug: bool = False, output_mode: str = "standard") -> logging.Logger:
    """Configures logging to console and rotating file.

    Args:
        log_dir: Directory for log files. If None, uses ~/.local/state/streamwave/logs
        debug: If True, set logging level to DEBUG, otherwise INFO
        output_mode: 'standard', 'verbose', 'silent'. 'silent' suppresses console output.
    """
    log_path = Path(log_dir) if log_dir else default_log_dir()

    logger = logging.getLogger("Streamwave")

    if output_mode == "silent":
        console_level = logging.CRITICAL
        file_level = logging.DEBUG  # Always log details to file
    elif debug:
        console_level = logging.DEBUG
        file_level = logging.DEBUG
    else:
        console_level = logging.INFO
        file_level = logging.INFO

    # Handlers filter; the logger itself passes everything
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if not logger.handlers:
        if output_mode != "silent":
            console_handler = RichHandler(
                console=console_manager.console,
                rich_tracebacks=True,
                markup=False,
                show_time=True,
                show_path=False
            )
            console_handler.setLevel(console_level)
            logger.addHandler(console_handler)

        try:
            log_path.mkdir(parents=True, exist_ok=True)
            file_handler = TimedRotatingFileHandler(log_path / LOG_FILENAME, when="midnight", interval=1, backupCount=30)
            file_handler.setLevel(file_level)
            file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
            logger.addHandler(file_handler)
        except OSError as e:
            # We can't log this normally as handlers aren't set up
            if output_mode != "silent":
                console_manager.console.print(
                    f"Could not create log file in {log_path}: {e}. Logging to console only.",
                    style="summary.errors", markup=False,
                )

    else:
        for handler in logger.handlers:
            if isinstance(handler, TimedRotatingFileHandler):
                handler.setLevel(file_level)
            elif isinstance(handler, logging.StreamHandler) or isinstance(handler, RichHandler):
                handler.setLevel(logging.CRITICAL if output_mode == "silent" else console_level)

    return logger
