"""
loguru setup for pattern evolution runs.

Every record carries a ``run`` tag so that interleaved output from several
runs sharing a console can be told apart; the file sink gets one log per run.
"""

from datetime import datetime, timezone
import os
import re
import sys

from loguru import logger

DEFAULT_RUN_NAME = "pattern_evolution"

_PLAIN_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[run]} | "
    "{name}:{function}:{line} | {message}"
)
_COLOR_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[run]}</magenta> | "
    "<cyan>{name}</cyan>:<yellow>{line}</yellow> | "
    "<level>{message}</level>"
)


def run_slug(name: str) -> str:
    """Reduce a seed or run name to something safe inside a file name."""
    slug = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_").lower()
    return slug or DEFAULT_RUN_NAME


def setup_logger(
    log_dir: str = "logs",
    level: str = "INFO",
    rotation: str = "50 MB",
    retention: str = "30 days",
    enable_colors: bool = True,
    run_name: str = DEFAULT_RUN_NAME,
) -> str:
    """
    Route loguru output to stderr and to a per-run rotating file.

    Args:
        log_dir: Directory for log files
        level: Minimum level for both sinks
        rotation: File rotation policy (e.g., "50 MB", "1 day")
        retention: How long rotated files are kept (e.g., "30 days")
        enable_colors: Colorize console output when stderr is a terminal
        run_name: Seed or run name; tags every record and prefixes the file name

    Returns:
        Path of the log file for this run
    """
    run = run_slug(run_name)
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"{run}_{timestamp}.log")

    logger.remove()
    logger.configure(extra={"run": run})

    colorize = enable_colors and sys.stderr.isatty()
    logger.add(
        sys.stderr,
        level=level,
        format=_COLOR_FORMAT if colorize else _PLAIN_FORMAT,
        colorize=colorize,
        diagnose=False,
    )
    logger.add(
        log_file,
        level=level,
        format=_PLAIN_FORMAT,
        rotation=rotation,
        retention=retention,
        compression="zip",
        encoding="utf-8",
        diagnose=False,
    )

    logger.debug("[setup_logger] run={} level={} file={}", run, level, log_file)
    return log_file
