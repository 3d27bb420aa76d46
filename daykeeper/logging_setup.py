"""
Logging configuration for the command line tool
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from .config import LOG_FILENAME


class _ConsoleFilter(logging.Filter):
    """
    Keep the terminal quiet:
    - daykeeper logs at the console level
    - third party libraries (PIL) only on ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "daykeeper" or record.name.startswith("daykeeper."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: Optional[Union[str, Path]] = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler on stderr, stdout is reserved for command output
    - File handler in log_dir with everything, when log_dir is given

    Call this once, before the first log call.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    ch.addFilter(_ConsoleFilter())
    root.addHandler(ch)

    if log_dir is None:
        return

    log_dir = Path(log_dir)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / LOG_FILENAME), encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning("File logging disabled: %s", e)
        return
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.getLogger("PIL").setLevel(logging.INFO)
