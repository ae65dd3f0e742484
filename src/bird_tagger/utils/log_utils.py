import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

def configure_logging(level: int = logging.INFO, console: Optional[Console] = None) -> None:
    """
    Configure the root logger with a Rich console handler.

    Pass the Console used for progress bars so log lines render above them.
    """
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)]
    )
    # Third-party HTTP clients are chatty at INFO
    for noisy in ("httpx", "openai", "anthropic"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger (after logging is configured).
    """
    return logging.getLogger(name)
