import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logger(name: str = "skyforge", level: int = logging.INFO) -> logging.Logger:
    """Returns the named logger, attaching a RichHandler on first use."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        # stderr, so --json output on stdout stays parseable
        handler = RichHandler(
            console=Console(stderr=True), rich_tracebacks=True, markup=True
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger


logger = setup_logger()
