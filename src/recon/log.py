# SPDX-License-Identifier: MIT

import logging

from rich.logging import RichHandler


def configure_logging(level: str) -> None:
    """Route every recon logger through a single rich handler on stderr."""
    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger = logging.getLogger("recon")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
