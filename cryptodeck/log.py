"""log.py

Logging setup shared by the Streamlit entry-point and scripts.

Modules never configure handlers themselves – they call
``logging.getLogger(__name__)`` and rely on :func:`configure_logging` having
run once at start-up. Auth tokens and request bodies are never logged.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Level name (``DEBUG``, ``INFO``, ``WARNING``, ``ERROR``). Unknown
        names fall back to ``INFO``.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    # urllib3 logs every connection at DEBUG – too chatty for the auto-refresh loop
    logging.getLogger("urllib3").setLevel(logging.WARNING)
