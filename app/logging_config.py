import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_handler: Optional[logging.Handler] = None


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single stream handler.

    Safe to call more than once; the handler installed by the first call is
    reused rather than duplicated.
    """
    global _handler

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))

    if _handler not in root.handlers:
        root.addHandler(_handler)

    # uvicorn access lines already cover every request
    logging.getLogger("uvicorn.access").propagate = False
