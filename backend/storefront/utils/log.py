import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the ``storefront`` logger once; later calls only adjust the level."""
    log = logging.getLogger("storefront")
    log.setLevel(level.upper())
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(h)
    return log
