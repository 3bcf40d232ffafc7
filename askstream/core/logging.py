# one stream handler for the "askstream" logger tree
# modules log through logging.getLogger(__name__) and inherit this setup

import logging

logger = logging.getLogger("askstream")

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    # clear first so repeated create_app() calls don't stack handlers
    logger.handlers.clear()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
