from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", force=True)
    # botocore logs every request at DEBUG
    logging.getLogger("botocore").setLevel(max(numeric, logging.INFO))
    logging.getLogger("urllib3").setLevel(max(numeric, logging.WARNING))
