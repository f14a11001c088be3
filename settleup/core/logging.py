import logging
from settleup.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None):
    level = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger("settleup").setLevel(level)
