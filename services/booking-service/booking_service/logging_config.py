import logging

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s [booking-service] %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # sqlalchemy echo has its own switch
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
