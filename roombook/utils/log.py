import logging

from roombook.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    logging.basicConfig(level=config.level, format=config.format)
    # SQL echo stays off unless asked for explicitly.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
