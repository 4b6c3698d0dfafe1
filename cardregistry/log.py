"""Logging setup for the service and the bootstrap loader"""

import logging
import logging.config
from os import environ

from yaml import safe_load

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_FORMAT = "%(asctime)s   %(name)-30s %(levelname)-8s %(message)s"


def configure_logging() -> None:
    """Configure logging from a YAML dictConfig (LOG_CONFIG) or from plain
    environment variables (LOG_LEVEL, LOG_FORMAT, LOG_FILE, LOG_SQL).
    """
    log_config_path = environ.get("LOG_CONFIG", None)
    if log_config_path is not None:
        with open(log_config_path, "r") as f:
            logging_config = safe_load(f.read())
        logging.config.dictConfig(logging_config)
        return

    log_level = environ.get("LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {log_level}")
    log_file = environ.get("LOG_FILE", None)

    logging.basicConfig(
        level=log_level,
        format=environ.get("LOG_FORMAT", DEFAULT_FORMAT),
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file) if log_file else logging.NullHandler(),
        ],
    )
    # statements issued by the durable store are noisy, opt-in only
    if environ.get("LOG_SQL", "").lower() in ("1", "true", "yes"):
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
