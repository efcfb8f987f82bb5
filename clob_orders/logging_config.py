"""
Logging configuration for the CLOB order engine.

Every handler carries CredentialRedactionFilter so key material never
reaches log output.
"""

import copy
import logging
import logging.config
from typing import Optional

PACKAGE_LOGGER = "clob_orders"

DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "redact_credentials": {
            "()": "clob_orders.utils.redaction.CredentialRedactionFilter"
        }
    },
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "detailed": {
            "format": (
                "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d "
                "- %(message)s (%(funcName)s)"
            ),
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "standard",
            "filters": ["redact_credentials"],
            "stream": "ext://sys.stdout"
        }
    },
    "loggers": {
        PACKAGE_LOGGER: {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False
        }
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"]
    }
}


def _file_handler(filename: str, level: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filters": ["redact_credentials"],
        "filename": filename,
        "maxBytes": 10485760,  # 10MB
        "backupCount": 5
    }


def build_logging_config(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> dict:
    """
    Build a dictConfig mapping.

    Args:
        level: Package log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path; errors also go to <name>_errors.log
        json_format: Use JSON formatting

    Returns:
        Logging configuration dict
    """
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)
    package_logger = config["loggers"][PACKAGE_LOGGER]

    if level:
        package_logger["level"] = level.upper()

    if log_file:
        error_file = log_file[:-4] + "_errors.log" if log_file.endswith(".log") else log_file + ".errors"
        config["handlers"]["file"] = _file_handler(log_file, "DEBUG")
        config["handlers"]["error_file"] = _file_handler(error_file, "ERROR")
        package_logger["handlers"] += ["file", "error_file"]

    if json_format:
        for handler in config["handlers"].values():
            handler["formatter"] = "json"

    return config


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON formatting
    """
    logging.config.dictConfig(build_logging_config(level, log_file, json_format))


def setup_logging_from_settings(settings) -> None:
    """Apply log level and format from ClobOrderSettings."""
    setup_logging(level=settings.log_level, json_format=settings.log_json)


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance under the package namespace.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
