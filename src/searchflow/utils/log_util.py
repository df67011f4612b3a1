import os
import sys
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from typing import Dict, Any


def get_logger(config: Dict, name: str = "searchflow") -> logging.Logger:
    """Get a logger for current context

    Console output goes to stderr so stdout stays clean for tool output.

    Args:
        config (Dict): configuration, reads the ``logging`` section
        name (str, optional): name of the logger. Defaults to "searchflow".

    Returns:
        logging.Logger: configured logger
    """
    logging_config = config["logging"]
    level = logging_config["level"]
    if isinstance(level, str):
        level = level.upper()
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(level)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logging_config["log_to_file"]:
        log_file_dir = logging_config["log_file_dir"]
        log_file_name = logging_config["log_file_name"]
        base, ext = os.path.splitext(log_file_name)
        if base == "default":
            log_file_name = datetime.now().strftime('%Y-%m-%d-%H-%M') + (ext or ".log")

        os.makedirs(log_file_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=os.path.join(log_file_dir, log_file_name),
            maxBytes=100*1024*1024,
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_config(logger: logging.Logger, config: Dict[str, Any], parent_key: str = "") -> None:
    """
    Log the configuration with the given logger. API keys are masked.
    """
    for key, value in config.items():
        current_key = f"{parent_key}.{key}" if parent_key else key
        if isinstance(value, dict):
            logger.info(f"{current_key}:")
            log_config(logger, value, current_key)
        elif key == "api_key" and value:
            logger.info(f"{current_key}: ***")
        else:
            logger.info(f"{current_key}: {value}")
