import json
import os
from copy import deepcopy
from typing import Any, Dict
import yaml

from ..core.errors import ConfigError

logging_config = {
    "level": "INFO",
    "log_to_file": False,
    "log_file_dir": "logs",
    "log_file_name": "default.log",
}

search_config = {
    "base_url": "",
    "timeout": 10.0,
    "user_agent": "searchflow/1.0",
    "proxy": None,
    "default_limit": 10,
}

fetch_config = {
    "timeout": 5.0,
    "concurrency": 8,
    "deadline": None,
    "user_agent": "searchflow/1.0",
    "proxy": None,
    "extract_text": False,
    "max_content_chars": None,
}

summary_config = {
    "enabled": False,
    "api_key": "",
    "url": "",
    "model": "",
    "max_tokens": 256,
    "timeout": 30.0,
    "max_retries": 0,
}

FULL_CONFIG = {
    "logging": logging_config,
    "search": search_config,
    "fetch": fetch_config,
    "summary": summary_config,
}


def default_config() -> Dict[str, Any]:
    return deepcopy(FULL_CONFIG)


def validate_keys(loaded: Dict[str, Any], default: Dict[str, Any], path: str = ""):
    for key, val in loaded.items():
        if key not in default:
            raise ConfigError(f"Unknown config field: '{path + key}'")
        if isinstance(val, dict) and isinstance(default[key], dict):
            validate_keys(val, default[key], path + key + ".")


def merge_config(default: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(default)
    for key, val in loaded.items():
        if isinstance(val, dict) and isinstance(default.get(key), dict):
            merged[key] = merge_config(default[key], val)
        else:
            merged[key] = val
    return merged


def load_config(path: str) -> Dict[str, Any]:
    """Load configuration from the given path

    Every key must exist in FULL_CONFIG; missing keys keep their defaults.

    Args:
        path (str): config path, JSON or YAML

    Raises:
        FileNotFoundError: when the path does not exist
        ConfigError:
        - when the root is not a JSON/YAML object
        - when the config file contains unexpected keys

    Returns:
        Dict[str, Any]: configuration dict
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        if path.endswith((".yaml", ".yml")):
            loaded = yaml.safe_load(f)
        else:
            loaded = json.load(f)

    if not isinstance(loaded, dict):
        raise ConfigError("Config file root must be a JSON/YAML object")

    validate_keys(loaded, FULL_CONFIG)

    return merge_config(FULL_CONFIG, loaded)
