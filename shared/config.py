"""
SvcSeek Configuration Management

Loads the JSON configuration file and merges it over built-in defaults.
Getters validate their values and fall back to safe defaults so a bad
config file never aborts a run.
"""

import copy
import json
import os
from datetime import datetime
from typing import Any, Dict, Optional

from shared.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = os.path.join("conf", "config.json")

DEFAULT_CONFIG: Dict[str, Any] = {
    "directory": {
        "domain_controller": "",
        "domain": "",
        "use_ssl": False,
        "port": 389,
        "page_size": 500,
        "connect_timeout": 10
    },
    "credentials": {
        "username": "",
        "domain": "",
        "password": "",
        "hashes": ""
    },
    "connection": {
        "ping_timeout": 2,
        "rpc_timeout": 30
    },
    "services": {
        "max_concurrent_hosts": 1
    },
    "output": {
        "colors_enabled": True,
        "results_file": "ServersWithServiceAccount.txt",
        "errors_file": "ServersWithServiceAccountErrors.txt",
        "results_width": 200,
        "timestamp_format": "%Y-%m-%d %H:%M:%S"
    }
}


def get_standard_timestamp(fmt: Optional[str] = None) -> str:
    """Return the current local time formatted for report files."""
    return datetime.now().strftime(fmt or DEFAULT_CONFIG["output"]["timestamp_format"])


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _positive_int(value: Any, default: int) -> int:
    # bool is an int subclass; reject it along with floats and strings
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value if value > 0 else default


def _positive_number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value) if value > 0 else default


class SvcSeekConfig:
    """
    Configuration container for SvcSeek.

    The raw merged dictionary is exposed as ``config`` so callers and tests can
    inspect or tweak individual values.
    """

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or DEFAULT_CONFIG_PATH
        self.load_warning: Optional[str] = None
        self.config = self.load_configuration()

    def load_configuration(self) -> Dict[str, Any]:
        """Load configuration from JSON file with fallback to defaults."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                user_config = json.load(f)
        except FileNotFoundError:
            logger.debug("Configuration file %s not found, using defaults", self.config_file)
            return copy.deepcopy(DEFAULT_CONFIG)
        except json.JSONDecodeError as e:
            self.load_warning = f"Invalid JSON in {self.config_file}: {e}. Using default configuration"
            return copy.deepcopy(DEFAULT_CONFIG)
        except OSError as e:
            self.load_warning = f"Error loading configuration {self.config_file}: {e}. Using default configuration"
            return copy.deepcopy(DEFAULT_CONFIG)

        if not isinstance(user_config, dict):
            self.load_warning = f"Configuration {self.config_file} must be a JSON object. Using default configuration"
            return copy.deepcopy(DEFAULT_CONFIG)

        return _deep_merge(DEFAULT_CONFIG, user_config)

    def get(self, section: str, key: Optional[str] = None, default: Any = None) -> Any:
        """
        Get a whole section, or one key of a section.

        Args:
            section: Top-level section name
            key: Optional key inside the section
            default: Returned when the section or key is missing
        """
        section_data = self.config.get(section)
        if key is None:
            return section_data if section_data is not None else default
        if not isinstance(section_data, dict):
            return default
        return section_data.get(key, default)

    # --- Directory ----------------------------------------------------

    def get_domain_controller(self) -> str:
        return str(self.get("directory", "domain_controller", "") or "")

    def get_directory_domain(self) -> str:
        return str(self.get("directory", "domain", "") or "")

    def get_directory_use_ssl(self) -> bool:
        return bool(self.get("directory", "use_ssl", False))

    def get_directory_port(self) -> int:
        default = 636 if self.get_directory_use_ssl() else 389
        return _positive_int(self.get("directory", "port", default), default)

    def get_directory_page_size(self) -> int:
        return _positive_int(self.get("directory", "page_size", 500), 500)

    def get_directory_connect_timeout(self) -> float:
        return _positive_number(self.get("directory", "connect_timeout", 10), 10.0)

    # --- Credentials --------------------------------------------------

    def get_credentials(self) -> Dict[str, str]:
        """Return the credential block with every value coerced to str."""
        creds = self.get("credentials") or {}
        if not isinstance(creds, dict):
            creds = {}
        return {
            key: str(creds.get(key) or "")
            for key in ("username", "domain", "password", "hashes")
        }

    # --- Connection ---------------------------------------------------

    def get_ping_timeout(self) -> float:
        return _positive_number(self.get("connection", "ping_timeout", 2), 2.0)

    def get_rpc_timeout(self) -> float:
        return _positive_number(self.get("connection", "rpc_timeout", 30), 30.0)

    # --- Services -----------------------------------------------------

    def get_max_concurrent_hosts(self) -> int:
        return _positive_int(self.get("services", "max_concurrent_hosts", 1), 1)

    # --- Output -------------------------------------------------------

    def get_colors_enabled(self) -> bool:
        return bool(self.get("output", "colors_enabled", True))

    def get_results_filename(self) -> str:
        return str(self.get("output", "results_file", DEFAULT_CONFIG["output"]["results_file"]))

    def get_errors_filename(self) -> str:
        return str(self.get("output", "errors_file", DEFAULT_CONFIG["output"]["errors_file"]))

    def get_results_width(self) -> int:
        return _positive_int(self.get("output", "results_width", 200), 200)

    def get_timestamp_format(self) -> str:
        fmt = self.get("output", "timestamp_format", DEFAULT_CONFIG["output"]["timestamp_format"])
        return fmt if isinstance(fmt, str) and fmt else DEFAULT_CONFIG["output"]["timestamp_format"]


def load_config(config_file: Optional[str] = None) -> SvcSeekConfig:
    """Factory used by the CLI and workflow."""
    return SvcSeekConfig(config_file)


class ConfigurationError(Exception):
    """Raised for invalid run parameters; the run aborts before any host is contacted."""
