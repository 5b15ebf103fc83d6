"""Configuration loader for the bestseller tracker."""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

# Working directory first, then the project checkout
DEFAULT_CONFIG_PATHS = [Path("config.yaml"), Path(__file__).resolve().parent.parent / "config.yaml"]


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, searches DEFAULT_CONFIG_PATHS.

    Returns:
        Dictionary with configuration values.
    """
    # Load environment variables first
    load_dotenv()

    if config_path is None:
        for candidate in DEFAULT_CONFIG_PATHS:
            if candidate.exists():
                config_path = str(candidate)
                break

    if config_path is None or not Path(config_path).exists():
        raise FileNotFoundError("Configuration file not found. Please provide config.yaml")

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return _substitute_env_vars(config)


def _substitute_env_vars(obj: Any) -> Any:
    """Recursively substitute environment variables in config.

    Supports syntax: ${VAR_NAME} or ${VAR_NAME:default_value}
    """
    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_substitute_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return _substitute_env_string(obj)
    else:
        return obj


def _substitute_env_string(value: str) -> str:
    """Substitute environment variables in a string."""
    pattern = r'\$\{([^}]+)\}'

    def replace(match):
        var_expr = match.group(1)
        if ':' in var_expr:
            var_name, default = var_expr.split(':', 1)
            return os.getenv(var_name, default)
        else:
            return os.getenv(var_expr, match.group(0))

    return re.sub(pattern, replace, value)


def _section(config: Optional[Dict[str, Any]], key: str) -> Dict[str, Any]:
    value = (config or {}).get(key, {})
    return value if isinstance(value, dict) else {}


def get_site_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get target site configuration."""
    return _section(config, "site")


def get_browser_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get browser configuration."""
    return _section(config, "browser")


def get_delay_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get randomized delay ranges (seconds)."""
    return _section(config, "delays")


def get_discovery_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get category discovery configuration."""
    return _section(config, "discovery")


def get_scraping_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get scraping configuration."""
    return _section(config, "scraping")


def get_paths_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get persisted artifact paths."""
    paths = _section(config, "paths")
    return {
        "categories_file": paths.get("categories_file", "data/categories.json"),
        "state_file": paths.get("state_file", "data/scraper-state.json"),
    }


def get_ingestion_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get ingestion client configuration."""
    return _section(config, "ingestion")


def get_storage_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get storage configuration for the ingestion server."""
    return _section(config, "storage")


def ensure_directories(config: Dict[str, Any]):
    """Ensure all required directories exist."""
    paths = get_paths_config(config)
    Path(paths["categories_file"]).parent.mkdir(parents=True, exist_ok=True)
    Path(paths["state_file"]).parent.mkdir(parents=True, exist_ok=True)

    sqlite_path = get_storage_config(config).get("sqlite", {}).get("database_path", "data/bestsellers.db")
    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)

    log_path = _section(config, "logging").get("file", "data/logs/scraper.log")
    Path(log_path).parent.mkdir(parents=True, exist_ok=True)
