"""YAML configuration loader with environment variable overrides.

Layers, later overriding earlier:

  1. ``config/config.yaml``  static defaults checked into the repo
  2. ``.env`` file           local developer overrides
  3. environment variables   set at deploy time

``load_config()`` reads the YAML file, then deep-merges the Settings-backed
values on top.
"""

from pathlib import Path

import yaml

from reform_hub.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge; a fresh one is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "store": {
            "endpoint": settings.weaviate_endpoint,
            "collection": settings.weaviate_collection,
            "contribution_collection": settings.contribution_collection,
            "timeout": settings.store_timeout,
        },
        "facets": {
            "cache_ttl": settings.facet_cache_ttl,
            "sample_size": settings.facet_sample_size,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
