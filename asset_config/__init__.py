"""
asset_config -- single public entrypoint for asset kernel configuration.

Responsibility:
    ``get_active_config()`` is the only way to obtain configuration at
    runtime.  No other component reads configuration files or environment
    variables directly.

Architecture position:
    Configuration.  Sits above ``asset_kernel``; the kernel MUST NEVER
    import from ``asset_config``.  ``asset_config.bridges`` translates the
    loaded set into kernel inputs.

Environment overrides:
    ``ASSET_KERNEL_DATABASE_URL`` replaces ``database.url``.
    ``ASSET_KERNEL_LOG_LEVEL`` replaces ``log_level``.

Audit relevance:
    Every successful call emits an ``ASSET_CONFIG_TRACE`` log entry with the
    config_id, version, checksum, role count and category seed count.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from asset_config.loader import load_yaml_file, parse_config
from asset_config.schema import AssetKernelConfig, CategorySeed, DatabaseConfig, RoleBinding

_logger = logging.getLogger("asset_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

DATABASE_URL_ENV = "ASSET_KERNEL_DATABASE_URL"
LOG_LEVEL_ENV = "ASSET_KERNEL_LOG_LEVEL"


def get_active_config(path: Path | None = None) -> AssetKernelConfig:
    """
    Load, validate and return the active configuration set.

    Args:
        path: Override the YAML file.  Defaults to asset_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If validation fails.
        KeyError: If a required key is missing.
    """
    config_path = path or _DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(config_path))

    overrides = []
    database_url = os.environ.get(DATABASE_URL_ENV)
    if database_url:
        config = replace(config, database=replace(config.database, url=database_url))
        overrides.append(DATABASE_URL_ENV)
    log_level = os.environ.get(LOG_LEVEL_ENV)
    if log_level:
        config = replace(config, log_level=log_level.upper())
        overrides.append(LOG_LEVEL_ENV)

    _logger.info(
        "ASSET_CONFIG_TRACE",
        extra={
            "trace_type": "ASSET_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(config_path),
            "role_binding_count": len(config.role_bindings),
            "category_seed_count": len(config.category_seeds),
            "env_overrides": overrides,
        },
    )
    return config


__all__ = [
    "AssetKernelConfig",
    "CategorySeed",
    "DatabaseConfig",
    "RoleBinding",
    "get_active_config",
]
