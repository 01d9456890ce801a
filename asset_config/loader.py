"""
Configuration Loader (``asset_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into typed
``asset_config.schema`` dataclasses.  Runtime callers go through
``asset_config.get_active_config()`` instead.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unknown capability, category kind or condition  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from asset_config.schema import (
    AssetKernelConfig,
    CategorySeed,
    DatabaseConfig,
    RoleBinding,
)
from asset_kernel.domain.access import Capability
from asset_kernel.domain.lifecycle import AssetCondition, CategoryKind

_CAPABILITIES = frozenset(c.value for c in Capability)
_KINDS = frozenset(k.value for k in CategoryKind)
_CONDITIONS = frozenset(c.value for c in AssetCondition)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    return DatabaseConfig(
        url=data.get("url", "sqlite://"),
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 10)),
    )


def parse_role_binding(data: dict[str, Any]) -> RoleBinding:
    """Parse a RoleBinding.  Every capability must be a known value."""
    capabilities = tuple(data.get("capabilities", ()))
    unknown = sorted(set(capabilities) - _CAPABILITIES)
    if unknown:
        raise ValueError(f"Role {data['role']!r} grants unknown capabilities: {unknown}")
    return RoleBinding(
        role=data["role"],
        capabilities=capabilities,
        description=data.get("description"),
    )


def parse_category_seed(data: dict[str, Any]) -> CategorySeed:
    kind = data.get("kind", "regular")
    if kind not in _KINDS:
        raise ValueError(f"Category {data['name']!r} has unknown kind {kind!r}")
    return CategorySeed(
        name=data["name"],
        kind=kind,
        description=data.get("description"),
    )


def parse_config(data: dict[str, Any]) -> AssetKernelConfig:
    """
    Parse a full configuration set.

    Postconditions:
        - ``checksum`` is the SHA-256 of the canonical source data.
        - Role names and category names are unique.
    """
    condition = data.get("default_return_condition", "good")
    if condition not in _CONDITIONS:
        raise ValueError(f"Unknown default_return_condition {condition!r}")

    images_per_quarter = int(data.get("condition_images_per_quarter", 5))
    if images_per_quarter < 1:
        raise ValueError("condition_images_per_quarter must be at least 1")

    roles = tuple(parse_role_binding(r) for r in data.get("role_bindings", []))
    seen_roles = [r.role for r in roles]
    if len(seen_roles) != len(set(seen_roles)):
        raise ValueError(f"Duplicate role bindings: {sorted(seen_roles)}")

    seeds = tuple(parse_category_seed(c) for c in data.get("category_seeds", []))
    seen_names = [s.name.casefold() for s in seeds]
    if len(seen_names) != len(set(seen_names)):
        raise ValueError("Duplicate category seeds (names compare case-insensitively)")

    return AssetKernelConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        database=parse_database(data.get("database", {})),
        log_level=str(data.get("log_level", "INFO")).upper(),
        default_return_condition=condition,
        condition_images_per_quarter=images_per_quarter,
        role_bindings=roles,
        category_seeds=seeds,
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization.  Same data, same checksum."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
