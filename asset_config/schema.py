"""
Asset kernel configuration schema.

YAML is parsed into these frozen dataclasses by the loader.  The kernel
never sees them directly; ``asset_config.bridges`` turns them into kernel
inputs (capability resolver, category seeds).
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 10


@dataclass(frozen=True)
class RoleBinding:
    """Grants a role a set of capabilities (by value, e.g. "manage_assets")."""

    role: str
    capabilities: tuple[str, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class CategorySeed:
    """A category created on first start if it does not exist."""

    name: str
    kind: str = "regular"
    description: str | None = None


@dataclass(frozen=True)
class AssetKernelConfig:
    """A loaded, validated configuration set."""

    config_id: str
    version: int
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    log_level: str = "INFO"
    default_return_condition: str = "good"
    condition_images_per_quarter: int = 5
    role_bindings: tuple[RoleBinding, ...] = ()
    category_seeds: tuple[CategorySeed, ...] = ()
    checksum: str = ""
