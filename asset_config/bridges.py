"""
Config -> Kernel Bridges.

Turn a loaded ``AssetKernelConfig`` into kernel inputs.  These live here
because the kernel must never import asset_config.

Usage:
    config = get_active_config()
    resolver = build_capability_resolver(config)
    registry.seed_categories(actor_id, category_seeds(config))
"""

from __future__ import annotations

from typing import Any

from asset_config.schema import AssetKernelConfig
from asset_kernel.domain.access import RoleCapabilityResolver
from asset_kernel.domain.lifecycle import AssetCondition, CategoryKind


def build_capability_resolver(config: AssetKernelConfig) -> RoleCapabilityResolver:
    """Role -> capabilities table from the configured role bindings."""
    return RoleCapabilityResolver(
        {binding.role: binding.capabilities for binding in config.role_bindings}
    )


def category_seeds(config: AssetKernelConfig) -> list[tuple[str, CategoryKind, str | None]]:
    """Seed tuples in the shape ``RegistryService.seed_categories`` takes."""
    return [
        (seed.name, CategoryKind(seed.kind), seed.description)
        for seed in config.category_seeds
    ]


def default_return_condition(config: AssetKernelConfig) -> AssetCondition:
    return AssetCondition(config.default_return_condition)


def ledger_settings(config: AssetKernelConfig) -> dict[str, Any]:
    """Keyword arguments for ``LedgerService`` beyond session, directory and clock."""
    return {
        "default_return_condition": default_return_condition(config),
        "max_images_per_quarter": config.condition_images_per_quarter,
    }
