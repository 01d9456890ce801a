#!/usr/bin/env python3
"""
Create the asset kernel schema and load the configured category seeds.

Safe to run repeatedly: tables are created only if missing and seeding is
idempotent (categories match case-insensitively).

Usage:
    python3 scripts/init_db.py
    python3 scripts/init_db.py --config path/to/config.yaml --drop
"""

import argparse
import sys
from pathlib import Path
from uuid import UUID

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

SYSTEM_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000001")


def main() -> int:
    parser = argparse.ArgumentParser(description="Create tables and seed categories")
    parser.add_argument("--config", type=Path, default=None, help="configuration YAML")
    parser.add_argument("--drop", action="store_true", help="drop all tables first")
    args = parser.parse_args()

    from asset_config import get_active_config
    from asset_config.bridges import category_seeds
    from asset_kernel.db.engine import (
        create_tables,
        drop_tables,
        init_engine_from_url,
        session_scope,
    )
    from asset_kernel.logging_config import configure_logging
    from asset_kernel.services.registry_service import RegistryService

    config = get_active_config(args.config)
    configure_logging(level=config.log_level)
    init_engine_from_url(config.database.url, echo=config.database.echo)

    if args.drop:
        drop_tables()
    create_tables()

    with session_scope() as session:
        seeded = RegistryService(session).seed_categories(SYSTEM_ACTOR_ID, category_seeds(config))

    print(f"Schema ready; {len(seeded)} categories seeded")
    for category in seeded:
        print(f"  {category.name:<24} {category.kind.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
