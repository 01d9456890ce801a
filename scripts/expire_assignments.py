#!/usr/bin/env python3
"""
Close overdue temporary assignments.

Every active temporary entry whose expiry date is before the cut-off is
returned with an ``expired`` log entry, and the asset statuses are
re-derived.  Run it from cron once a day; nothing expires otherwise.

Usage:
    python3 scripts/expire_assignments.py
    python3 scripts/expire_assignments.py --as-of 2025-06-30 --dry-run
"""

import argparse
import sys
from datetime import date
from pathlib import Path
from uuid import UUID

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# Actor recorded on the log entries written by the sweep.
SYSTEM_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000001")


def main() -> int:
    parser = argparse.ArgumentParser(description="Expire overdue temporary assignments")
    parser.add_argument("--config", type=Path, default=None, help="configuration YAML")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="cut-off date (YYYY-MM-DD); defaults to today",
    )
    parser.add_argument("--actor-id", type=UUID, default=SYSTEM_ACTOR_ID)
    parser.add_argument("--dry-run", action="store_true", help="roll back instead of committing")
    args = parser.parse_args()

    from asset_config import get_active_config
    from asset_config.bridges import ledger_settings
    from asset_kernel.db.engine import get_session, init_engine_from_url
    from asset_kernel.db.immutability import register_immutability_listeners
    from asset_kernel.domain.access import AccessScope
    from asset_kernel.domain.directory import InMemoryEmployeeDirectory
    from asset_kernel.logging_config import configure_logging
    from asset_kernel.services.ledger_service import LedgerService

    config = get_active_config(args.config)
    configure_logging(level=config.log_level)
    init_engine_from_url(
        config.database.url,
        echo=config.database.echo,
        pool_size=config.database.pool_size,
    )
    register_immutability_listeners()

    session = get_session()
    try:
        # The sweep reads only the ledger; it never consults the directory.
        ledger = LedgerService(
            session,
            InMemoryEmployeeDirectory(),
            **ledger_settings(config),
        )
        expired = ledger.expire_overdue(AccessScope.system(args.actor_id), args.as_of)
        if args.dry_run:
            session.rollback()
        else:
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    verb = "Would expire" if args.dry_run else "Expired"
    print(f"{verb} {len(expired)} assignment(s)")
    for entry in expired:
        print(f"  {entry.asset_tag:<16} {entry.employee_name:<30} due {entry.expiry_date}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
