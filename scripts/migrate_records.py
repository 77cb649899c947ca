#!/usr/bin/env python3
"""
Apply pending daily-log migrations.

Usage:
    python3 scripts/migrate_records.py [--dry-run]

Needs SUPABASE_URL and SUPABASE_SERVICE_KEY (row level security would hide
other students' logs from a normal key).
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add the parent directory to the sys.path to import hifdh_api modules
sys.path.append(str(Path(__file__).parent.parent))

from hifdh_api.errors import HifdhError
from hifdh_api.services.migrations import run_migrations
from hifdh_api.services.store import DocumentStore
from hifdh_api.services.supabase import create_supabase


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Apply pending daily-log migrations")
    parser.add_argument("--dry-run", action="store_true", help="report what would change without writing")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    try:
        store = DocumentStore(create_supabase(service=True))
        reports = run_migrations(store, dry_run=args.dry_run)
    except HifdhError as e:
        print(f"Migration failed: {e.message}", file=sys.stderr)
        return 1

    print("\n=== Migrations ===")
    for report in reports:
        verb = "would update" if args.dry_run else "updated"
        print(f"v{report.version} {report.name}: scanned {report.scanned}, {verb} {report.updated}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
