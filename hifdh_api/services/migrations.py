"""
Versioned migrations over stored daily logs.

Each migration takes one log record and returns the columns to update (or an
empty dict if there is nothing to change). Records carry `schemaVersion`; a
migration only ever sees records below its own version, so running the set
twice is a no-op.
"""

import logging
from typing import Any, Callable, Dict, List, Tuple

from pydantic import BaseModel

from hifdh_api.services.store import DocumentStore

logger = logging.getLogger(__name__)

# legacy column -> canonical column
LEGACY_READ_COLUMNS = {
    "sabakReadQuality": "sabakRead",
    "sabakDhorReadQuality": "sabakDhorRead",
    "dhorReadQuality": "dhorRead",
}


def canonical_read_quality(log: Dict[str, Any]) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for legacy, canonical in LEGACY_READ_COLUMNS.items():
        legacy_value = log.get(legacy)
        if legacy_value and not log.get(canonical):
            changes[canonical] = legacy_value
        if legacy_value is not None:
            changes[legacy] = None
    return changes


MIGRATIONS: List[Tuple[int, str, Callable[[Dict[str, Any]], Dict[str, Any]]]] = [
    (1, "canonical reading-quality columns", canonical_read_quality),
]


class MigrationReport(BaseModel):
    version: int
    name: str
    scanned: int = 0
    updated: int = 0


def run_migrations(store: DocumentStore, dry_run: bool = False) -> List[MigrationReport]:
    reports = []

    for version, name, migrate in MIGRATIONS:
        report = MigrationReport(version=version, name=name)
        for log in store.logs_below_version(version):
            report.scanned += 1
            changes = migrate(log)
            if changes:
                report.updated += 1
            if dry_run:
                continue
            store.update_log(log["userId"], log["dateKey"], {**changes, "schemaVersion": version})

        logger.info(
            f"Migration {version} ({name}): scanned {report.scanned}, "
            f"{'would update' if dry_run else 'updated'} {report.updated}"
        )
        reports.append(report)

    return reports
