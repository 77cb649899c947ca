"""Tests for daily-log migrations."""

from hifdh_api.services.migrations import canonical_read_quality, run_migrations


def test_copies_legacy_value_when_canonical_missing():
    changes = canonical_read_quality({"sabakReadQuality": "Good", "dhorRead": "Poor", "dhorReadQuality": "Average"})
    assert changes == {
        "sabakRead": "Good",
        "sabakReadQuality": None,
        "dhorReadQuality": None,
    }


def test_nothing_to_change():
    assert canonical_read_quality({"sabakRead": "Good"}) == {}


def test_run_migrations_updates_and_stamps_version(fake_db, store):
    fake_db.add_log("stu-1", "2024-01-01", sabakReadQuality="Excellent")
    fake_db.add_log("stu-1", "2024-01-02", sabakRead="Good")
    fake_db.add_log("stu-1", "2024-01-03", sabakRead="Poor", schemaVersion=1)

    [report] = run_migrations(store)
    assert report.version == 1
    assert report.scanned == 2
    assert report.updated == 1

    first = fake_db.log("stu-1", "2024-01-01")
    assert first["sabakRead"] == "Excellent"
    assert first["sabakReadQuality"] is None
    assert first["schemaVersion"] == 1
    assert fake_db.log("stu-1", "2024-01-02")["schemaVersion"] == 1

    # second run finds nothing left to do
    [again] = run_migrations(store)
    assert again.scanned == 0


def test_dry_run_writes_nothing(fake_db, store):
    fake_db.add_log("stu-1", "2024-01-01", sabakReadQuality="Excellent")

    [report] = run_migrations(store, dry_run=True)
    assert report.updated == 1
    assert "sabakRead" not in fake_db.log("stu-1", "2024-01-01")
    assert ("daily_logs", "update") not in fake_db.calls
