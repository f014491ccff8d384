import json

import pytest

from confsnap.snapshot.keys import snapshot_key
from confsnap.tests.mocks import TARGET_ID


@pytest.fixture
def aged_snapshots(manager, clock):
    """Three snapshots: 40 days old, 10 days old, and fresh."""
    old = manager.create_snapshot(TARGET_ID, "old")
    clock.advance(days=30)
    middle = manager.create_snapshot(TARGET_ID, "middle")
    clock.advance(days=10)
    fresh = manager.create_snapshot(TARGET_ID, "fresh")
    return old, middle, fresh


def test_prune_deletes_only_expired(manager, store, aged_snapshots) -> None:
    old, middle, fresh = aged_snapshots

    result = manager.prune(TARGET_ID, max_age_days=30)

    assert result.deleted_ids == [old.id]
    assert result.retained_count == 2
    assert result.success
    assert snapshot_key(TARGET_ID, old.id) not in store.blobs
    assert [s.id for s in manager.list_snapshots(TARGET_ID)] == [fresh.id, middle.id]


def test_prune_twice_is_a_no_op(manager, aged_snapshots) -> None:
    manager.prune(TARGET_ID, max_age_days=5)

    again = manager.prune(TARGET_ID, max_age_days=5)

    assert again.deleted_ids == []
    assert again.retained_count == 1
    assert again.success


def test_prune_continues_past_failed_delete(manager, store, aged_snapshots) -> None:
    old, middle, fresh = aged_snapshots
    store.fail_delete.add(snapshot_key(TARGET_ID, old.id))

    result = manager.prune(TARGET_ID, max_age_days=5)

    assert result.deleted_ids == [middle.id]
    assert list(result.failures) == [old.id]
    assert not result.success
    assert result.retained_count == 2
    # Blob delete failed, so the index entry must still be there
    assert {s.id for s in manager.list_snapshots(TARGET_ID)} == {old.id, fresh.id}


def test_prune_with_already_missing_blob_removes_entry(manager, store, aged_snapshots) -> None:
    old, _, _ = aged_snapshots
    del store.blobs[snapshot_key(TARGET_ID, old.id)]

    result = manager.prune(TARGET_ID, max_age_days=30)

    assert result.deleted_ids == [old.id]
    assert manager.check_consistency(TARGET_ID).consistent


def test_prune_zero_days_removes_everything_older_than_now(manager, aged_snapshots) -> None:
    result = manager.prune(TARGET_ID, max_age_days=0)

    assert len(result.deleted_ids) == 3
    assert manager.list_snapshots(TARGET_ID) == []


def test_negative_retention_is_rejected(manager) -> None:
    with pytest.raises(ValueError):
        manager.prune(TARGET_ID, max_age_days=-1)


def test_prune_never_touches_remote(manager, remote, aged_snapshots) -> None:
    manager.prune(TARGET_ID, max_age_days=0)
    assert remote.apply_calls == []


def test_prune_with_unreadable_index_deletes_nothing(manager, store, aged_snapshots) -> None:
    store.blobs[f"{TARGET_ID}/backup-index.json"] = b"[]"

    result = manager.prune(TARGET_ID, max_age_days=0)

    assert result.deleted_ids == []
    assert result.retained_count == 0
    assert len(manager.check_consistency(TARGET_ID).orphan_blobs) == 3


def test_prune_is_not_stopped_by_path_like_index_entry(manager, store, clock) -> None:
    old = manager.create_snapshot(TARGET_ID, "old")
    key = f"{TARGET_ID}/backup-index.json"
    document = json.loads(store.blobs[key])
    document["backups"].append({"backupId": "x/y", "timestamp": "2000-01-01T00:00:00+00:00"})
    store.blobs[key] = json.dumps(document).encode("utf-8")
    clock.advance(days=100)

    result = manager.prune(TARGET_ID, max_age_days=30)

    assert result.deleted_ids == [old.id]
    assert snapshot_key(TARGET_ID, old.id) not in store.blobs
