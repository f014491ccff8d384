"""
Blob key layout for a target.

    <target>/backup-index.json
    <target>/snapshots/<snapshot_id>.json
    <target>/restoration-history.json
"""

from typing import Optional

from ..errors import ValidationError

INDEX_NAME = "backup-index.json"
HISTORY_NAME = "restoration-history.json"
SNAPSHOTS_DIR = "snapshots"
SNAPSHOT_SUFFIX = ".json"


def _safe_target(target_id: str) -> str:
    if not target_id or "/" in target_id or target_id in (".", ".."):
        raise ValidationError(f"Invalid target id: {target_id!r}")
    return target_id


def index_key(target_id: str) -> str:
    return f"{_safe_target(target_id)}/{INDEX_NAME}"


def history_key(target_id: str) -> str:
    return f"{_safe_target(target_id)}/{HISTORY_NAME}"


def snapshot_prefix(target_id: str) -> str:
    return f"{_safe_target(target_id)}/{SNAPSHOTS_DIR}/"


def snapshot_key(target_id: str, snapshot_id: str) -> str:
    if not snapshot_id or "/" in snapshot_id:
        raise ValidationError(f"Invalid snapshot id: {snapshot_id!r}")
    return f"{snapshot_prefix(target_id)}{snapshot_id}{SNAPSHOT_SUFFIX}"


def snapshot_id_from_key(key: str) -> Optional[str]:
    """Inverse of snapshot_key; None for keys that are not snapshot blobs."""
    name = key.rsplit("/", 1)[-1]
    if f"/{SNAPSHOTS_DIR}/" not in key or not name.endswith(SNAPSHOT_SUFFIX):
        return None
    return name[:-len(SNAPSHOT_SUFFIX)]
