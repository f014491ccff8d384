import json
from datetime import datetime, timezone

import pytest

from confsnap.errors import RestoreStep, ValidationError
from confsnap.remote import ConfigurationState
from confsnap.snapshot import Snapshot, SnapshotCodec
from confsnap.tests.mocks import FLAG_ON, TARGET_ID, encode

CREATED = datetime(2026, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def _snapshot(payload: bytes = encode(FLAG_ON)) -> Snapshot:
    return Snapshot.create(
        target_id=TARGET_ID,
        description="Manual backup",
        state=ConfigurationState(payload=payload, token="t1"),
        summary_fields={"count": 3, "flag": 1},
        created_at=CREATED,
    )


def test_encoded_document_is_readable_json() -> None:
    snapshot = _snapshot()
    document = json.loads(SnapshotCodec().encode(snapshot))

    assert document["formatVersion"] == 1
    assert document["backupId"] == "backup-2026-01-15T10-30-00-000000Z"
    assert document["targetId"] == TARGET_ID
    assert document["concurrencyToken"] == "t1"
    assert document["payloadEncoding"] == "utf-8"
    assert json.loads(document["payload"]) == FLAG_ON
    assert document["payloadSha256"] == snapshot.payload_sha256
    assert document["metadata"] == {"count": 3, "flag": 1}


def test_binary_payload_is_base64_and_decodes_back() -> None:
    codec = SnapshotCodec()
    snapshot = _snapshot(payload=b"\xff\xfe\x00binary")

    data = codec.encode(snapshot)

    assert json.loads(data)["payloadEncoding"] == "base64"
    assert codec.decode(data) == snapshot


@pytest.mark.parametrize("field", ["backupId", "targetId", "payload", "concurrencyToken"])
def test_missing_required_field(field) -> None:
    document = json.loads(SnapshotCodec().encode(_snapshot()))
    del document[field]

    with pytest.raises(ValidationError, match=f"missing {field}") as exc_info:
        SnapshotCodec().decode(json.dumps(document).encode(), "backup-x")

    assert exc_info.value.step == RestoreStep.LOAD
    assert exc_info.value.snapshot_id == "backup-x"


def test_empty_payload_is_allowed() -> None:
    snapshot = _snapshot(payload=b"")
    codec = SnapshotCodec()
    assert codec.decode(codec.encode(snapshot)).payload == b""


@pytest.mark.parametrize("data", [b"not json", b"[1, 2]", b"\xff\xfe"])
def test_malformed_blob(data) -> None:
    with pytest.raises(ValidationError):
        SnapshotCodec().decode(data)


def test_unknown_format_version() -> None:
    document = json.loads(SnapshotCodec().encode(_snapshot()))
    document["formatVersion"] = 2

    with pytest.raises(ValidationError, match="format version"):
        SnapshotCodec().decode(json.dumps(document).encode())


def test_unknown_payload_encoding() -> None:
    document = json.loads(SnapshotCodec().encode(_snapshot()))
    document["payloadEncoding"] = "rot13"

    with pytest.raises(ValidationError, match="encoding"):
        SnapshotCodec().decode(json.dumps(document).encode())


def test_checksum_mismatch() -> None:
    document = json.loads(SnapshotCodec().encode(_snapshot()))
    document["payloadSha256"] = "0" * 64

    with pytest.raises(ValidationError, match="checksum"):
        SnapshotCodec().decode(json.dumps(document).encode())
