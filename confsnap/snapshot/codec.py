"""
Snapshot codec - snapshot <-> JSON bytes.

The payload is carried as an opaque string: UTF-8 text when it decodes
cleanly (so operators can read backups), base64 otherwise. A SHA-256 of
the raw payload is stored and checked on decode.
"""

import base64
import binascii
import hashlib
import json
from typing import Any, Dict, Optional

from ..errors import ValidationError, RestoreStep
from .models import Snapshot, format_timestamp, parse_timestamp

FORMAT_VERSION = 1

REQUIRED_FIELDS = ('backupId', 'targetId', 'payload', 'concurrencyToken')


class SnapshotCodec:
    """Serializes snapshots for the blob store."""

    def encode(self, snapshot: Snapshot) -> bytes:
        try:
            payload_text = snapshot.payload.decode("utf-8")
            encoding = "utf-8"
        except UnicodeDecodeError:
            payload_text = base64.b64encode(snapshot.payload).decode("ascii")
            encoding = "base64"

        document = {
            "formatVersion": FORMAT_VERSION,
            "backupId": snapshot.id,
            "targetId": snapshot.target_id,
            "timestamp": format_timestamp(snapshot.created_at),
            "description": snapshot.description,
            "trigger": snapshot.trigger,
            "concurrencyToken": snapshot.concurrency_token_at_capture,
            "metadata": dict(snapshot.summary_fields),
            "summaryProfile": snapshot.summary_profile,
            "payloadEncoding": encoding,
            "payloadSha256": snapshot.payload_sha256,
            "payload": payload_text,
        }
        return json.dumps(document, indent=2).encode("utf-8")

    def decode(self, data: bytes, snapshot_id: Optional[str] = None) -> Snapshot:
        """Decode and integrity-check a snapshot blob.

        Raises:
            ValidationError: blob is malformed, incomplete or corrupted
        """
        try:
            document = json.loads(data)
        except (ValueError, UnicodeDecodeError) as e:
            raise self._invalid(f"Snapshot blob is not valid JSON: {e}", snapshot_id) from e

        if not isinstance(document, dict):
            raise self._invalid("Snapshot blob is not a JSON object", snapshot_id)

        for name in REQUIRED_FIELDS:
            # payload may legitimately be empty, the rest may not
            missing = name not in document if name == "payload" else not document.get(name)
            if missing:
                raise self._invalid(f"Invalid backup data: missing {name}", snapshot_id)

        version = document.get("formatVersion", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise self._invalid(f"Unsupported snapshot format version: {version}", snapshot_id)

        payload = self._decode_payload(document, snapshot_id)

        expected_hash = document.get("payloadSha256")
        if expected_hash and hashlib.sha256(payload).hexdigest() != expected_hash:
            raise self._invalid("Snapshot payload checksum mismatch", snapshot_id)

        try:
            return Snapshot(
                id=document["backupId"],
                target_id=document["targetId"],
                created_at=parse_timestamp(document["timestamp"]),
                description=document.get("description", ""),
                payload=payload,
                concurrency_token_at_capture=document["concurrencyToken"],
                summary_fields=dict(document.get("metadata") or {}),
                trigger=document.get("trigger", "manual"),
                summary_profile=document.get("summaryProfile"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise self._invalid(f"Invalid backup data: {e}", snapshot_id) from e

    def _decode_payload(self, document: Dict[str, Any], snapshot_id: Optional[str]) -> bytes:
        text = document["payload"]
        if not isinstance(text, str):
            raise self._invalid("Snapshot payload must be a string", snapshot_id)

        encoding = document.get("payloadEncoding", "utf-8")
        if encoding == "utf-8":
            return text.encode("utf-8")
        if encoding == "base64":
            try:
                return base64.b64decode(text, validate=True)
            except binascii.Error as e:
                raise self._invalid(f"Snapshot payload is not valid base64: {e}", snapshot_id) from e
        raise self._invalid(f"Unknown payload encoding: {encoding}", snapshot_id)

    @staticmethod
    def _invalid(message: str, snapshot_id: Optional[str]) -> ValidationError:
        return ValidationError(message, step=RestoreStep.LOAD, snapshot_id=snapshot_id)
