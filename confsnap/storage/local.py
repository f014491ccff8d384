"""
Local filesystem blob store.

Keys map directly to paths under the root directory so backups stay
readable with plain tools (``cat backup-index.json``).
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from ..errors import TransportError
from .base import BlobStore

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Blob store backed by a directory tree."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _key_to_path(self, key: str) -> Path:
        parts = [p for p in key.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.root.joinpath(*parts)

    def put(self, key: str, data: bytes) -> None:
        path = self._key_to_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a temp file in the same directory, then rename,
            # so readers never see a half-written blob.
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise TransportError(f"Failed to write {key}: {e}") from e

    def find(self, key: str) -> Optional[bytes]:
        path = self._key_to_path(key)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise TransportError(f"Failed to read {key}: {e}") from e

    def list(self, prefix: str) -> List[str]:
        if not self.root.exists():
            return []

        keys = []
        try:
            for path in self.root.rglob("*"):
                if not path.is_file() or path.name.startswith(".tmp-"):
                    continue
                key = path.relative_to(self.root).as_posix()
                if key.startswith(prefix):
                    keys.append(key)
        except OSError as e:
            raise TransportError(f"Failed to list {prefix!r}: {e}") from e

        return sorted(keys)

    def delete(self, key: str) -> None:
        path = self._key_to_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise TransportError(f"Failed to delete {key}: {e}") from e
        logger.debug("Deleted blob %s", key)
