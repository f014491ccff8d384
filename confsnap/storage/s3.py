"""
S3 blob store.
"""

import logging
from typing import List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import TransportError
from .base import BlobStore

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class S3BlobStore(BlobStore):
    """Blob store backed by an S3 bucket (or S3-compatible service)."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "confsnap/",
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
        connect_timeout: float = 10.0,
        read_timeout: float = 30.0,
    ):
        self.bucket = bucket
        self.prefix = prefix
        self.region = region
        self.endpoint_url = endpoint_url
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._client = client

    @property
    def client(self):
        """Lazily created boto3 S3 client."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                config=BotoConfig(
                    connect_timeout=self.connect_timeout,
                    read_timeout=self.read_timeout,
                ),
            )
        return self._client

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def put(self, key: str, data: bytes) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=self._full_key(key),
                Body=data,
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"S3 put failed for {key}: {e}") from e

    def find(self, key: str) -> Optional[bytes]:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=self._full_key(key))
            return response["Body"].read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return None
            raise TransportError(f"S3 get failed for {key}: {e}") from e
        except BotoCoreError as e:
            raise TransportError(f"S3 get failed for {key}: {e}") from e

    def list(self, prefix: str) -> List[str]:
        keys = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=self._full_key(prefix)):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"][len(self.prefix):])
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"S3 list failed for {prefix!r}: {e}") from e
        return sorted(keys)

    def delete(self, key: str) -> None:
        # S3 DeleteObject already succeeds for missing keys
        try:
            self.client.delete_object(Bucket=self.bucket, Key=self._full_key(key))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return
            raise TransportError(f"S3 delete failed for {key}: {e}") from e
        except BotoCoreError as e:
            raise TransportError(f"S3 delete failed for {key}: {e}") from e
        logger.debug("Deleted s3://%s/%s", self.bucket, self._full_key(key))
