"""
CloudFront distribution configuration adapter.

The distribution config is the payload, the ETag is the concurrency
token, and UpdateDistribution's IfMatch performs the compare-and-swap.
"""

import json
import logging
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import ConflictError, NotFoundError, TransportError, ValidationError
from .base import ConfigurationService, ConfigurationState

logger = logging.getLogger(__name__)

# CloudFront is global but API calls go to us-east-1
DEFAULT_REGION = "us-east-1"

_NOT_FOUND_CODES = {"NoSuchDistribution"}
_CONFLICT_CODES = {"PreconditionFailed", "InvalidIfMatchVersion"}


class CloudFrontConfigurationService(ConfigurationService):
    """ConfigurationService backed by the CloudFront API."""

    def __init__(
        self,
        client=None,
        region: str = DEFAULT_REGION,
        connect_timeout: float = 10.0,
        read_timeout: float = 30.0,
        max_attempts: int = 3,
    ):
        self.region = region
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.max_attempts = max_attempts
        self._client = client

    @property
    def client(self):
        """Lazily created boto3 CloudFront client."""
        if self._client is None:
            self._client = boto3.client(
                "cloudfront",
                region_name=self.region,
                config=BotoConfig(
                    connect_timeout=self.connect_timeout,
                    read_timeout=self.read_timeout,
                    retries={"max_attempts": self.max_attempts, "mode": "standard"},
                ),
            )
        return self._client

    def fetch_current(self, target_id: str) -> ConfigurationState:
        try:
            response = self.client.get_distribution_config(Id=target_id)
        except ClientError as e:
            raise self._translate(e, target_id) from e
        except BotoCoreError as e:
            raise TransportError(
                f"Failed to get distribution configuration: {e}",
                target_id=target_id,
            ) from e

        payload = json.dumps(
            response["DistributionConfig"], sort_keys=True, default=str
        ).encode("utf-8")
        return ConfigurationState(payload=payload, token=response["ETag"])

    def apply_configuration(self, target_id: str, payload: bytes, token: str) -> str:
        try:
            distribution_config = json.loads(payload)
        except ValueError as e:
            raise ValidationError(
                f"Payload is not a CloudFront distribution config: {e}",
                target_id=target_id,
            ) from e

        try:
            response = self.client.update_distribution(
                Id=target_id,
                DistributionConfig=distribution_config,
                IfMatch=token,
            )
        except ClientError as e:
            raise self._translate(e, target_id) from e
        except BotoCoreError as e:
            raise TransportError(
                f"Failed to update distribution: {e}",
                target_id=target_id,
            ) from e

        logger.info("Distribution %s updated; deployment may take 5-15 minutes", target_id)
        return response["ETag"]

    def _translate(self, error: ClientError, target_id: str):
        code: Optional[str] = error.response.get("Error", {}).get("Code")
        message = error.response.get("Error", {}).get("Message", str(error))

        if code in _NOT_FOUND_CODES:
            return NotFoundError(
                f"CloudFront distribution {target_id} not found",
                target_id=target_id,
            )
        if code in _CONFLICT_CODES:
            return ConflictError(
                "Distribution configuration was modified since it was read; "
                "re-run the restore to re-fetch and re-preview",
                target_id=target_id,
            )
        return TransportError(
            f"CloudFront {code or 'error'}: {message}",
            target_id=target_id,
        )
