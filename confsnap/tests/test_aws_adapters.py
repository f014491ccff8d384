import io
import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, ReadTimeoutError

from confsnap.errors import ConflictError, NotFoundError, TransportError, ValidationError
from confsnap.remote import CloudFrontConfigurationService
from confsnap.storage import S3BlobStore
from confsnap.tests.mocks import BASE_DISTRIBUTION_CONFIG, DISTRIBUTION_ID


def _client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} happened"}}, operation)


# =============================================================================
# CloudFront
# =============================================================================

def test_fetch_returns_config_and_etag() -> None:
    client = MagicMock()
    client.get_distribution_config.return_value = {
        "DistributionConfig": BASE_DISTRIBUTION_CONFIG,
        "ETag": "E1ABC",
    }
    service = CloudFrontConfigurationService(client=client)

    state = service.fetch_current(DISTRIBUTION_ID)

    client.get_distribution_config.assert_called_once_with(Id=DISTRIBUTION_ID)
    assert state.token == "E1ABC"
    assert json.loads(state.payload) == BASE_DISTRIBUTION_CONFIG


def test_apply_passes_token_as_if_match() -> None:
    client = MagicMock()
    client.update_distribution.return_value = {"ETag": "E2DEF"}
    service = CloudFrontConfigurationService(client=client)
    payload = json.dumps(BASE_DISTRIBUTION_CONFIG).encode()

    new_token = service.apply_configuration(DISTRIBUTION_ID, payload, "E1ABC")

    assert new_token == "E2DEF"
    client.update_distribution.assert_called_once_with(
        Id=DISTRIBUTION_ID,
        DistributionConfig=BASE_DISTRIBUTION_CONFIG,
        IfMatch="E1ABC",
    )


@pytest.mark.parametrize("code", ["PreconditionFailed", "InvalidIfMatchVersion"])
def test_stale_etag_is_conflict(code) -> None:
    client = MagicMock()
    client.update_distribution.side_effect = _client_error(code, "UpdateDistribution")
    service = CloudFrontConfigurationService(client=client)

    with pytest.raises(ConflictError) as exc_info:
        service.apply_configuration(DISTRIBUTION_ID, b"{}", "E1ABC")

    assert exc_info.value.target_id == DISTRIBUTION_ID
    assert client.update_distribution.call_count == 1


def test_unknown_distribution_is_not_found() -> None:
    client = MagicMock()
    client.get_distribution_config.side_effect = _client_error("NoSuchDistribution")
    service = CloudFrontConfigurationService(client=client)

    with pytest.raises(NotFoundError):
        service.fetch_current("EMISSING")


def test_other_client_errors_are_transport() -> None:
    client = MagicMock()
    client.get_distribution_config.side_effect = _client_error("AccessDenied")
    service = CloudFrontConfigurationService(client=client)

    with pytest.raises(TransportError, match="AccessDenied"):
        service.fetch_current(DISTRIBUTION_ID)


def test_timeouts_are_transport() -> None:
    client = MagicMock()
    client.get_distribution_config.side_effect = ReadTimeoutError(endpoint_url="https://cloudfront.amazonaws.com")
    client.update_distribution.side_effect = EndpointConnectionError(endpoint_url="https://cloudfront.amazonaws.com")
    service = CloudFrontConfigurationService(client=client)

    with pytest.raises(TransportError):
        service.fetch_current(DISTRIBUTION_ID)
    with pytest.raises(TransportError):
        service.apply_configuration(DISTRIBUTION_ID, b"{}", "E1ABC")


def test_non_json_payload_is_rejected_before_calling_api() -> None:
    client = MagicMock()
    service = CloudFrontConfigurationService(client=client)

    with pytest.raises(ValidationError):
        service.apply_configuration(DISTRIBUTION_ID, b"\x00not json", "E1ABC")

    client.update_distribution.assert_not_called()


# =============================================================================
# S3
# =============================================================================

def test_s3_put_prefixes_keys() -> None:
    client = MagicMock()
    store = S3BlobStore("backups", prefix="confsnap/", client=client)

    store.put("dist-1/backup-index.json", b"{}")

    client.put_object.assert_called_once_with(
        Bucket="backups",
        Key="confsnap/dist-1/backup-index.json",
        Body=b"{}",
        ContentType="application/json",
    )


def test_s3_find() -> None:
    client = MagicMock()
    client.get_object.return_value = {"Body": io.BytesIO(b"data")}
    store = S3BlobStore("backups", client=client)

    assert store.find("dist-1/x.json") == b"data"


@pytest.mark.parametrize("code", ["NoSuchKey", "404"])
def test_s3_find_missing_returns_none(code) -> None:
    client = MagicMock()
    client.get_object.side_effect = _client_error(code, "GetObject")
    store = S3BlobStore("backups", client=client)

    assert store.find("dist-1/x.json") is None


def test_s3_find_access_denied_is_transport() -> None:
    client = MagicMock()
    client.get_object.side_effect = _client_error("AccessDenied", "GetObject")
    store = S3BlobStore("backups", client=client)

    with pytest.raises(TransportError):
        store.find("dist-1/x.json")


def test_s3_list_strips_prefix_across_pages() -> None:
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = [
        {"Contents": [{"Key": "confsnap/dist-1/snapshots/b.json"}]},
        {"Contents": [{"Key": "confsnap/dist-1/snapshots/a.json"}]},
        {},
    ]
    store = S3BlobStore("backups", client=client)

    keys = store.list("dist-1/snapshots/")

    client.get_paginator.assert_called_once_with("list_objects_v2")
    client.get_paginator.return_value.paginate.assert_called_once_with(
        Bucket="backups", Prefix="confsnap/dist-1/snapshots/"
    )
    assert keys == ["dist-1/snapshots/a.json", "dist-1/snapshots/b.json"]


def test_s3_delete_missing_succeeds_and_timeout_fails() -> None:
    client = MagicMock()
    store = S3BlobStore("backups", client=client)

    client.delete_object.side_effect = _client_error("NoSuchKey", "DeleteObject")
    store.delete("dist-1/x.json")

    client.delete_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.amazonaws.com")
    with pytest.raises(TransportError):
        store.delete("dist-1/x.json")
