"""Unit tests for the S3 storage adapter with a mocked boto3 client."""
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from app.models.document import ResourceKind
from app.services.storage_service import StorageError, StorageService

TS = 1700000000000


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def s3_client():
    return Mock()


@pytest.fixture
def service(s3_client):
    return StorageService(bucket="vault", folder="documents", client=s3_client, region="us-east-1")


def test_upload_puts_object_under_kind_prefix(service, s3_client):
    stored = service.upload(
        b"%PDF", "Annual Report.pdf", "application/pdf", ResourceKind.RAW, timestamp_ms=TS
    )

    s3_client.put_object.assert_called_once_with(
        Bucket="vault",
        Key=f"raw/documents/{TS}-Annual-Report",
        Body=b"%PDF",
        ContentType="application/pdf",
    )
    assert stored.storage_key == f"documents/{TS}-Annual-Report"
    assert stored.url == f"https://vault.s3.us-east-1.amazonaws.com/raw/documents/{TS}-Annual-Report"


def test_upload_without_content_type_uses_octet_stream(service, s3_client):
    stored = service.upload(b"img", "scan.png", None, ResourceKind.IMAGE, timestamp_ms=TS)

    kwargs = s3_client.put_object.call_args.kwargs
    assert kwargs["Key"] == f"image/documents/{TS}-scan"
    assert kwargs["ContentType"] == "application/octet-stream"
    assert stored.url.endswith(f"/image/documents/{TS}-scan")


def test_upload_failure_raises_storage_error(service, s3_client):
    s3_client.put_object.side_effect = _client_error("AccessDenied", "PutObject")

    with pytest.raises(StorageError):
        service.upload(b"x", "report.pdf", "application/pdf", ResourceKind.RAW, timestamp_ms=TS)


def test_upload_connection_failure_raises_storage_error(service, s3_client):
    s3_client.put_object.side_effect = EndpointConnectionError(endpoint_url="http://s3.test")

    with pytest.raises(StorageError):
        service.upload(b"x", "report.pdf", "application/pdf", ResourceKind.RAW, timestamp_ms=TS)


def test_delete_uses_key_and_kind(service, s3_client):
    service.delete("documents/1-scan", "image")

    s3_client.delete_object.assert_called_once_with(Bucket="vault", Key="image/documents/1-scan")


def test_delete_failure_raises_storage_error(service, s3_client):
    s3_client.delete_object.side_effect = _client_error("InternalError", "DeleteObject")

    with pytest.raises(StorageError):
        service.delete("documents/1-report", ResourceKind.RAW)


def test_storage_key_without_folder(s3_client):
    service = StorageService(bucket="vault", client=s3_client)
    assert service.make_storage_key("report.pdf", TS) == f"{TS}-report"


def test_public_url_prefers_public_base_url(s3_client):
    service = StorageService(
        bucket="vault",
        client=s3_client,
        endpoint_url="http://minio:9000",
        public_base_url="https://cdn.example.com/",
    )
    assert service.public_url("raw/documents/a b") == "https://cdn.example.com/raw/documents/a%20b"


def test_public_url_with_custom_endpoint(s3_client):
    service = StorageService(bucket="vault", client=s3_client, endpoint_url="http://minio:9000/")
    assert service.public_url("raw/x") == "http://minio:9000/vault/raw/x"


def test_default_client_is_built_from_settings():
    service = StorageService(
        bucket="vault",
        region="eu-west-1",
        access_key="test-access-key",
        secret_key="test-secret-key",
    )
    assert service.client.meta.region_name == "eu-west-1"
    assert service.public_url("raw/x") == "https://vault.s3.eu-west-1.amazonaws.com/raw/x"
