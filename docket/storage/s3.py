# docket/storage/s3.py
import logging
from collections import OrderedDict
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from docket.core.errors import StorageError, StorageTimeoutError
from docket.storage.base import BlobStore

logger = logging.getLogger(__name__)

# botocore fixes timeouts per client, so one client is kept per timeout value
MAX_CACHED_CLIENTS = 4


class S3BlobStore(BlobStore):
    """
    Blob store backed by an S3-compatible bucket (AWS S3, MinIO).

    Clients are built with a single attempt so a timed-out put is reported to
    the caller instead of being re-sent by botocore.
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        region: str = "us-east-1",
        timeout: float = 30.0,
    ):
        if not bucket:
            raise RuntimeError("S3 not configured")
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self.timeout = timeout
        self._clients: "OrderedDict[float, object]" = OrderedDict()
        logger.info(f"S3 blob store: bucket={bucket}, endpoint={endpoint_url or 'AWS S3'}")

    def _client(self, timeout: Optional[float] = None):
        timeout = timeout or self.timeout
        if timeout in self._clients:
            self._clients.move_to_end(timeout)
            return self._clients[timeout]
        client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region,
            config=Config(
                connect_timeout=timeout,
                read_timeout=timeout,
                retries={"total_max_attempts": 1, "mode": "standard"},
            ),
        )
        self._clients[timeout] = client
        if len(self._clients) > MAX_CACHED_CLIENTS:
            self._clients.popitem(last=False)
        return client

    def put(self, key: str, data: bytes, content_type: Optional[str] = None,
            timeout: Optional[float] = None) -> None:
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self._client(timeout).put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        except (ConnectTimeoutError, ReadTimeoutError) as e:
            logger.error(f"S3 put timed out for {key}: {e}")
            raise StorageTimeoutError(f"Blob write timed out after {timeout or self.timeout}s", ref=key) from e
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 put failed for {key}: {e}")
            raise StorageError(f"Failed to write blob: {e}", ref=key) from e

    def get(self, key: str) -> bytes:
        try:
            response = self._client().get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                raise StorageError("Blob missing from storage", ref=key) from e
            raise StorageError(f"Failed to read blob: {e}", ref=key) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to read blob: {e}", ref=key) from e

    def exists(self, key: str) -> bool:
        try:
            self._client().head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StorageError(f"Failed to check blob: {e}", ref=key) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to check blob: {e}", ref=key) from e

    def delete(self, key: str) -> bool:
        if not self.exists(key):
            return False
        try:
            self._client().delete_object(Bucket=self.bucket, Key=key)
            return True
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete blob: {e}", ref=key) from e
