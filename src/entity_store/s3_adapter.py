"""S3 key-value adapter - one object per key inside a bucket."""
import logging
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import StorageUnavailable
from .kv_adapter import KVAdapter, UpdateFn

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class S3KVAdapter(KVAdapter):
    """
    Key-value adapter storing each value as an S3 object.

    S3 offers no compare-and-swap, so `update` is a plain get-then-put and
    concurrent updates of the same key are last-write-wins.
    """

    def __init__(
        self,
        bucket_name: str,
        prefix: str = "",
        s3_client: Optional["S3Client"] = None,
    ):
        self.bucket_name = bucket_name
        self.prefix = prefix
        self.s3_client = s3_client or boto3.client("s3")
        logger.info(f"S3KVAdapter initialized for bucket: {bucket_name} (prefix: '{prefix}')")

    def _object_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self._object_key(key))
            return response["Body"].read().decode("utf-8")
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return None
            logger.error(f"Error reading key {key} from S3: {e}")
            raise StorageUnavailable("get", key, str(e)) from e
        except BotoCoreError as e:
            logger.error(f"Error reading key {key} from S3: {e}")
            raise StorageUnavailable("get", key, str(e)) from e

    def put(self, key: str, value: str) -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=self._object_key(key),
                Body=value.encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error writing key {key} to S3: {e}")
            raise StorageUnavailable("put", key, str(e)) from e

    def delete(self, key: str) -> bool:
        # delete_object succeeds for missing keys, so existence is checked first
        existed = self._exists(key)
        if not existed:
            return False
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._object_key(key))
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting key {key} from S3: {e}")
            raise StorageUnavailable("delete", key, str(e)) from e

    def update(self, key: str, fn: UpdateFn) -> Optional[str]:
        new_value = fn(self.get(key))
        if new_value is None:
            self.delete(key)
        else:
            self.put(key, new_value)
        return new_value

    def keys(self, prefix: str = "") -> List[str]:
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            found = []
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=self._object_key(prefix)):
                for item in page.get("Contents", []):
                    found.append(item["Key"][len(self.prefix):])
            return sorted(found)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing keys with prefix {prefix} in S3: {e}")
            raise StorageUnavailable("keys", prefix, str(e)) from e

    def ping(self) -> bool:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return True
        except (ClientError, BotoCoreError) as e:
            raise StorageUnavailable("ping", self.bucket_name, str(e)) from e

    def _exists(self, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=self._object_key(key))
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return False
            raise StorageUnavailable("head", key, str(e)) from e
        except BotoCoreError as e:
            raise StorageUnavailable("head", key, str(e)) from e
