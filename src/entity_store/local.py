import logging
from typing import Optional

import boto3

from .kv_adapter import KVAdapter, SQLiteKVAdapter
from .s3_adapter import S3KVAdapter

logger = logging.getLogger(__name__)

S3_MODES = ("aws-mock", "aws-prod")


def get_kv_adapter(
    deployment_mode: str = "local-dev",
    db_path: str = "telefile.db",
    bucket_name: Optional[str] = None,
    key_prefix: str = "",
    aws_region: Optional[str] = None,
    aws_endpoint_url: Optional[str] = None,
    aws_access_key_id: Optional[str] = None,
    aws_secret_access_key: Optional[str] = None,
) -> KVAdapter:
    """Pick the key-value backend for the deployment mode."""
    if deployment_mode in S3_MODES:
        if not bucket_name:
            raise ValueError(f"bucket_name is required in {deployment_mode} mode")
        s3_client = boto3.client(
            "s3",
            region_name=aws_region,
            endpoint_url=aws_endpoint_url,
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
        )
        logger.info(f"Using S3 key-value backend: {bucket_name}")
        return S3KVAdapter(bucket_name, prefix=key_prefix, s3_client=s3_client)

    adapter = SQLiteKVAdapter(db_path)
    adapter.init_table()
    logger.info(f"Using SQLite key-value backend: {db_path}")
    return adapter
