"""S3 smoke test for the final credentials."""

from typing import Any, Dict, List

import structlog

logger = structlog.get_logger(__name__)


def format_listing(contents: List[Dict[str, Any]]) -> str:
    """Render object keys as a bullet list, one " * key" line per object."""
    return "\n".join(f" * {item['Key']}" for item in contents)


def probe_bucket(s3_client, bucket: str) -> str:
    """List a bucket once to prove the credentials can reach S3.

    Args:
        s3_client: boto3 S3 client built from the second-hop credentials
        bucket: Bucket to list

    Returns:
        Bullet list of object keys (empty string for an empty bucket)
    """
    response = s3_client.list_objects(Bucket=bucket)
    contents = response.get("Contents") or []

    logger.debug("Bucket listed", bucket=bucket, object_count=len(contents))

    return format_listing(contents)
