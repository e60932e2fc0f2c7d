"""
AWS S3 object storage for result exports.

PUT:  the service uploads the generated CSV server-side.
GET:  the owner downloads it through a presigned, time-limited URL.
"""
from __future__ import annotations

import logging

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings
from app.exceptions import ExportStorageError

logger = logging.getLogger(__name__)


class S3ExportStorage:
    """Uploads export files to the configured bucket and signs download URLs."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def _session(self) -> aioboto3.Session:
        return aioboto3.Session(
            aws_access_key_id=self._settings.aws_access_key_id or None,
            aws_secret_access_key=self._settings.aws_secret_access_key or None,
            region_name=self._settings.aws_region,
        )

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        try:
            async with self._session().client("s3") as s3:
                await s3.put_object(
                    Bucket=self._settings.s3_bucket,
                    Key=key,
                    Body=body,
                    ContentType=content_type,
                    ContentDisposition=f'attachment; filename="{key.rsplit("/", 1)[-1]}"',
                )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 put_object failed for key %s: %s", key, exc)
            raise ExportStorageError(f"Upload failed for {key}") from exc
        logger.info("Uploaded %s (%d bytes)", key, len(body))

    async def signed_url(self, key: str, expiry_secs: int) -> str:
        try:
            async with self._session().client("s3") as s3:
                url: str = await s3.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self._settings.s3_bucket, "Key": key},
                    ExpiresIn=expiry_secs,
                )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 presign failed for key %s: %s", key, exc)
            raise ExportStorageError(f"Could not sign download URL for {key}") from exc
        return url
