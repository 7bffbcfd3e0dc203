import asyncio
import logging
import uuid
from urllib.parse import quote

import boto3
import botocore.exceptions
from werkzeug.utils import secure_filename

from errors import StorageError

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# S3 image uploads
# ------------------------------------------------------------

def make_key(filename, prefix="items"):
    # random id instead of a timestamp, two uploads of the same file never collide
    safe_name = secure_filename(filename or "") or "upload"
    return f"{prefix}/{uuid.uuid4().hex}_{safe_name}"


class ObjectStorage:
    """Uploads item images to a bucket and hands back their public URL."""

    def __init__(self, client, bucket, region="us-east-1", endpoint_url=None):
        self.client = client
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url

    @classmethod
    def from_settings(cls, settings):
        session = boto3.Session(
            aws_access_key_id=settings.aws_access_key,
            aws_secret_access_key=settings.aws_secret_key,
            region_name=settings.aws_region,
        )
        client_kwargs = {}
        if settings.s3_endpoint_url:
            client_kwargs["endpoint_url"] = settings.s3_endpoint_url

        client = session.client("s3", **client_kwargs)
        return cls(client, settings.s3_bucket, settings.aws_region, settings.s3_endpoint_url)

    def public_url(self, key):
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{quote(key)}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(key)}"

    def put(self, key, data, content_type=None):
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "ACL": "public-read",
        }
        if content_type:
            params["ContentType"] = content_type

        try:
            self.client.put_object(**params)
        except (botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError) as e:
            logger.error(f"Upload of {key} to bucket {self.bucket} failed: {e}")
            raise StorageError() from e

        logger.info(f"Uploaded {len(data)} bytes to {self.bucket}/{key}")
        return self.public_url(key)

    async def upload(self, key, data, content_type=None):
        # boto3 blocks, keep it off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self.put(key, data, content_type))
