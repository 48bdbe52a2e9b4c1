"""
Storage backend for uploaded documents (local disk or S3)
"""
from io import BytesIO
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

from drivehub.core.config import Settings
from drivehub.core.logging_config import get_logger

logger = get_logger(__name__)

# URL prefix under which locally stored files are served
LOCAL_URL_PREFIX = "/uploads"
S3_FOLDER = "uploads"


class FileStorage:
    def __init__(self, settings: Settings):
        self.upload_dir = Path(settings.UPLOAD_DIR)
        self.region = settings.AWS_REGION
        self.bucket_name = settings.S3_BUCKET_NAME
        self.use_local_storage = not settings.use_s3_storage
        self.s3_client = None

        if not self.use_local_storage:
            try:
                self.s3_client = boto3.client(
                    's3',
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                    region_name=self.region
                )
            except Exception as e:
                logger.error(f"Failed to initialize S3 client: {str(e)}. Falling back to local storage.")
                self.use_local_storage = True

        logger.info(f"FileStorage init: use_local_storage={self.use_local_storage}, upload_dir={self.upload_dir}")

    def ensure_upload_dir(self) -> Path:
        """Create the local storage root if it does not exist yet"""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    def save(self, content: bytes, stored_name: str, content_type: str) -> str:
        """
        Persist bytes under stored_name

        Args:
            content: File bytes
            stored_name: Generated filename (no directories)
            content_type: MIME type sent along to S3

        Returns:
            Reference to the stored file (relative URL path or S3 URL)
        """
        if self.use_local_storage:
            local_path = self.ensure_upload_dir() / stored_name
            with open(local_path, "wb") as f:
                f.write(content)

            url = f"{LOCAL_URL_PREFIX}/{stored_name}"
            logger.info(f"File saved locally: {url}")
            return url

        object_name = f"{S3_FOLDER}/{stored_name}"
        try:
            self.s3_client.upload_fileobj(
                BytesIO(content),
                self.bucket_name,
                object_name,
                ExtraArgs={'ContentType': content_type}
            )
        except ClientError as e:
            logger.error(f"Error uploading file to S3: {str(e)}")
            raise

        url = f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{object_name}"
        logger.info(f"File uploaded to S3: {url}")
        return url
