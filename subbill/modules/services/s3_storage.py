import boto3
from botocore.exceptions import ClientError
from subbill.config import settings
import logging

logger = logging.getLogger(__name__)


class S3Storage:
    """Service images in S3 instead of the Supabase Storage bucket"""

    def __init__(self):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    @staticmethod
    def is_configured() -> bool:
        return all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name])

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com/{key}"

    def upload_image(self, file_content: bytes, key: str, content_type: str = "image/jpeg") -> str:
        """Upload an image and return its public URL"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file_content,
                ContentType=content_type,
                CacheControl="max-age=3600"
            )
            return self.public_url(key)
        except ClientError as e:
            logger.error(f"Failed to upload image to S3: {str(e)}")
            raise

