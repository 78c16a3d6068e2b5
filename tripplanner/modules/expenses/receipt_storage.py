import boto3
from botocore.exceptions import ClientError
from tripplanner.config import settings
import logging

logger = logging.getLogger(__name__)


class ReceiptStorage:
    """S3 bucket holding expense receipt images and PDFs."""

    def __init__(self):
        if not settings.s3_configured:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    @staticmethod
    def build_key(trip_id: str, expense_id: str, filename: str) -> str:
        safe_name = (filename or "receipt").replace("/", "_").replace("\\", "_")
        return f"receipts/{trip_id}/{expense_id}/{safe_name}"

    def object_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com/{key}"

    def key_from_url(self, url: str) -> str:
        return url.split(".amazonaws.com/", 1)[-1]

    def upload_receipt(self, file_content: bytes, key: str, content_type: str) -> str:
        """Upload a receipt and return its object URL"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file_content,
                ContentType=content_type
            )
            return self.object_url(key)
        except ClientError as e:
            logger.error(f"Failed to upload receipt to S3: {str(e)}")
            raise

    def delete_receipt(self, key: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete receipt from S3: {str(e)}")
            return False
