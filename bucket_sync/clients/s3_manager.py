"""
S3 client manager for listing, fetching, uploading and deleting bucket objects.
"""
from typing import Iterator, Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..models.config import StorageConfig
from ..models.data_models import ListPage, RemoteObject


DEFAULT_REGION = 'us-east-1'


class RemoteStoreError(Exception):
    """Raised when a list/get/put/delete call against the bucket fails."""
    pass


class S3Manager:
    """Manages object operations for the configured bucket."""

    def __init__(self, config: StorageConfig):
        """Initialize S3Manager with storage configuration."""
        self.config = config
        self.client = self._create_s3_client(config)

        logger.debug(f"S3Manager initialized for bucket: {config.bucket}")

    def _create_s3_client(self, config: StorageConfig):
        """Create an S3 client from configuration."""
        try:
            client = boto3.client(
                's3',
                endpoint_url=config.endpoint,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=config.access_key_secret,
                region_name=config.region or DEFAULT_REGION
            )
            logger.debug(f"Created S3 client for endpoint: {config.endpoint or 'default'}")
            return client
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to create S3 client for {config.endpoint}: {e}")
            raise RemoteStoreError(f"Cannot create S3 client: {e}") from e

    def list_page(self, prefix: Optional[str] = None, page_size: int = 100,
                  marker: Optional[str] = None) -> ListPage:
        """
        Issue one listing call.

        Args:
            prefix: Key prefix to restrict the listing to
            page_size: Maximum number of keys returned by this call
            marker: Continuation marker returned by the previous page

        Returns:
            ListPage: Objects of this page plus the truncation state
        """
        params = {'Bucket': self.config.bucket, 'MaxKeys': page_size}
        if prefix:
            params['Prefix'] = prefix
        if marker:
            params['ContinuationToken'] = marker

        try:
            response = self.client.list_objects_v2(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list objects in bucket {self.config.bucket}: {e}")
            raise RemoteStoreError(f"List failed: {e}") from e

        objects = [
            RemoteObject(
                key=obj['Key'],
                size=obj.get('Size', 0),
                last_modified=obj.get('LastModified'),
                etag=obj.get('ETag', '').strip('"') or None
            )
            for obj in response.get('Contents', [])
        ]
        return ListPage(
            objects=objects,
            is_truncated=bool(response.get('IsTruncated')),
            next_marker=response.get('NextContinuationToken')
        )

    def list_objects(self, prefix: Optional[str] = None, page_size: int = 100) -> Iterator[RemoteObject]:
        """
        List every object under a prefix, following continuation markers.

        Yields:
            RemoteObject: Objects in the bucket
        """
        page = self.list_page(prefix, page_size)
        yield from page.objects

        while page.is_truncated and page.next_marker:
            page = self.list_page(prefix, page_size, page.next_marker)
            yield from page.objects

    def get_object(self, key: str) -> bytes:
        """
        Download an object's full content.

        Args:
            key: Object key in the bucket

        Returns:
            bytes: Object body
        """
        try:
            response = self.client.get_object(Bucket=self.config.bucket, Key=key)
            content = response['Body'].read()
            logger.debug(f"Retrieved {len(content)} bytes for key: {key}")
            return content
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to get object {key}: {e}")
            raise RemoteStoreError(f"Get failed for {key}: {e}") from e

    def put_object(self, key: str, content: bytes) -> None:
        """Upload (overwrite) an object."""
        try:
            self.client.put_object(Bucket=self.config.bucket, Key=key, Body=content)
            logger.debug(f"Uploaded {len(content)} bytes to key: {key}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to put object {key}: {e}")
            raise RemoteStoreError(f"Put failed for {key}: {e}") from e

    def delete_object(self, key: str) -> None:
        """Delete an object. Deleting a missing key is not an error on S3."""
        try:
            self.client.delete_object(Bucket=self.config.bucket, Key=key)
            logger.debug(f"Deleted key: {key}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete object {key}: {e}")
            raise RemoteStoreError(f"Delete failed for {key}: {e}") from e

    def test_connection(self) -> bool:
        """
        Test connection to the bucket.

        Returns:
            bool: True if connection successful, False otherwise
        """
        try:
            self.client.head_bucket(Bucket=self.config.bucket)
            logger.info("S3 connection test successful")
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 connection test failed: {e}")
            return False
