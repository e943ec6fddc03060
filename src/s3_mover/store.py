# src/s3_mover/store.py
"""
Object store capability used by the move pipeline.

The pipeline only depends on the `ObjectStore` protocol: paginated listing,
an existence check, server-side copy and delete. `S3ObjectStore` implements
it on top of an aiobotocore S3 client.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, AsyncIterator, List, Optional, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from s3_mover.exceptions import StoreError

if TYPE_CHECKING:
    from types_aiobotocore_s3.client import S3Client
    from types_aiobotocore_s3.paginator import ListObjectsV2Paginator

logger: logging.Logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


@dataclass(frozen=True)
class ListPage:
    """
    One page of a listing.

    Attributes:
        keys (List[str]): Object keys on the page.
        error (str, optional): Why the page could not be loaded. A failed
            page carries no keys.
    """

    keys: List[str] = field(default_factory=list)
    error: Optional[str] = None


class ObjectStore(Protocol):
    """Protocol for the object store operations the pipeline needs."""

    def list_pages(self, bucket: str, prefix: str) -> AsyncIterator[ListPage]:
        """List keys under a prefix, one page at a time."""
        ...

    async def exists(self, bucket: str, key: str) -> bool:
        """Return whether an object exists; raise StoreError if unknown."""
        ...

    async def copy(
        self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str
    ) -> None:
        """Copy an object server-side."""
        ...

    async def delete(self, bucket: str, key: str) -> None:
        """Delete an object."""
        ...


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3ObjectStore:
    """An `ObjectStore` backed by an aiobotocore S3 client."""

    def __init__(self, client: "S3Client") -> None:
        """
        Initialize the store.

        Args:
            client (S3Client): An open aiobotocore S3 client, shared by all
                workers.
        """
        self._client: "S3Client" = client

    async def list_pages(self, bucket: str, prefix: str) -> AsyncIterator[ListPage]:
        """
        Lists object keys under a prefix using the `list_objects_v2` paginator.

        A page that fails to load is yielded as an error page. Since the
        continuation token of the failed page is lost, the listing ends there.
        Directory placeholder keys (ending in '/') are skipped.

        Args:
            bucket (str): The bucket to list.
            prefix (str): The key prefix to list under.

        Yields:
            ListPage: Pages of keys in listing order.
        """
        paginator: "ListObjectsV2Paginator" = self._client.get_paginator(
            "list_objects_v2"
        )
        page_number: int = 0
        try:
            async for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
                page_number += 1
                keys: List[str] = [
                    obj["Key"]
                    for obj in page.get("Contents", [])
                    if not obj["Key"].endswith("/")
                ]
                yield ListPage(keys=keys)
        except (ClientError, BotoCoreError) as e:
            yield ListPage(
                error=f"Listing page {page_number + 1} of "
                f"'s3://{bucket}/{prefix}' failed: {e}"
            )

    async def exists(self, bucket: str, key: str) -> bool:
        """
        Checks whether an object exists with `head_object`.

        Args:
            bucket (str): The bucket to check.
            key (str): The object key to check.

        Returns:
            bool: True if the object exists, False if the store reports it
                as not found.

        Raises:
            StoreError: For any other failure, e.g. permissions or transport.
        """
        try:
            await self._client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return False
            raise StoreError(f"HEAD 's3://{bucket}/{key}' failed: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"HEAD 's3://{bucket}/{key}' failed: {e}") from e
        return True

    async def copy(
        self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str
    ) -> None:
        """
        Copies an object server-side with `copy_object`.

        Args:
            src_bucket (str): The source bucket.
            src_key (str): The source object key.
            dst_bucket (str): The destination bucket.
            dst_key (str): The destination object key.

        Raises:
            StoreError: If the copy fails.
        """
        try:
            await self._client.copy_object(
                Bucket=dst_bucket,
                Key=dst_key,
                CopySource={"Bucket": src_bucket, "Key": src_key},
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(
                f"COPY 's3://{src_bucket}/{src_key}' -> "
                f"'s3://{dst_bucket}/{dst_key}' failed: {e}"
            ) from e

    async def delete(self, bucket: str, key: str) -> None:
        """
        Deletes an object with `delete_object`.

        Args:
            bucket (str): The bucket holding the object.
            key (str): The object key to delete.

        Raises:
            StoreError: If the delete fails.
        """
        try:
            await self._client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"DELETE 's3://{bucket}/{key}' failed: {e}") from e
