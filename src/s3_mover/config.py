# src/s3_mover/config.py
"""
Configuration for the s3-mover pipeline.

This module centralizes run configuration as a typed, immutable dataclass and
validates it before any call to the object store is made.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from s3_mover.exceptions import ConfigError
from s3_mover.keys import is_key_valid, join_key, normalize_prefix

DEFAULT_REGION: str = "ap-southeast-2"
ENDPOINT_URL_ENV_VAR: str = "S3_MOVER_ENDPOINT_URL"


def _get_optional_env_var(name: str) -> Optional[str]:
    """
    Retrieves an optional environment variable.

    Args:
        name (str): The name of the environment variable.

    Returns:
        Optional[str]: The value, or None if unset or empty.
    """
    value: Optional[str] = os.environ.get(name)
    return value or None


@dataclass(frozen=True)
class MigrationConfig:
    """
    Defines a single migration run.

    Attributes:
        source_bucket (str): Bucket to move objects out of.
        destination_path (str): Key prefix objects are moved under.
        source_path (str): Key prefix to enumerate in the source bucket.
        destination_bucket (str, optional): Bucket to move objects into.
            Defaults to the source bucket.
        region (str): The AWS region of the store.
        num_workers (int): Number of concurrent move workers.
        queue_size (int): Bound of the task queue between the distributor
            and the workers.
        result_queue_size (int): Bound of the result queue between the
            workers and the collector.
        endpoint_url (str, optional): Endpoint of an S3-compatible store.
        preserve_structure (bool): Keep the key structure below the source
            prefix instead of flattening to basenames.
    """

    source_bucket: str
    destination_path: str
    source_path: str = ""
    destination_bucket: Optional[str] = None
    region: str = DEFAULT_REGION
    num_workers: int = 1
    queue_size: int = 32
    result_queue_size: int = 100
    endpoint_url: Optional[str] = field(
        default_factory=lambda: _get_optional_env_var(ENDPOINT_URL_ENV_VAR)
    )
    preserve_structure: bool = False

    @property
    def target_bucket(self) -> str:
        """
        The bucket objects are moved into.

        Returns:
            str: The destination bucket, or the source bucket when unset.
        """
        return self.destination_bucket or self.source_bucket

    def validate(self) -> None:
        """
        Checks the configuration for errors that must stop the run.

        Raises:
            ConfigError: If a path starts with a separator, a bound is not
                positive, or the destination lies inside the source listing.
        """
        if not self.source_bucket:
            raise ConfigError("Source bucket must be set.")
        is_key_valid(self.source_path)
        is_key_valid(self.destination_path)

        for name in ("num_workers", "queue_size", "result_queue_size"):
            value: int = getattr(self, name)
            if value < 1:
                raise ConfigError(f"'{name}' must be at least 1, got {value}.")

        if self.target_bucket == self.source_bucket:
            destination_space: str = join_key(
                normalize_prefix(self.destination_path), ""
            )
            # Listing is a plain string-prefix match on the source path.
            if destination_space.startswith(self.source_path):
                raise ConfigError(
                    f"Destination 's3://{self.source_bucket}/"
                    f"{self.destination_path}' lies inside the source listing "
                    f"'s3://{self.source_bucket}/{self.source_path}'; moved "
                    "objects would be listed and moved again."
                )

    def as_boto_dict(self) -> Dict[str, Any]:
        """
        Returns the client parameters suitable for aiobotocore.

        Returns:
            Dict[str, Any]: A dictionary of client parameters.
        """
        params: Dict[str, Any] = {"region_name": self.region}
        if self.endpoint_url:
            params["endpoint_url"] = self.endpoint_url
        return params
