# src/s3_mover/__init__.py
"""
s3-mover: A concurrent, idempotent object mover for S3-compatible stores.

This package moves every object under a source prefix to a destination
prefix (copy, then delete) using a bounded pool of asyncio workers. Objects
already present at the destination are left alone, so a run can be repeated
safely.

The primary entry point for programmatic use is the `MigrationPipeline` class.
"""

from typing import List

from s3_mover.config import MigrationConfig
from s3_mover.pipeline import MigrationPipeline

__all__: List[str] = ["MigrationConfig", "MigrationPipeline"]
