# src/s3_mover/distributor.py
"""
Turns a listing of the source prefix into move tasks.

The distributor is the single producer of the task queue. Its end-of-stream
sentinels are the only signal that tells workers to stop.
"""

import asyncio
import logging
from typing import Optional

from s3_mover.config import MigrationConfig
from s3_mover.keys import KeyMapper
from s3_mover.store import ListPage, ObjectStore
from s3_mover.tasks import Task

logger: logging.Logger = logging.getLogger(__name__)


class Distributor:
    """Lists the source prefix and publishes one `Task` per discovered key."""

    def __init__(
        self,
        store: ObjectStore,
        config: MigrationConfig,
        key_mapper: KeyMapper,
    ) -> None:
        """
        Initialize the distributor.

        Args:
            store (ObjectStore): The store to list objects from.
            config (MigrationConfig): The run configuration.
            key_mapper (KeyMapper): Computes the destination key for each key.
        """
        self._store: ObjectStore = store
        self._config: MigrationConfig = config
        self._key_mapper: KeyMapper = key_mapper

    def make_task(self, object_key: str) -> Task:
        """
        Build the task for a discovered key.

        Args:
            object_key (str): A key listed under the source prefix.

        Returns:
            Task: The move task for the key.
        """
        return Task(
            source_bucket=self._config.source_bucket,
            target_bucket=self._config.target_bucket,
            object_key=object_key,
            target_key=self._key_mapper.target_key(object_key),
        )

    async def run(
        self, task_queue: "asyncio.Queue[Optional[Task]]", num_consumers: int
    ) -> int:
        """
        Publishes a task for every key under the source prefix, then closes
        the queue with one sentinel per consumer.

        Pages that fail to load are logged and skipped. The queue is closed
        even if the listing raises, so consumers always terminate.

        Args:
            task_queue (asyncio.Queue[Optional[Task]]): The bounded queue
                shared by all workers.
            num_consumers (int): Number of workers reading the queue.

        Returns:
            int: The number of tasks published.
        """
        published: int = 0
        skipped_pages: int = 0
        logger.info(
            f"Listing objects under "
            f"'s3://{self._config.source_bucket}/{self._config.source_path}'..."
        )
        try:
            page: ListPage
            async for page in self._store.list_pages(
                self._config.source_bucket, self._config.source_path
            ):
                if page.error is not None:
                    skipped_pages += 1
                    logger.error(f"Skipping listing page: {page.error}")
                    continue

                for key in page.keys:
                    logger.debug(f"Discovered '{key}'")
                    # Blocks while the workers are saturated
                    await task_queue.put(self.make_task(key))
                    published += 1
        finally:
            for _ in range(num_consumers):
                await task_queue.put(None)

        if skipped_pages:
            logger.warning(
                f"Listing finished with {skipped_pages} failed page(s); "
                "their objects were not processed."
            )
        logger.info(f"Published {published} task(s).")
        return published
