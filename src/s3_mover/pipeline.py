# src/s3_mover/pipeline.py
"""Core orchestration logic for the s3-mover pipeline."""

import asyncio
import logging
from typing import List, Optional

from aiobotocore.session import AioSession, get_session
from botocore.config import Config as BotoConfig

from s3_mover.collector import MigrationReport, ResultCollector
from s3_mover.config import MigrationConfig
from s3_mover.distributor import Distributor
from s3_mover.keys import KeyMapper
from s3_mover.store import ObjectStore, S3ObjectStore
from s3_mover.tasks import Task, TaskResult
from s3_mover.worker import move_worker

logger: logging.Logger = logging.getLogger(__name__)


class MigrationPipeline:
    """Orchestrates a migration from listing to the final report."""

    def __init__(
        self, config: MigrationConfig, store: Optional[ObjectStore] = None
    ) -> None:
        """
        Initializes the pipeline with the given configuration.

        Args:
            config (MigrationConfig): The run configuration.
            store (ObjectStore, optional): The object store to use. When
                omitted, an S3 client is created from the configuration for
                the duration of `run`.
        """
        self._config: MigrationConfig = config
        self._store: Optional[ObjectStore] = store

    async def run(self) -> MigrationReport:
        """
        Executes the full migration.

        The configuration is validated before any store call is made.

        Returns:
            MigrationReport: One result per discovered object.
        """
        self._config.validate()
        self._log_configuration()

        if self._store is not None:
            report: MigrationReport = await self._run_with_store(self._store)
        else:
            boto_config: BotoConfig = BotoConfig(
                max_pool_connections=max(10, self._config.num_workers + 10),
            )
            session: AioSession = get_session()
            async with session.create_client(
                "s3", **self._config.as_boto_dict(), config=boto_config
            ) as s3_client:
                report = await self._run_with_store(S3ObjectStore(s3_client))

        logger.info(f"Migration finished: {report.summary()}")
        return report

    async def _run_with_store(self, store: ObjectStore) -> MigrationReport:
        """
        Runs the distributor, worker pool and collector against a store.

        Shutdown is ordered so that no result is lost: the distributor closes
        the task queue, every worker exits, and only then is the result
        queue closed for the collector.

        Args:
            store (ObjectStore): The store to move objects in.

        Returns:
            MigrationReport: One result per published task.
        """
        num_workers: int = self._config.num_workers
        task_queue: asyncio.Queue[Optional[Task]] = asyncio.Queue(
            maxsize=self._config.queue_size
        )
        result_queue: asyncio.Queue[Optional[TaskResult]] = asyncio.Queue(
            maxsize=self._config.result_queue_size
        )

        # The collector drains concurrently so a full result queue never
        # stalls the workers.
        collector_task: asyncio.Task[MigrationReport] = asyncio.create_task(
            ResultCollector(result_queue).run()
        )
        worker_tasks: List[asyncio.Task[None]] = [
            asyncio.create_task(move_worker(i, store, task_queue, result_queue))
            for i in range(num_workers)
        ]

        distributor: Distributor = Distributor(
            store,
            self._config,
            KeyMapper(
                self._config.source_path,
                self._config.destination_path,
                self._config.preserve_structure,
            ),
        )
        try:
            await distributor.run(task_queue, num_workers)
        finally:
            # The distributor always publishes the worker sentinels, so the
            # pool drains even when the listing raises.
            try:
                await asyncio.gather(*worker_tasks)
            finally:
                await result_queue.put(None)
                report: MigrationReport = await collector_task

        return report

    def _log_configuration(self) -> None:
        """Log the resolved run configuration."""
        logger.info("Starting s3-mover pipeline.")
        logger.info(
            f"  Source:      s3://{self._config.source_bucket}/"
            f"{self._config.source_path}"
        )
        logger.info(
            f"  Destination: s3://{self._config.target_bucket}/"
            f"{self._config.destination_path}"
        )
        logger.info(
            f"  Workers: {self._config.num_workers}, region: {self._config.region}, "
            f"key mapping: "
            f"{'preserve structure' if self._config.preserve_structure else 'basename'}"
        )
