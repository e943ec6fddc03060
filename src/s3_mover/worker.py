# src/s3_mover/worker.py
"""
Defines the move worker.

A worker pulls tasks from the shared queue until it sees the end-of-stream
sentinel and runs the move protocol for each one: check the target, copy,
then delete the source. Every task produces exactly one `TaskResult`; no
failure escapes the task it belongs to.
"""

import asyncio
import logging
from typing import Optional

from s3_mover.exceptions import StoreError
from s3_mover.store import ObjectStore
from s3_mover.tasks import MoveStatus, Task, TaskResult

logger: logging.Logger = logging.getLogger(__name__)


async def move_object(store: ObjectStore, task: Task) -> TaskResult:
    """
    Moves a single object, at most one head, copy and delete call each.

    An existing target short-circuits the move without touching the source,
    which makes re-runs safe. A failed existence check is not taken as
    absence. A failed delete after a successful copy is reported as
    `MOVED_NOT_DELETED` so the orphaned source stays visible.

    Args:
        store (ObjectStore): The object store.
        task (Task): The object to move.

    Returns:
        TaskResult: The outcome of the move.
    """
    try:
        exists: bool = await store.exists(task.target_bucket, task.target_key)
    except StoreError as e:
        logger.warning(f"Could not check target of '{task.object_key}': {e}")
        return TaskResult(task.object_key, task.target_key, MoveStatus.ERROR, str(e))

    if exists:
        logger.debug(
            f"'s3://{task.target_bucket}/{task.target_key}' already exists, skipping."
        )
        return TaskResult(task.object_key, task.target_key, MoveStatus.ALREADY_EXISTS)

    try:
        await store.copy(
            task.source_bucket, task.object_key, task.target_bucket, task.target_key
        )
    except StoreError as e:
        logger.warning(f"Failed to copy '{task.object_key}': {e}")
        return TaskResult(task.object_key, task.target_key, MoveStatus.ERROR, str(e))

    try:
        await store.delete(task.source_bucket, task.object_key)
    except StoreError as e:
        logger.error(
            f"Copied '{task.object_key}' but could not delete the source: {e}"
        )
        return TaskResult(
            task.object_key, task.target_key, MoveStatus.MOVED_NOT_DELETED, str(e)
        )

    logger.info(
        f"Moved 's3://{task.source_bucket}/{task.object_key}' -> "
        f"'s3://{task.target_bucket}/{task.target_key}'"
    )
    return TaskResult(task.object_key, task.target_key, MoveStatus.MOVED)


async def move_worker(
    worker_id: int,
    store: ObjectStore,
    task_queue: "asyncio.Queue[Optional[Task]]",
    result_queue: "asyncio.Queue[Optional[TaskResult]]",
) -> None:
    """
    A long-lived worker task that processes tasks from a queue.

    The loop ends when the worker dequeues the end-of-stream sentinel put by
    the distributor.

    Args:
        worker_id (int): The ordinal of this worker.
        store (ObjectStore): The object store, shared by all workers.
        task_queue (asyncio.Queue[Optional[Task]]): The queue to pull tasks from.
        result_queue (asyncio.Queue[Optional[TaskResult]]): The queue to report
            results to.
    """
    logger.debug(f"Worker {worker_id} started.")
    processed: int = 0
    while True:
        task: Optional[Task] = await task_queue.get()
        if task is None:  # Sentinel value to signal completion
            task_queue.task_done()
            break

        logger.debug(f"Worker {worker_id} processing '{task.object_key}'")
        try:
            result: TaskResult = await move_object(store, task)
        except Exception as e:
            logger.exception(
                f"An unexpected error occurred moving '{task.object_key}'"
            )
            result = TaskResult(
                task.object_key, task.target_key, MoveStatus.ERROR, str(e)
            )
        finally:
            task_queue.task_done()

        # This await provides back-pressure if the collector is busy
        await result_queue.put(result)
        processed += 1

    logger.debug(f"Worker {worker_id} shutting down after {processed} task(s).")
