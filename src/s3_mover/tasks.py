# src/s3_mover/tasks.py
"""Units of work exchanged between the distributor, workers and collector."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MoveStatus(Enum):
    """Outcome of moving a single object."""

    ALREADY_EXISTS = "already_exists"
    MOVED = "moved"
    MOVED_NOT_DELETED = "moved_not_deleted"
    ERROR = "error"

    @property
    def is_failure(self) -> bool:
        """Whether the outcome needs operator attention."""
        return self in (MoveStatus.ERROR, MoveStatus.MOVED_NOT_DELETED)


@dataclass(frozen=True)
class Task:
    """
    A single object to move.

    Attributes:
        source_bucket (str): Bucket holding the object.
        target_bucket (str): Bucket the object is moved to.
        object_key (str): Key of the object in the source bucket.
        target_key (str): Key of the object in the target bucket.
    """

    source_bucket: str
    target_bucket: str
    object_key: str
    target_key: str


@dataclass(frozen=True)
class TaskResult:
    """
    The resolved outcome of a `Task`.

    Attributes:
        object_key (str): Key of the object in the source bucket.
        target_key (str): Key of the object in the target bucket.
        status (MoveStatus): The outcome of the move.
        error (str, optional): A description of the failure, if any.
    """

    object_key: str
    target_key: str
    status: MoveStatus
    error: Optional[str] = None
