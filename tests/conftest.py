# tests/conftest.py
"""
Pytest configuration and fixtures for the s3-mover tests.

This module provides an in-memory `FakeObjectStore` that implements the
`ObjectStore` protocol, records every call made against it, and can be told
to fail specific operations, plus configuration fixtures.
"""

import asyncio
from collections import defaultdict
from typing import AsyncIterator, Dict, List, Set, Tuple

import pytest

from s3_mover.config import MigrationConfig
from s3_mover.exceptions import StoreError
from s3_mover.store import ListPage

Call = Tuple[str, ...]


class FakeObjectStore:
    """
    In-memory object store for testing.

    Attributes:
        buckets (Dict[str, Dict[str, bytes]]): Objects by bucket and key.
        calls (List[Tuple[str, ...]]): Every call made, e.g.
            ("copy", "src", "in/a.txt", "src", "out/a.txt").
        page_size (int): Number of keys per listing page.
        failing_pages (Set[int]): Zero-based listing pages reported as errors.
        fail_exists (Set[str]): Target keys whose existence check errors.
        fail_copy (Set[str]): Source keys whose copy errors.
        fail_delete (Set[str]): Source keys whose delete errors.
        crash_on (Set[str]): Target keys whose existence check raises an
            unexpected, non-store exception.
    """

    def __init__(self, page_size: int = 1000) -> None:
        self.buckets: Dict[str, Dict[str, bytes]] = defaultdict(dict)
        self.calls: List[Call] = []
        self.page_size: int = page_size
        self.failing_pages: Set[int] = set()
        self.fail_exists: Set[str] = set()
        self.fail_copy: Set[str] = set()
        self.fail_delete: Set[str] = set()
        self.crash_on: Set[str] = set()

    def put(self, bucket: str, key: str, body: bytes = b"") -> None:
        """Add an object to a bucket."""
        self.buckets[bucket][key] = body or f"content of {key}".encode()

    def keys(self, bucket: str) -> Set[str]:
        """Return all keys in a bucket."""
        return set(self.buckets[bucket])

    def count(self, operation: str, key: str) -> int:
        """Count calls of an operation that involved a key."""
        return sum(1 for call in self.calls if call[0] == operation and key in call)

    def mutations(self) -> List[Call]:
        """Return all copy and delete calls."""
        return [call for call in self.calls if call[0] in ("copy", "delete")]

    async def list_pages(self, bucket: str, prefix: str) -> AsyncIterator[ListPage]:
        self.calls.append(("list", bucket, prefix))
        keys: List[str] = sorted(
            k for k in self.buckets[bucket] if k.startswith(prefix)
        )
        for index, start in enumerate(range(0, len(keys), self.page_size)):
            await asyncio.sleep(0)
            if index in self.failing_pages:
                yield ListPage(error=f"simulated failure of page {index}")
                continue
            yield ListPage(keys=keys[start : start + self.page_size])

    async def exists(self, bucket: str, key: str) -> bool:
        self.calls.append(("exists", bucket, key))
        await asyncio.sleep(0)
        if key in self.crash_on:
            raise RuntimeError(f"unexpected failure for {key}")
        if key in self.fail_exists:
            raise StoreError(f"simulated HEAD failure for {key}")
        return key in self.buckets[bucket]

    async def copy(
        self, src_bucket: str, src_key: str, dst_bucket: str, dst_key: str
    ) -> None:
        self.calls.append(("copy", src_bucket, src_key, dst_bucket, dst_key))
        await asyncio.sleep(0)
        if src_key in self.fail_copy or src_key not in self.buckets[src_bucket]:
            raise StoreError(f"simulated COPY failure for {src_key}")
        self.buckets[dst_bucket][dst_key] = self.buckets[src_bucket][src_key]

    async def delete(self, bucket: str, key: str) -> None:
        self.calls.append(("delete", bucket, key))
        await asyncio.sleep(0)
        if key in self.fail_delete:
            raise StoreError(f"simulated DELETE failure for {key}")
        self.buckets[bucket].pop(key, None)


@pytest.fixture(scope="function")
def fake_store() -> FakeObjectStore:
    """
    Provide an empty in-memory object store.

    Returns:
        FakeObjectStore: A fresh store for each test.
    """
    return FakeObjectStore()


@pytest.fixture(scope="function")
def scenario_store(fake_store: FakeObjectStore) -> FakeObjectStore:
    """
    Provide a store holding 'in/a.txt' and 'in/sub/b.txt' in bucket 'src'.

    Args:
        fake_store (FakeObjectStore): The empty store fixture.

    Returns:
        FakeObjectStore: The populated store.
    """
    fake_store.put("src", "in/a.txt")
    fake_store.put("src", "in/sub/b.txt")
    return fake_store


@pytest.fixture(scope="function")
def test_config() -> MigrationConfig:
    """
    Provide the configuration moving 's3://src/in/' to 's3://src/out/'.

    Returns:
        MigrationConfig: A validated-ready configuration.
    """
    return MigrationConfig(
        source_bucket="src",
        source_path="in/",
        destination_path="out/",
        endpoint_url=None,
    )
