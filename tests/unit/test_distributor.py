# tests/unit/test_distributor.py
"""Unit tests for the `Distributor`."""

import asyncio
from typing import AsyncIterator, List, Optional

import pytest

from conftest import FakeObjectStore
from s3_mover.config import MigrationConfig
from s3_mover.distributor import Distributor
from s3_mover.keys import KeyMapper
from s3_mover.store import ListPage
from s3_mover.tasks import Task


def _distributor(store: FakeObjectStore, config: MigrationConfig) -> Distributor:
    return Distributor(
        store, config, KeyMapper(config.source_path, config.destination_path)
    )


def _drain(queue: "asyncio.Queue[Optional[Task]]") -> List[Optional[Task]]:
    items: List[Optional[Task]] = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


@pytest.mark.asyncio
async def test_distributor_publishes_tasks_and_sentinels(
    scenario_store: FakeObjectStore, test_config: MigrationConfig
) -> None:
    """
    Tests that every listed key becomes a task, followed by one sentinel per
    consumer.
    """
    queue: asyncio.Queue[Optional[Task]] = asyncio.Queue()

    published: int = await _distributor(scenario_store, test_config).run(queue, 3)

    items: List[Optional[Task]] = _drain(queue)
    assert published == 2
    assert items[:2] == [
        Task("src", "src", "in/a.txt", "out/a.txt"),
        Task("src", "src", "in/sub/b.txt", "out/b.txt"),
    ]
    assert items[2:] == [None, None, None]


@pytest.mark.asyncio
async def test_distributor_uses_destination_bucket(
    scenario_store: FakeObjectStore,
) -> None:
    """
    Tests that tasks target the configured destination bucket.
    """
    config: MigrationConfig = MigrationConfig(
        source_bucket="src",
        source_path="in/",
        destination_path="out",
        destination_bucket="dst",
    )
    queue: asyncio.Queue[Optional[Task]] = asyncio.Queue()

    await _distributor(scenario_store, config).run(queue, 1)

    tasks: List[Task] = [t for t in _drain(queue) if t is not None]
    assert {t.target_bucket for t in tasks} == {"dst"}
    assert {t.source_bucket for t in tasks} == {"src"}


@pytest.mark.asyncio
async def test_distributor_skips_failed_pages(
    fake_store: FakeObjectStore,
    test_config: MigrationConfig,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """
    Tests that a failed listing page is logged and later pages still processed.

    Arrange:
        - Six keys listed two per page; the middle page fails.
    Act:
        - Run the distributor.
    Assert:
        - Four tasks are published (pages 0 and 2) and the failure is logged.
    """
    fake_store.page_size = 2
    fake_store.failing_pages.add(1)
    for i in range(6):
        fake_store.put("src", f"in/{i}.txt")
    queue: asyncio.Queue[Optional[Task]] = asyncio.Queue()

    published: int = await _distributor(fake_store, test_config).run(queue, 1)

    keys: List[str] = [t.object_key for t in _drain(queue) if t is not None]
    assert published == 4
    assert keys == ["in/0.txt", "in/1.txt", "in/4.txt", "in/5.txt"]
    assert "simulated failure of page 1" in caplog.text


@pytest.mark.asyncio
async def test_distributor_applies_backpressure(
    fake_store: FakeObjectStore, test_config: MigrationConfig
) -> None:
    """
    Tests that publishing blocks while the bounded queue is full.
    """
    for i in range(5):
        fake_store.put("src", f"in/{i}.txt")
    queue: asyncio.Queue[Optional[Task]] = asyncio.Queue(maxsize=2)

    producer: asyncio.Task[int] = asyncio.create_task(
        _distributor(fake_store, test_config).run(queue, 1)
    )
    await asyncio.sleep(0.05)
    assert not producer.done()
    assert queue.full()

    received: List[Optional[Task]] = []
    while True:
        item: Optional[Task] = await asyncio.wait_for(queue.get(), timeout=5)
        received.append(item)
        if item is None:
            break

    assert await producer == 5
    assert len(received) == 6


class _BrokenStore(FakeObjectStore):
    async def list_pages(self, bucket: str, prefix: str) -> AsyncIterator[ListPage]:
        yield ListPage(keys=["in/a.txt"])
        raise RuntimeError("listing exploded")


@pytest.mark.asyncio
async def test_distributor_closes_queue_when_listing_raises(
    test_config: MigrationConfig,
) -> None:
    """
    Tests that consumers are still released if the listing raises.
    """
    queue: asyncio.Queue[Optional[Task]] = asyncio.Queue()

    with pytest.raises(RuntimeError, match="listing exploded"):
        await _distributor(_BrokenStore(), test_config).run(queue, 2)

    assert _drain(queue)[-2:] == [None, None]
