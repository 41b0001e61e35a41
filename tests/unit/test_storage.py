import json

import pytest

from cart_pilot.storage.service import MAX_ADDED_ITEMS, MAX_CHAT_MESSAGES, StorageManager
from cart_pilot.storage.views import ChatEntry


@pytest.fixture
def storage(tmp_path) -> StorageManager:
    return StorageManager(tmp_path / "cart_pilot" / "storage.json")


@pytest.mark.asyncio
async def test_target_website_defaults_to_auto(storage):
    assert await storage.get_target_website() == "auto"
    await storage.set_target_website("amazon")
    assert await storage.get_target_website() == "amazon"


@pytest.mark.asyncio
async def test_added_items_newest_first_and_bounded(storage):
    for i in range(MAX_ADDED_ITEMS + 5):
        await storage.add_successful_item(name=f"Item {i}", site="amazon", price=None)

    items = await storage.get_added_items()
    assert len(items) == MAX_ADDED_ITEMS
    assert items[0].name == f"Item {MAX_ADDED_ITEMS + 4}"
    assert items[0].price is None

    await storage.clear_added_items()
    assert await storage.get_added_items() == []


@pytest.mark.asyncio
async def test_chat_history_keeps_newest(storage):
    entries = [ChatEntry(role="user", content=str(i)) for i in range(MAX_CHAT_MESSAGES + 10)]
    await storage.save_chat_history(entries)
    await storage.append_chat(ChatEntry(role="agent", content="last"))

    history = await storage.get_chat_history()
    assert len(history) == MAX_CHAT_MESSAGES
    assert history[-1].content == "last"
    assert history[0].content == "11"


@pytest.mark.asyncio
async def test_credentials_per_host(storage):
    await storage.save_credentials_for_site("www.amazon.com", "me@example.com", "hunter2")

    record = await storage.get_credentials_for_site("www.amazon.com")
    assert record.username == "me@example.com"
    assert record.last_used
    assert await storage.get_credentials_for_site("target.com") is None

    assert await storage.clear_credentials_for_site("www.amazon.com")
    assert not await storage.clear_credentials_for_site("www.amazon.com")


@pytest.mark.asyncio
async def test_corrupt_file_reads_as_empty(storage):
    storage.path.parent.mkdir(parents=True)
    storage.path.write_text("{not json", encoding="utf-8")

    assert await storage.get_target_website() == "auto"


@pytest.mark.asyncio
async def test_stats_report_file_size(storage):
    assert (await storage.get_storage_stats()).used == 0
    await storage.set_target_website("walmart")

    stats = await storage.get_storage_stats()
    assert stats.used == storage.path.stat().st_size
    assert stats.percentage < 1
    assert json.loads(storage.path.read_text(encoding="utf-8"))["target_website"] == "walmart"
