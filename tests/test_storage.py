"""
Tests for the repositories, seed loading and chat session store.
"""

import json

import pytest

from artifind.catalog.schemas import Artisan, Product
from artifind.catalog.store import load_records
from artifind.storage import ChatSessionStore, InMemoryRepository


@pytest.fixture
def repo():
    return InMemoryRepository(
        Product,
        [
            Product(id="1", title="Bowl", price=10),
            Product(id="2", title="Vase", price=20),
        ],
    )


class TestInMemoryRepository:
    def test_list_returns_a_snapshot(self, repo):
        snapshot = repo.list()
        snapshot.clear()
        assert [p.id for p in repo.list()] == ["1", "2"]

    def test_get(self, repo):
        assert repo.get("2").title == "Vase"
        assert repo.get("99") is None

    def test_insert_appends(self, repo):
        repo.insert(Product(id=repo.next_id(), title="Mug"))
        assert [p.id for p in repo.list()] == ["1", "2", "3"]

    def test_insert_rejects_duplicate_id(self, repo):
        with pytest.raises(ValueError):
            repo.insert(Product(id="1", title="Again"))

    def test_update_merges_and_revalidates(self, repo):
        updated = repo.update("1", {"price": "$15.50", "title": "Big Bowl"})
        assert updated.price == 15.5
        assert updated.title == "Big Bowl"
        assert repo.get("1") == updated

    def test_update_keeps_position_and_id(self, repo):
        repo.update("1", {"id": "42", "title": "Renamed"})
        assert [p.id for p in repo.list()] == ["1", "2"]

    def test_update_missing_returns_none(self, repo):
        assert repo.update("99", {"title": "x"}) is None

    def test_update_does_not_touch_previous_snapshots(self, repo):
        before = repo.list()
        repo.update("1", {"title": "Changed"})
        assert before[0].title == "Bowl"

    def test_delete(self, repo):
        assert repo.delete("1") is True
        assert repo.delete("1") is False
        assert [p.id for p in repo.list()] == ["2"]

    def test_ids_are_not_reused_after_delete(self, repo):
        repo.delete("2")
        assert repo.next_id() == "3"

    def test_next_id_on_empty_repository(self):
        assert InMemoryRepository(Product).next_id() == "1"


class TestLoadRecords:
    def test_bundled_seed_data_is_normalised(self, product_repo, artisan_repo):
        bowl = product_repo.get("1")
        assert bowl.price == 89.99
        assert bowl.created_at is not None
        elena = artisan_repo.get("1")
        assert elena.rating == 4.8
        assert elena.review_count == 156
        assert len(product_repo.list()) == 6
        assert len(artisan_repo.list()) == 6

    def test_missing_file_gives_empty_list(self, tmp_path):
        assert load_records(tmp_path / "nope.json", Product) == []

    def test_malformed_file_gives_empty_list(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_records(path, Product) == []

    def test_invalid_entries_are_skipped(self, tmp_path):
        path = tmp_path / "artisans.json"
        path.write_text(
            json.dumps([{"id": "1", "name": "Ok"}, {"id": "2"}, "junk"]), encoding="utf-8"
        )
        records = load_records(path, Artisan)
        assert [a.id for a in records] == ["1"]


class TestChatSessionStore:
    def test_append_and_history(self):
        store = ChatSessionStore(max_messages=20)
        assert store.append("s1", "a", "b") == 2
        assert store.append("s1", "c", "d") == 4
        assert store.history("s1") == ["a", "b", "c", "d"]
        assert store.history("s1", limit=2) == ["c", "d"]
        assert store.history("unknown") == []

    def test_history_is_capped(self):
        store = ChatSessionStore(max_messages=3)
        length = store.append("s1", *range(5))
        assert length == 5
        assert store.history("s1") == [2, 3, 4]
        assert store.total("s1") == 3

    def test_least_recently_used_session_is_evicted(self):
        store = ChatSessionStore(max_sessions=2)
        store.append("s1", "a")
        store.append("s2", "b")
        store.append("s1", "c")
        store.append("s3", "d")
        assert store.history("s2") == []
        assert store.history("s1") == ["a", "c"]
        assert store.history("s3") == ["d"]

    def test_clear(self):
        store = ChatSessionStore()
        store.append("s1", "a")
        assert store.clear("s1") is True
        assert store.clear("s1") is False
        assert store.history("s1") == []
