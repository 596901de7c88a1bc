"""Tests for the transaction store: mutations, persistence and notifications."""

import json

import pytest

from finance_tracker.models import StoreEventType, Transaction
from finance_tracker.services.storage import InMemoryKeyValueStore
from finance_tracker.store import TransactionStore

from conftest import FailingKeyValueStore


KEY = "@transactions"


def make_transaction(id: int, **overrides) -> Transaction:
    data = {
        "id": id,
        "type": "expense",
        "amount": "10",
        "category": "Kaffee",
        "date": "10 January 2024",
        "account": "Personal",
        "repeating": "No",
    }
    data.update(overrides)
    return Transaction.model_validate(data)


def stored_list(storage: InMemoryKeyValueStore) -> list[dict]:
    return json.loads(storage.snapshot()[KEY])


@pytest.fixture
def store(storage, clock, ids) -> TransactionStore:
    return TransactionStore(storage, clock=clock, id_allocator=ids)


class TestAdd:
    """Tests for adding transactions."""

    async def test_add_non_repeating(self, store, storage):
        """Test a plain transaction is appended and persisted."""
        store.add(make_transaction(1))
        await store.flush()

        assert [t.id for t in store.transactions] == [1]
        assert [r["id"] for r in stored_list(storage)] == [1]

    async def test_add_monthly_generates_occurrences(self, store, storage):
        """Test a monthly origin on 15 Jan with now = 1 Jan 2024."""
        origin = make_transaction(
            1, type="income", amount="100", date="15 January 2024", repeating="Monthly"
        )
        store.add(origin)
        await store.flush()

        assert len(store) == 12
        assert store.transactions[0].id == 1
        occurrences = store.occurrences_of(1)
        assert len(occurrences) == 11
        assert occurrences[-1].date == "15 December 2024"

        records = stored_list(storage)
        assert len(records) == 12
        assert all(r["originalId"] == 1 for r in records[1:])
        assert "originalId" not in records[0]

    async def test_occurrence_ids_are_unique(self, store):
        """Test generated ids never collide with existing ones."""
        store.add(make_transaction(1_700_000_000_000))
        store.add(make_transaction(2, repeating="Monthly"))
        await store.flush()

        all_ids = [t.id for t in store.transactions]
        assert len(all_ids) == len(set(all_ids))

    async def test_add_keeps_order(self, store):
        """Test insertion order is preserved across batches."""
        store.add(make_transaction(3))
        store.add(make_transaction(1))
        store.add(make_transaction(2))
        await store.flush()
        assert [t.id for t in store.transactions] == [3, 1, 2]

    def test_add_outside_event_loop(self, store, storage):
        """Test writes complete synchronously without a running loop."""
        store.add(make_transaction(1))
        assert [r["id"] for r in stored_list(storage)] == [1]


class TestRemove:
    """Tests for removing transactions."""

    async def test_remove_origin_cascades(self, store, storage):
        """Test removing an origin removes its occurrences."""
        store.add(make_transaction(1, repeating="Monthly", date="15 January 2024"))
        store.add(make_transaction(2))
        store.remove(1)
        await store.flush()

        assert [t.id for t in store.transactions] == [2]
        assert [r["id"] for r in stored_list(storage)] == [2]

    async def test_remove_occurrence_only(self, store):
        """Test removing one occurrence keeps the origin and the others."""
        store.add(make_transaction(1, repeating="Monthly", date="15 January 2024"))
        target = store.occurrences_of(1)[3]

        store.remove(target.id)
        await store.flush()

        assert store.get(1) is not None
        assert store.get(target.id) is None
        assert len(store.occurrences_of(1)) == 10

    async def test_remove_missing_is_noop(self, store, storage):
        """Test removing an unknown id changes nothing and does not write."""
        events = []
        store.subscribe(events.append)

        store.remove(999)
        await store.flush()

        assert len(store) == 0
        assert events == []
        assert KEY not in storage.snapshot()


class TestUpdate:
    """Tests for patching transactions."""

    async def test_update_notes(self, store, storage):
        """Test a patch is merged and persisted."""
        store.add(make_transaction(1))
        store.update(1, {"notes": "with milk"})
        await store.flush()

        assert store.get(1).notes == "with milk"
        assert stored_list(storage)[0]["notes"] == "with milk"

    async def test_update_does_not_cascade(self, store):
        """Test that updating an origin leaves every other transaction untouched."""
        store.add(make_transaction(1, repeating="Monthly", date="15 January 2024"))
        store.add(make_transaction(500, amount="3", date="2 January 2024"))
        before = {t.id: t.to_record() for t in store.transactions if t.id != 1}

        store.update(1, {"amount": "99", "notes": "rent"})
        await store.flush()

        after = {t.id: t.to_record() for t in store.transactions if t.id != 1}
        assert store.get(1).amount == "99"
        assert len(before) > 1
        assert after == before

    async def test_update_does_not_regenerate(self, store):
        """Test changing repeating or date does not generate occurrences."""
        store.add(make_transaction(1))
        store.update(1, {"repeating": "Monthly", "date": "1 February 2024"})
        await store.flush()

        assert len(store) == 1
        assert store.get(1).date == "1 February 2024"

    async def test_update_accepts_stored_names(self, store):
        """Test camelCase keys are accepted."""
        store.add(make_transaction(1))
        store.update(1, {"categoryId": 13})
        assert store.get(1).category_id == 13
        await store.flush()

    async def test_update_missing_is_noop(self, store):
        """Test updating an unknown id is ignored."""
        events = []
        store.subscribe(events.append)
        store.update(42, {"notes": "x"})
        assert events == []

    def test_update_rejects_id_change(self, store):
        """Test the id cannot be patched."""
        store.add(make_transaction(1))
        with pytest.raises(ValueError, match="cannot be changed"):
            store.update(1, {"id": 2})

    def test_update_rejects_unknown_field(self, store):
        """Test unknown fields are rejected."""
        store.add(make_transaction(1))
        with pytest.raises(KeyError):
            store.update(1, {"colour": "red"})

    def test_update_rejects_origin_link_change(self, store):
        """Test an occurrence cannot be re-pointed at another origin."""
        store.add(make_transaction(1, repeating="Monthly", date="15 January 2024"))
        occurrence = store.occurrences_of(1)[0]

        with pytest.raises(ValueError, match="cannot be changed"):
            store.update(occurrence.id, {"originalId": 5})
        with pytest.raises(ValueError, match="cannot be changed"):
            store.update(1, {"original_id": occurrence.id})

        assert store.get(occurrence.id).original_id == 1
        assert store.get(1).original_id is None

    def test_update_rejects_invalid_value(self, store):
        """Test a value outside the schema raises ValueError and changes nothing."""
        store.add(make_transaction(1))
        events = []
        store.subscribe(events.append)

        with pytest.raises(ValueError, match="Invalid update for transaction 1"):
            store.update(1, {"type": "transfer"})

        assert store.get(1).type == "expense"
        assert events == []


class TestLoad:
    """Tests for loading stored transactions."""

    async def test_load_existing(self, clock):
        """Test records are loaded in stored order."""
        records = [make_transaction(i).to_record() for i in (5, 3, 4)]
        storage = InMemoryKeyValueStore({KEY: json.dumps(records)})
        store = TransactionStore(storage, clock=clock)

        loaded = await store.load()

        assert [t.id for t in loaded] == [5, 3, 4]

    async def test_load_missing_key(self, store):
        """Test nothing stored yields an empty list."""
        assert await store.load() == []

    async def test_load_corrupt_json(self, clock):
        """Test unreadable data falls back to empty."""
        storage = InMemoryKeyValueStore({KEY: "{not json"})
        store = TransactionStore(storage, clock=clock)
        events = []
        store.subscribe(events.append)

        assert await store.load() == []
        assert events[0].event_type == StoreEventType.LOAD_FAILED

    async def test_load_wrong_shape(self, clock):
        """Test a non-list value falls back to empty."""
        storage = InMemoryKeyValueStore({KEY: json.dumps({"id": 1})})
        store = TransactionStore(storage, clock=clock)
        assert await store.load() == []

    async def test_load_read_failure(self, clock):
        """Test a failing read falls back to empty."""
        storage = FailingKeyValueStore(fail_reads=True)
        store = TransactionStore(storage, clock=clock)
        assert await store.load() == []

    async def test_load_skips_invalid_records(self, clock):
        """Test records missing required fields are skipped."""
        records = [make_transaction(1).to_record(), {"id": 2}, "junk"]
        storage = InMemoryKeyValueStore({KEY: json.dumps(records)})
        store = TransactionStore(storage, clock=clock)
        events = []
        store.subscribe(events.append)

        loaded = await store.load()

        assert [t.id for t in loaded] == [1]
        assert events[0].details == {"count": 1, "skipped": 2}


class TestPersistence:
    """Tests for write behaviour."""

    async def test_writes_land_in_order(self, store, storage):
        """Test the final stored list matches memory after many writes."""
        for i in range(1, 6):
            store.add(make_transaction(i))
        store.remove(3)
        store.update(5, {"notes": "last"})
        await store.flush()

        assert stored_list(storage) == [t.to_record() for t in store.transactions]

    async def test_write_failure_keeps_memory(self, clock):
        """Test a failed write is reported but memory keeps the change."""
        storage = FailingKeyValueStore()
        store = TransactionStore(storage, clock=clock)
        events = []
        store.subscribe(events.append)

        store.add(make_transaction(1))
        await store.flush()

        assert [t.id for t in store.transactions] == [1]
        assert store.last_persist_error is not None
        assert [e.event_type for e in events] == [
            StoreEventType.TRANSACTION_ADDED,
            StoreEventType.PERSIST_FAILED,
        ]

    async def test_recovery_after_failure(self, clock):
        """Test the next successful write stores the full list."""
        storage = FailingKeyValueStore()
        store = TransactionStore(storage, clock=clock)

        store.add(make_transaction(1))
        await store.flush()
        storage.fail_writes = False
        store.add(make_transaction(2))
        await store.flush()

        assert store.last_persist_error is None
        assert [r["id"] for r in json.loads(await storage.get(KEY))] == [1, 2]

    async def test_clear(self, store, storage):
        """Test clear empties memory and storage."""
        store.add(make_transaction(1))
        store.clear()
        await store.flush()

        assert len(store) == 0
        assert stored_list(storage) == []


class TestNotifications:
    """Tests for subscriber notifications."""

    async def test_listener_receives_events(self, store):
        """Test one event per effective mutation."""
        events = []
        store.subscribe(events.append)

        store.add(make_transaction(1))
        store.update(1, {"notes": "n"})
        store.remove(1)
        await store.flush()

        assert [e.event_type for e in events] == [
            StoreEventType.TRANSACTION_ADDED,
            StoreEventType.TRANSACTION_UPDATED,
            StoreEventType.TRANSACTION_REMOVED,
        ]

    async def test_unsubscribe(self, store):
        """Test the returned function stops notifications."""
        events = []
        unsubscribe = store.subscribe(events.append)
        unsubscribe()

        store.add(make_transaction(1))
        await store.flush()
        assert events == []

    async def test_broken_listener_does_not_break_mutation(self, store):
        """Test a raising listener is isolated."""
        def broken(event):
            raise RuntimeError("boom")

        events = []
        store.subscribe(broken)
        store.subscribe(events.append)

        store.add(make_transaction(1))
        await store.flush()

        assert len(store) == 1
        assert len(events) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
