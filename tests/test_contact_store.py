"""Tests for the contact store.

This module tests:
- Contact serialization to the persisted camelCase shape
- CRUD operations against the file backend
- Substring search over name, email and phone
- Failure handling: corrupt storage, failed writes, Firestore backend
"""
from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from contact_manager.contacts import (
    Contact,
    ContactNotFoundError,
    ContactStore,
    FileBackend,
    FirestoreBackend,
    PersistenceError,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "contacts" / "contacts_db.json"


@pytest.fixture
def store(db_path) -> ContactStore:
    return ContactStore(FileBackend(db_path))


@pytest.fixture
def ana_fields():
    return {
        "name": "Ana Silva",
        "phone": "11999990000",
        "email": "ana@x.com",
        "salary_base": 1000.0,
        "salary_usd": 200.0,
        "salary_eur": 166.67,
    }


# =============================================================================
# Contact
# =============================================================================

class TestContact:

    def test_to_dict_uses_stored_field_names(self):
        contact = Contact(
            id="c1",
            name="Ana",
            phone="1",
            email="a@x.com",
            salary_base=10.0,
            salary_usd=2.0,
            salary_eur=1.67,
            created_at="2025-01-01T00:00:00+00:00",
            updated_at="2025-01-01T00:00:00+00:00",
        )

        data = contact.to_dict()

        assert data["salaryBase"] == 10.0
        assert data["salaryUSD"] == 2.0
        assert data["salaryEUR"] == 1.67
        assert data["createdAt"] == "2025-01-01T00:00:00+00:00"
        assert data["updatedAt"] == "2025-01-01T00:00:00+00:00"
        assert data["photo"] is None
        assert "salary_base" not in data

    def test_from_dict_tolerates_missing_optional_fields(self):
        contact = Contact.from_dict(
            {"id": "c1", "name": "Ana", "phone": "1", "email": "a@x.com", "salaryBase": 5}
        )

        assert contact.photo is None
        assert contact.salary_usd is None
        assert contact.salary_eur is None


# =============================================================================
# CRUD
# =============================================================================

class TestAdd:

    def test_add_assigns_id_and_timestamps(self, store, ana_fields):
        contact = store.add(**ana_fields)

        assert contact.id
        assert contact.created_at
        assert contact.updated_at == contact.created_at
        assert contact.name == "Ana Silva"

    def test_add_then_get_all_round_trip(self, store, ana_fields):
        contact = store.add(**ana_fields)

        contacts = store.get_all()

        assert len(contacts) == 1
        stored = contacts[0]
        assert stored == contact
        for key, value in ana_fields.items():
            assert getattr(stored, key) == value

    def test_add_persists_json_array(self, store, db_path, ana_fields):
        store.add(**ana_fields)

        data = json.loads(db_path.read_text(encoding="utf-8"))

        assert isinstance(data, list)
        assert data[0]["name"] == "Ana Silva"
        assert data[0]["salaryBase"] == 1000.0

    def test_add_keeps_insertion_order(self, store, ana_fields):
        first = store.add(**ana_fields)
        second = store.add(**{**ana_fields, "name": "Bruno"})

        assert [c.id for c in store.get_all()] == [first.id, second.id]

    def test_add_regenerates_colliding_id(self, store, ana_fields):
        existing = store.add(**ana_fields)
        fresh = MagicMock(hex="fresh-id")
        clash = MagicMock(hex=existing.id)

        with patch("contact_manager.contacts.store.uuid.uuid4", side_effect=[clash, fresh]):
            contact = store.add(**ana_fields)

        assert contact.id == "fresh-id"

    def test_ids_are_unique(self, store, ana_fields):
        ids = {store.add(**ana_fields).id for _ in range(20)}

        assert len(ids) == 20

    def test_concurrent_adds_are_all_kept(self, store, ana_fields):
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: store.add(**{**ana_fields, "name": f"P{i}"}), range(16)))

        assert sorted(c.name for c in store.get_all()) == sorted(f"P{i}" for i in range(16))


class TestGetAll:

    def test_missing_file_is_empty(self, store):
        assert store.get_all() == []

    def test_repeated_reads_are_identical(self, store, ana_fields):
        store.add(**ana_fields)
        store.add(**{**ana_fields, "name": "Bruno"})

        assert store.get_all() == store.get_all()

    def test_corrupt_file_reads_as_empty(self, store, db_path, caplog):
        db_path.parent.mkdir(parents=True)
        db_path.write_text("{not json", encoding="utf-8")

        assert store.get_all() == []
        assert "Read failed" in caplog.text

    def test_non_list_document_reads_as_empty(self, store, db_path):
        db_path.parent.mkdir(parents=True)
        db_path.write_text('{"contacts": []}', encoding="utf-8")

        assert store.get_all() == []


class TestGet:

    def test_get_existing(self, store, ana_fields):
        contact = store.add(**ana_fields)

        assert store.get(contact.id) == contact

    def test_get_missing_raises(self, store):
        with pytest.raises(ContactNotFoundError):
            store.get("nope")


class TestUpdate:

    def test_update_changes_only_field_and_updated_at(self, store, ana_fields):
        contact = store.add(**ana_fields)

        with patch(
            "contact_manager.contacts.store._now",
            return_value="2030-01-01T00:00:00+00:00",
        ):
            updated = store.update(contact.id, {"phone": "21888880000"})

        assert updated.phone == "21888880000"
        assert updated.updated_at == "2030-01-01T00:00:00+00:00"
        before = contact.to_dict()
        after = updated.to_dict()
        for key in before:
            if key not in ("phone", "updatedAt"):
                assert after[key] == before[key]

    def test_update_is_persisted(self, store, ana_fields):
        contact = store.add(**ana_fields)
        store.update(contact.id, {"name": "Ana S."})

        assert store.get_all()[0].name == "Ana S."

    def test_update_keeps_position(self, store, ana_fields):
        first = store.add(**ana_fields)
        second = store.add(**{**ana_fields, "name": "Bruno"})
        store.update(first.id, {"name": "Ana S."})

        assert [c.id for c in store.get_all()] == [first.id, second.id]

    def test_update_missing_raises(self, store, ana_fields):
        store.add(**ana_fields)

        with pytest.raises(ContactNotFoundError):
            store.update("nope", {"name": "X"})

    @pytest.mark.parametrize("field", ["id", "created_at", "updated_at", "nickname"])
    def test_update_rejects_read_only_and_unknown_fields(self, store, ana_fields, field):
        contact = store.add(**ana_fields)

        with pytest.raises(ValueError, match=field):
            store.update(contact.id, {field: "x"})

        assert store.get(contact.id) == contact


class TestDelete:

    def test_delete_removes_contact(self, store, ana_fields):
        keep = store.add(**ana_fields)
        gone = store.add(**{**ana_fields, "name": "Bruno"})

        assert store.delete(gone.id) is True
        assert [c.id for c in store.get_all()] == [keep.id]

    def test_delete_missing_raises_and_leaves_collection(self, store, db_path, ana_fields):
        store.add(**ana_fields)
        before = db_path.read_bytes()

        with pytest.raises(ContactNotFoundError):
            store.delete("nope")

        assert db_path.read_bytes() == before


# =============================================================================
# Search
# =============================================================================

class TestSearch:

    @pytest.fixture
    def populated(self, store, ana_fields):
        store.add(**ana_fields)
        store.add(
            name="Bruno Costa",
            phone="(21) 3333-4444",
            email="bruno@empresa.com.br",
            salary_base=5000.0,
        )
        return store

    @pytest.mark.parametrize("query", ["ana", "ANA", "Silva", "ana@x"])
    def test_name_and_email_match_any_case(self, populated, query):
        results = populated.search(query)

        assert [c.name for c in results] == ["Ana Silva"]

    def test_phone_matches_literally(self, populated):
        assert [c.name for c in populated.search("3333-4444")] == ["Bruno Costa"]
        assert [c.name for c in populated.search("99999")] == ["Ana Silva"]

    def test_no_match(self, populated):
        assert populated.search("zzz") == []

    def test_results_keep_storage_order(self, populated):
        results = populated.search("a")

        assert [c.name for c in results] == ["Ana Silva", "Bruno Costa"]

    def test_empty_query_matches_everything(self, populated):
        assert len(populated.search("")) == 2


# =============================================================================
# Failure handling
# =============================================================================

class TestPersistenceFailures:

    def test_mutation_on_corrupt_storage_raises_and_keeps_file(self, store, db_path, ana_fields):
        db_path.parent.mkdir(parents=True)
        db_path.write_text("[{broken", encoding="utf-8")

        with pytest.raises(PersistenceError):
            store.add(**ana_fields)

        assert db_path.read_text(encoding="utf-8") == "[{broken"

    def test_failed_write_leaves_previous_state(self, store, db_path, ana_fields):
        existing = store.add(**ana_fields)
        before = db_path.read_bytes()

        with patch(
            "contact_manager.contacts.store.os.replace",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(PersistenceError):
                store.add(**{**ana_fields, "name": "Bruno"})

        assert db_path.read_bytes() == before
        assert store.get_all() == [existing]
        assert list(db_path.parent.glob("*.tmp")) == []

    def test_record_without_id_is_corrupt(self, store, db_path, ana_fields):
        db_path.parent.mkdir(parents=True)
        db_path.write_text('[{"name": "No Id"}]', encoding="utf-8")

        assert store.get_all() == []
        with pytest.raises(PersistenceError):
            store.update("x", {"name": "y"})


class TestFirestoreBackend:

    @pytest.fixture
    def mock_db(self):
        db = MagicMock()
        doc = db.collection.return_value.document.return_value
        doc.get.return_value.exists = False
        return db

    def test_uses_single_document(self, mock_db):
        FirestoreBackend(mock_db, "contact_manager", "contacts_db")

        mock_db.collection.assert_called_once_with("contact_manager")
        mock_db.collection.return_value.document.assert_called_once_with("contacts_db")

    def test_add_writes_whole_collection(self, mock_db, ana_fields):
        store = ContactStore(FirestoreBackend(mock_db, "contact_manager", "contacts_db"))

        contact = store.add(**ana_fields)

        doc = mock_db.collection.return_value.document.return_value
        payload = doc.set.call_args[0][0]
        assert payload["contacts"] == [contact.to_dict()]

    def test_reads_existing_document(self, mock_db):
        doc = mock_db.collection.return_value.document.return_value
        doc.get.return_value.exists = True
        doc.get.return_value.to_dict.return_value = {
            "contacts": [
                {"id": "c1", "name": "Ana", "phone": "1", "email": "a@x.com", "salaryBase": 1}
            ]
        }
        store = ContactStore(FirestoreBackend(mock_db, "contact_manager", "contacts_db"))

        assert [c.id for c in store.get_all()] == ["c1"]

    def test_write_failure_raises_persistence_error(self, mock_db, ana_fields):
        doc = mock_db.collection.return_value.document.return_value
        doc.set.side_effect = RuntimeError("unavailable")
        store = ContactStore(FirestoreBackend(mock_db, "contact_manager", "contacts_db"))

        with pytest.raises(PersistenceError):
            store.add(**ana_fields)

    def test_read_failure_degrades_to_empty(self, mock_db):
        doc = mock_db.collection.return_value.document.return_value
        doc.get.side_effect = RuntimeError("unavailable")
        store = ContactStore(FirestoreBackend(mock_db, "contact_manager", "contacts_db"))

        assert store.get_all() == []
