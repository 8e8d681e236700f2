"""Persistent contact storage - one JSON collection, file or Firestore."""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .search import matches_query

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Raised when the contact collection cannot be read or written."""


class ContactNotFoundError(LookupError):
    """Raised when an update or delete targets an unknown contact id."""

    def __init__(self, contact_id: str) -> None:
        super().__init__(f"Contact not found: {contact_id}")
        self.contact_id = contact_id


# Python attribute -> persisted field name
_FIELD_NAMES: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "phone": "phone",
    "email": "email",
    "photo": "photo",
    "salary_base": "salaryBase",
    "salary_usd": "salaryUSD",
    "salary_eur": "salaryEUR",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}

UPDATABLE_FIELDS: Set[str] = {
    "name",
    "phone",
    "email",
    "photo",
    "salary_base",
    "salary_usd",
    "salary_eur",
}


@dataclass(slots=True)
class Contact:
    """A stored contact record."""

    id: str
    name: str
    phone: str
    email: str
    salary_base: float
    photo: Optional[str] = None  # encoded payload, opaque to the store
    salary_usd: Optional[float] = None
    salary_eur: Optional[float] = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            stored: getattr(self, attr) for attr, stored in _FIELD_NAMES.items()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Contact:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            email=data.get("email", ""),
            salary_base=data.get("salaryBase", 0),
            photo=data.get("photo"),
            salary_usd=data.get("salaryUSD"),
            salary_eur=data.get("salaryEUR"),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- Backends ---


class FileBackend:
    """Whole collection as one JSON array on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read(self) -> Optional[List[Dict[str, Any]]]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, list):
            raise PersistenceError(f"{self.path} does not hold a contact list")
        return data

    def write(self, records: List[Dict[str, Any]]) -> None:
        # Write beside the target and swap, so readers never see half a file.
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.stem}-", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc


class FirestoreBackend:
    """Whole collection as an array field on a single Firestore document."""

    def __init__(self, db: Any, collection: str, key: str) -> None:
        self._doc = db.collection(collection).document(key)

    def read(self) -> Optional[List[Dict[str, Any]]]:
        try:
            snapshot = self._doc.get()
        except Exception as exc:
            raise PersistenceError(f"Firestore read failed: {exc}") from exc
        if not snapshot.exists:
            return None
        data = (snapshot.to_dict() or {}).get("contacts")
        if not isinstance(data, list):
            raise PersistenceError("Firestore contact document is malformed")
        return data

    def write(self, records: List[Dict[str, Any]]) -> None:
        try:
            self._doc.set({"contacts": records, "updatedAt": _now()})
        except Exception as exc:
            raise PersistenceError(f"Firestore write failed: {exc}") from exc


# --- Store ---


class ContactStore:
    """Owns the contact collection.

    Every operation reads the full collection from the backend and every
    mutation writes the full collection back. Callers only ever receive
    fresh Contact objects decoded from storage. Mutations hold a lock for
    the whole read-modify-write cycle.
    """

    def __init__(self, backend: Any) -> None:
        self.backend = backend
        self._lock = threading.Lock()

    def _load(self) -> List[Contact]:
        records = self.backend.read()
        if records is None:
            return []
        try:
            return [Contact.from_dict(record) for record in records]
        except (KeyError, TypeError, AttributeError) as exc:
            raise PersistenceError(f"Corrupt contact record: {exc}") from exc

    def _save(self, contacts: List[Contact]) -> None:
        self.backend.write([contact.to_dict() for contact in contacts])

    def get_all(self) -> List[Contact]:
        """Return every contact in storage order, or [] if storage is unreadable."""
        try:
            return self._load()
        except PersistenceError as exc:
            logger.error(f"[Contacts] Read failed, returning empty list: {exc}")
            return []

    def get(self, contact_id: str) -> Contact:
        for contact in self.get_all():
            if contact.id == contact_id:
                return contact
        raise ContactNotFoundError(contact_id)

    def add(
        self,
        *,
        name: str,
        phone: str,
        email: str,
        salary_base: float,
        photo: Optional[str] = None,
        salary_usd: Optional[float] = None,
        salary_eur: Optional[float] = None,
    ) -> Contact:
        """Create a contact with a fresh id and timestamps and persist it.

        Raises:
            PersistenceError: if the collection cannot be read or written.
                Nothing is stored in that case.
        """
        with self._lock:
            contacts = self._load()
            taken = {c.id for c in contacts}
            contact_id = uuid.uuid4().hex
            while contact_id in taken:
                contact_id = uuid.uuid4().hex

            now = _now()
            contact = Contact(
                id=contact_id,
                name=name,
                phone=phone,
                email=email,
                salary_base=salary_base,
                photo=photo,
                salary_usd=salary_usd,
                salary_eur=salary_eur,
                created_at=now,
                updated_at=now,
            )
            self._save(contacts + [contact])

        logger.info(f"[Contacts] Added {contact.id}")
        return contact

    def update(self, contact_id: str, changes: Dict[str, Any]) -> Contact:
        """Merge ``changes`` over an existing contact and refresh updated_at.

        Raises:
            ValueError: if ``changes`` names an unknown or immutable field.
            ContactNotFoundError: if no contact has ``contact_id``.
            PersistenceError: if the collection cannot be read or written.
        """
        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown or read-only field(s): {', '.join(unknown)}")

        with self._lock:
            contacts = self._load()
            for index, existing in enumerate(contacts):
                if existing.id == contact_id:
                    break
            else:
                raise ContactNotFoundError(contact_id)

            updated = replace(existing, **changes, updated_at=_now())
            self._save(contacts[:index] + [updated] + contacts[index + 1:])

        logger.info(f"[Contacts] Updated {contact_id}: {', '.join(sorted(changes))}")
        return updated

    def delete(self, contact_id: str) -> bool:
        """Remove a contact.

        Raises:
            ContactNotFoundError: if no contact has ``contact_id``; the
                collection is not rewritten.
            PersistenceError: if the collection cannot be read or written.
        """
        with self._lock:
            contacts = self._load()
            remaining = [c for c in contacts if c.id != contact_id]
            if len(remaining) == len(contacts):
                raise ContactNotFoundError(contact_id)
            self._save(remaining)

        logger.info(f"[Contacts] Deleted {contact_id}")
        return True

    def import_contacts(self, incoming: List[Contact]) -> int:
        """Append already-built contacts, keeping their ids and timestamps.

        Contacts whose id is already stored are skipped. Returns the number
        added; the collection is written once.
        """
        with self._lock:
            contacts = self._load()
            taken = {c.id for c in contacts}
            added = []
            for contact in incoming:
                if contact.id in taken:
                    continue
                taken.add(contact.id)
                added.append(contact)
            if added:
                self._save(contacts + added)

        if added:
            logger.info(f"[Contacts] Imported {len(added)} contact(s)")
        return len(added)

    def search(self, query: str) -> List[Contact]:
        """Contacts whose name/email (any case) or phone (exact) contain query."""
        return [c for c in self.get_all() if matches_query(c, query)]
