"""Contact workflows shared by the CLI and the API."""
from __future__ import annotations

import logging
import math
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..config import Settings
from ..contacts import (
    Contact,
    ContactPage,
    ContactStore,
    FileBackend,
    FirestoreBackend,
    contact_from_legacy,
    effective_results,
    paginate,
    total_pages,
)
from ..currency import CurrencyConverter, RateCache, RateSnapshot, RateSourceClient

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "phone", "email", "salary_base")
DERIVED_FIELDS = ("salary_usd", "salary_eur")


def _check_salary(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"salary_base must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"salary_base must be finite, got {value!r}")


class ContactService:
    """Entry points the presentation layer needs.

    Salary conversion happens here, before the store is touched, so a
    stored contact always carries USD/EUR values derived from its
    current base salary. Store errors propagate to the caller untouched.
    """

    def __init__(
        self,
        store: ContactStore,
        converter: CurrencyConverter,
        *,
        page_size: int = 10,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.store = store
        self.converter = converter
        self.page_size = page_size

    def list_page(self, query: str = "", page_number: int = 1) -> ContactPage:
        results = effective_results(self.store, query)
        return ContactPage(
            items=paginate(results, page_number, self.page_size),
            page=page_number,
            total_pages=total_pages(len(results), self.page_size),
            total_items=len(results),
        )

    def get(self, contact_id: str) -> Contact:
        return self.store.get(contact_id)

    def create(self, fields: Mapping[str, Any]) -> Contact:
        missing = [name for name in REQUIRED_FIELDS if fields.get(name) is None]
        if missing:
            raise ValueError(f"Missing required field(s): {', '.join(missing)}")
        _check_salary(fields["salary_base"])

        converted = self.converter.convert(fields["salary_base"])
        return self.store.add(
            name=fields["name"],
            phone=fields["phone"],
            email=fields["email"],
            salary_base=fields["salary_base"],
            photo=fields.get("photo"),
            salary_usd=converted.usd,
            salary_eur=converted.eur,
        )

    def edit(self, contact_id: str, fields: Mapping[str, Any]) -> Contact:
        """Apply ``fields`` to a contact.

        USD/EUR amounts are only ever derived from ``salary_base``; passing
        them directly raises ValueError.
        """
        derived = [name for name in DERIVED_FIELDS if name in fields]
        if derived:
            raise ValueError(f"Derived field(s) cannot be set: {', '.join(derived)}")

        changes: Dict[str, Any] = dict(fields)
        if changes.get("salary_base") is not None:
            _check_salary(changes["salary_base"])
            converted = self.converter.convert(changes["salary_base"])
            changes["salary_usd"] = converted.usd
            changes["salary_eur"] = converted.eur
        else:
            changes.pop("salary_base", None)
        return self.store.update(contact_id, changes)

    def remove(self, contact_id: str) -> bool:
        return self.store.delete(contact_id)

    def rates(self) -> RateSnapshot:
        return self.converter.get_rates()

    def import_legacy(self, records: Iterable[Mapping[str, Any]]) -> Tuple[int, int]:
        """Import records exported by the browser app.

        Missing USD/EUR values are filled in at current rates. Returns
        ``(imported, rejected)``; records already present count as neither.
        """
        contacts: List[Contact] = []
        rejected = 0
        for record in records:
            try:
                contact = contact_from_legacy(dict(record))
            except (ValueError, TypeError) as exc:
                logger.warning(f"[Contacts] Skipping legacy record: {exc}")
                rejected += 1
                continue
            if contact.salary_usd is None or contact.salary_eur is None:
                converted = self.converter.convert(contact.salary_base)
                contact.salary_usd = converted.usd
                contact.salary_eur = converted.eur
            contacts.append(contact)
        return self.store.import_contacts(contacts), rejected


def _build_backend(settings: Settings):
    if settings.storage_backend == "firestore":
        from ..firestore import get_firestore_client

        try:
            db = get_firestore_client(settings.firestore_project)
        except Exception as exc:
            logger.warning(
                f"[Contacts] Firestore unavailable, falling back to local file: {exc}"
            )
        else:
            return FirestoreBackend(db, settings.firestore_collection, settings.storage_key)

    return FileBackend(settings.data_dir / f"{settings.storage_key}.json")


def build_contact_service(
    settings: Settings,
    *,
    rate_client: Optional[RateSourceClient] = None,
) -> ContactService:
    """Wire a ContactService from settings."""
    client = rate_client or RateSourceClient(
        url=settings.rates_url,
        api_key=settings.rates_api_key,
        timeout_seconds=settings.rates_timeout_seconds,
    )
    converter = CurrencyConverter(
        client,
        RateCache(ttl=timedelta(minutes=settings.rates_ttl_minutes)),
    )
    return ContactService(
        ContactStore(_build_backend(settings)),
        converter,
        page_size=settings.page_size,
    )
