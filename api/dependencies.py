"""Shared dependencies and serialization helpers for API routers."""
from __future__ import annotations

import os
from functools import lru_cache

from contact_manager.config import Settings, load_settings
from contact_manager.contacts import Contact, ContactPage
from contact_manager.currency import RateSnapshot, format_display
from contact_manager.services import ContactService, build_contact_service


ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    os.getenv("CM_ALLOWED_FRONTEND", "").strip(),
]


@lru_cache
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return load_settings()


@lru_cache
def get_contact_service() -> ContactService:
    """One service per process so the rate cache is shared across requests."""
    return build_contact_service(get_settings())


def serialize_contact(contact: Contact) -> dict:
    return contact.to_dict()


def serialize_page(page: ContactPage) -> dict:
    return {
        "items": [serialize_contact(c) for c in page.items],
        "page": page.page,
        "totalPages": page.total_pages,
        "totalItems": page.total_items,
    }


def serialize_rates(snapshot: RateSnapshot) -> dict:
    body = snapshot.to_dict()
    body["display"] = {
        "usdRate": format_display(snapshot.usd, "BRL"),
        "eurRate": format_display(snapshot.eur, "BRL"),
    }
    return body
