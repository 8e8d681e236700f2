"""Substring matching used by contact search."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .store import Contact


def matches_query(contact: "Contact", query: str) -> bool:
    """True when ``query`` occurs in the contact's name, email or phone.

    Name and email compare case-insensitively. Phone numbers are compared
    literally. An empty query matches every contact; callers that want
    "no filter" semantics should skip searching instead.
    """
    folded = query.casefold()
    return (
        folded in (contact.name or "").casefold()
        or folded in (contact.email or "").casefold()
        or query in (contact.phone or "")
    )
