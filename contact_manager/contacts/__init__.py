"""Contact storage, search and pagination."""
from .store import (
    Contact,
    ContactNotFoundError,
    ContactStore,
    FileBackend,
    FirestoreBackend,
    PersistenceError,
    UPDATABLE_FIELDS,
)
from .legacy import contact_from_legacy
from .search import matches_query
from .query import (
    ContactPage,
    ContactQuery,
    effective_results,
    paginate,
    total_pages,
)

__all__ = [
    # Storage
    "Contact",
    "ContactNotFoundError",
    "ContactStore",
    "FileBackend",
    "FirestoreBackend",
    "PersistenceError",
    "UPDATABLE_FIELDS",
    # Legacy import
    "contact_from_legacy",
    # Search
    "matches_query",
    # Pagination
    "ContactPage",
    "ContactQuery",
    "effective_results",
    "paginate",
    "total_pages",
]
