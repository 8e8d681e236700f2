"""Lazily created Firestore client for the document backend."""
from __future__ import annotations

from typing import Any, Optional

_client: Any = None


def get_firestore_client(project_id: Optional[str] = None) -> Any:
    """Return the process-wide Firestore client, creating it on first use.

    Raises:
        RuntimeError: if firebase-admin is not installed.
    """

    global _client
    if _client is not None:
        return _client

    try:
        import firebase_admin
        from firebase_admin import firestore
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise RuntimeError(
            "firebase-admin is required for CM_STORAGE_BACKEND=firestore. "
            "Install it or switch the contact store back to the file backend."
        ) from exc

    if not firebase_admin._apps:
        options = {"projectId": project_id} if project_id else None
        firebase_admin.initialize_app(options=options)
    _client = firestore.client()
    return _client


def reset_firestore_client() -> None:
    """Forget the cached client (used when settings change in tests)."""
    global _client
    _client = None
