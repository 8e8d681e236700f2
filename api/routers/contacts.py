"""Contacts Router - list, search, create, edit and delete contacts.

Also exposes the exchange rates currently used for salary conversion.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import (
    get_contact_service,
    serialize_contact,
    serialize_page,
    serialize_rates,
)
from api.models import ContactCreateRequest, ContactUpdateRequest
from contact_manager.contacts import ContactNotFoundError, PersistenceError
from contact_manager.services import ContactService

logger = logging.getLogger(__name__)

router = APIRouter()

rates_router = APIRouter()


def _persistence_failed(exc: PersistenceError) -> HTTPException:
    logger.error(f"[Contacts] Storage failure: {exc}")
    return HTTPException(status_code=503, detail="Contact storage is unavailable.")


@router.get("")
def list_contacts(
    q: str = Query("", description="Substring matched against name, email and phone."),
    page: int = Query(1, ge=1),
    service: ContactService = Depends(get_contact_service),
) -> dict:
    """Return one page of contacts, filtered by ``q`` when given."""
    return serialize_page(service.list_page(q, page))


@router.get("/{contact_id}")
def get_contact(
    contact_id: str,
    service: ContactService = Depends(get_contact_service),
) -> dict:
    try:
        return serialize_contact(service.get(contact_id))
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Contact not found.")


@router.post("", status_code=201)
def create_contact(
    request: ContactCreateRequest,
    service: ContactService = Depends(get_contact_service),
) -> dict:
    try:
        contact = service.create(request.to_fields())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except PersistenceError as exc:
        raise _persistence_failed(exc)
    return serialize_contact(contact)


@router.patch("/{contact_id}")
def update_contact(
    contact_id: str,
    request: ContactUpdateRequest,
    service: ContactService = Depends(get_contact_service),
) -> dict:
    try:
        contact = service.edit(contact_id, request.to_fields())
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Contact not found.")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except PersistenceError as exc:
        raise _persistence_failed(exc)
    return serialize_contact(contact)


@router.delete("/{contact_id}")
def delete_contact(
    contact_id: str,
    service: ContactService = Depends(get_contact_service),
) -> dict:
    try:
        deleted = service.remove(contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Contact not found.")
    except PersistenceError as exc:
        raise _persistence_failed(exc)
    return {"deleted": deleted, "id": contact_id}


@rates_router.get("")
def current_rates(service: ContactService = Depends(get_contact_service)) -> dict:
    """Exchange rates used for conversion (may be the fallback set)."""
    return serialize_rates(service.rates())
