"""API Routers Package.

- contacts.py: contact list/search/pagination and CRUD, plus /rates

Usage in main.py:
    from api.routers import contacts_router, rates_router

    app.include_router(contacts_router, prefix="/contacts", tags=["contacts"])
    app.include_router(rates_router, prefix="/rates", tags=["rates"])
"""

from .contacts import router as contacts_router
from .contacts import rates_router

__all__ = [
    "contacts_router",
    "rates_router",
]
