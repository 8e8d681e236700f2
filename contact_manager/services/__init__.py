"""Service layer used by the CLI and the API."""
from .contacts import ContactService, build_contact_service

__all__ = ["ContactService", "build_contact_service"]
