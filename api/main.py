"""FastAPI service for the contact manager."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import ALLOWED_ORIGINS, get_settings
from api.routers import contacts_router, rates_router


app = FastAPI(
    title="Contact Manager API",
    version="0.1.0",
    description="Contacts with BRL salaries mirrored into USD and EUR.",
)

origins = [origin for origin in ALLOWED_ORIGINS if origin]

if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(contacts_router, prefix="/contacts", tags=["contacts"])
app.include_router(rates_router, prefix="/rates", tags=["rates"])


@app.get("/health")
def health_check() -> dict:
    settings = get_settings()
    return {
        "status": "ok",
        "environment": settings.environment,
        "storage": settings.storage_backend,
    }
