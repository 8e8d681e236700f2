"""Request models for the contact API.

Field names are camelCase on the wire to match the stored record shape.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContactCreateRequest(BaseModel):
    """Body for POST /contacts."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    salary_base: float = Field(..., alias="salaryBase", gt=0, allow_inf_nan=False)
    photo: Optional[str] = Field(
        None, description="Encoded photo payload (e.g. a base64 data URL)."
    )

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ContactUpdateRequest(BaseModel):
    """Body for PATCH /contacts/{id}; only supplied fields change."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=1)
    salary_base: Optional[float] = Field(
        None, alias="salaryBase", gt=0, allow_inf_nan=False
    )
    photo: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        # null clears the photo; for every other field it means "unchanged"
        fields = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in fields.items()
            if value is not None or key == "photo"
        }
