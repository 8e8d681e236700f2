"""Conversion of contacts exported by the old browser app.

The browser app kept its list under the ``contacts_db`` key with
Portuguese field names (``nome``, ``telefone``, ``salario_brl``...).
"""
from __future__ import annotations

import math
from typing import Any, Dict, Optional

from .store import Contact

LEGACY_FIELDS = {
    "id": "id",
    "nome": "name",
    "telefone": "phone",
    "email": "email",
    "foto": "photo",
    "salario_brl": "salary_base",
    "salario_usd": "salary_usd",
    "salario_eur": "salary_eur",
    "data_criacao": "created_at",
    "data_atualizacao": "updated_at",
}


def _amount(record: Dict[str, Any], key: str) -> Optional[float]:
    value = record.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Legacy {key} is not a number: {value!r}")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise ValueError(f"Legacy {key} is not a number: {value!r}") from exc
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"Legacy {key} is not a finite number: {value!r}")
    return value


def contact_from_legacy(record: Dict[str, Any]) -> Contact:
    """Build a Contact from one exported record.

    Raises:
        ValueError: if the record lacks an id, a name or a salary,
            or an amount is not a finite number. Numeric strings are accepted.
    """
    values = {
        attr: record[key] for key, attr in LEGACY_FIELDS.items() if key in record
    }
    missing = [key for key in ("id", "nome", "salario_brl") if record.get(key) in (None, "")]
    if missing:
        raise ValueError(f"Legacy record missing {', '.join(missing)}")

    for key in ("salario_brl", "salario_usd", "salario_eur"):
        if key in record:
            values[LEGACY_FIELDS[key]] = _amount(record, key)

    values.setdefault("phone", "")
    values.setdefault("email", "")
    values.setdefault("created_at", "")
    # old records only got data_atualizacao after their first edit
    if not values.get("updated_at"):
        values["updated_at"] = values["created_at"]
    return Contact(**values)
