"""
app/validators/item_row_validator.py

Row-level validation and type parsing for item uploads.
"""

from __future__ import annotations

import re
from collections.abc import MutableSet, Sequence
from datetime import date

from app.domain.items import (
    REASON_COLUMN_COUNT,
    REASON_DUPLICATE_EXTERNAL_ID,
    REASON_EXPIRY_INVALID,
    REASON_EXTERNAL_ID_EMPTY,
    REASON_NAME_EMPTY,
    REASON_QUANTITY_INVALID,
    Invalid,
    ItemRecord,
    Valid,
    ValidationOutcome,
)

EXPECTED_COLUMNS: tuple[str, ...] = ("externalId", "name", "quantity", "expiryDate")

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# `items.quantity` is a 32-bit INTEGER column.
_QUANTITY_MIN = -(2**31)
_QUANTITY_MAX = 2**31 - 1


def validate_row(row: Sequence[str | None], seen_ids: MutableSet[str]) -> ValidationOutcome:
    """
    Validate one raw CSV row against the item rules.

    Rules run in a fixed order and the first violation wins. A row that gets
    past the duplicate check registers its external id in ``seen_ids`` right
    away, so a later row reusing the id is rejected even when this row fails
    a type check afterwards. ``seen_ids`` is mutated without locking: call
    this from one thread per job.
    """

    if len(row) != len(EXPECTED_COLUMNS):
        return Invalid(REASON_COLUMN_COUNT)

    external_id = _clean(row[0])
    name = _clean(row[1])
    quantity_raw = _clean(row[2])
    expiry_raw = _clean(row[3])

    if not external_id:
        return Invalid(REASON_EXTERNAL_ID_EMPTY)
    if not name:
        return Invalid(REASON_NAME_EMPTY)

    if external_id in seen_ids:
        return Invalid(REASON_DUPLICATE_EXTERNAL_ID)
    seen_ids.add(external_id)

    quantity: int | None = None
    if quantity_raw:
        quantity = _parse_quantity(quantity_raw)
        if quantity is None:
            return Invalid(REASON_QUANTITY_INVALID)

    expiry_date: date | None = None
    if expiry_raw:
        expiry_date = _parse_iso_date(expiry_raw)
        if expiry_date is None:
            return Invalid(REASON_EXPIRY_INVALID)

    return Valid(
        ItemRecord(
            external_id=external_id,
            name=name,
            quantity=quantity,
            expiry_date=expiry_date,
        )
    )


def _clean(value: str | None) -> str:
    if value is None:
        return ""
    return value.strip()


def _parse_quantity(raw: str) -> int | None:
    # int() alone would also accept "1_000" and non-ASCII digits.
    if not _INTEGER_PATTERN.match(raw) or not raw.isascii():
        return None
    value = int(raw)
    if value < _QUANTITY_MIN or value > _QUANTITY_MAX:
        return None
    return value


def _parse_iso_date(raw: str) -> date | None:
    if not _ISO_DATE_PATTERN.match(raw) or not raw.isascii():
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None
