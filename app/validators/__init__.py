"""
app/validators package marker.
"""

from app.validators.item_row_validator import EXPECTED_COLUMNS, validate_row

__all__ = [
    "EXPECTED_COLUMNS",
    "validate_row",
]
