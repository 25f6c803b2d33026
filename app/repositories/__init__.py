"""
app/repositories package marker.
"""

from app.repositories.item_repository import ItemRepository, RecordStore

__all__ = [
    "ItemRepository",
    "RecordStore",
]
