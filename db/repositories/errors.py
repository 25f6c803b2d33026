"""
Repository-layer exceptions for upload staging flows.
"""

from __future__ import annotations


class FileStagingError(Exception):
    """Raised when writing or deleting a staged upload fails."""
