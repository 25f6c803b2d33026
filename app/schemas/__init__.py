"""
app/schemas package marker.
"""

from app.schemas.uploads import UploadAcceptedResponse, UploadResultResponse, UploadStatusResponse

__all__ = [
    "UploadAcceptedResponse",
    "UploadResultResponse",
    "UploadStatusResponse",
]
