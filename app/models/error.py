"""Error response models."""

from datetime import datetime

from pydantic import BaseModel

GENERIC_ERROR_DETAIL = "An internal server error occurred"


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: str
    timestamp: datetime
    request_id: str
