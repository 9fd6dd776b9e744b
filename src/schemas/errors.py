"""Error envelope returned by every failing endpoint, for the OpenAPI docs."""

from pydantic import BaseModel, ConfigDict

from src.core.exceptions import ErrorDetails


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: ErrorDetails = {}


class ErrorResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "permission_denied",
                    "message": "Only administrators can modify the public board",
                    "details": {"scope": "public"},
                }
            }
        }
    )

    error: ErrorDetail
