"""
Enveloppe de réponse commune à toutes les opérations
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

from .exceptions import HTTPStatusError

class ApiResponse(BaseModel):
    success: bool
    data: Any = None
    message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_envelope(self) -> "ApiResponse":
        if self.success and self.message is not None:
            raise ValueError("a successful response carries no message")
        if not self.success and (self.data is not None or not self.message):
            raise ValueError("a failed response needs a message and no data")
        return self

def _serialize(data: Any) -> Any:
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if isinstance(data, dict):
        return {key: _serialize(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_serialize(item) for item in data]
    return data

def build_response(data: Any, metadata: Optional[Dict[str, Any]] = None) -> ApiResponse:
    """Enveloppe de succès: {success: True, data, message: None}"""
    return ApiResponse(success=True, data=_serialize(data), message=None, metadata=metadata or {})

def error_response(message: str, metadata: Optional[Dict[str, Any]] = None) -> ApiResponse:
    """Enveloppe d'échec: {success: False, data: None, message}"""
    return ApiResponse(success=False, data=None, message=message, metadata=metadata or {})

def handle_error(error: BaseException, context: str, metadata: Optional[Dict[str, Any]] = None) -> ApiResponse:
    """Transforme une exception en enveloppe d'échec décrivant le contexte"""
    if isinstance(error, HTTPStatusError):
        message = f"HTTP {error.status_code}: Failed to {context}"
    else:
        cause = str(error) or type(error).__name__
        message = f"Failed to {context}: {cause}"
    return error_response(message, metadata)
