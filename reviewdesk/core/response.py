"""Unified service response formats."""

from typing import Generic, TypeVar, Optional, Any, List
from pydantic import BaseModel

T = TypeVar('T')


class ServiceResponse(BaseModel, Generic[T]):
    """Envelope returned by every service call."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: int = 200
    message: Optional[str] = None
    details: Optional[Any] = None
    
    @classmethod
    def success_response(cls, data: T, message: Optional[str] = None, code: int = 200) -> 'ServiceResponse[T]':
        """Build a success response."""
        return cls(success=True, data=data, message=message, code=code)
    
    @classmethod
    def error_response(cls, error: str, code: int = 400, message: Optional[str] = None, details: Any = None) -> 'ServiceResponse[T]':
        """Build an error response."""
        return cls(success=False, error=error, code=code, message=message, details=details)
    
    @classmethod
    def validation_error(cls, error: str, details: Any = None) -> 'ServiceResponse[T]':
        """Build a validation error response."""
        return cls.error_response(error, code=400, details=details)
    
    @classmethod
    def forbidden_error(cls, error: str = "Forbidden") -> 'ServiceResponse[T]':
        """Build a forbidden error response."""
        return cls.error_response(error, code=403)
    
    @classmethod
    def not_found_error(cls, resource: str = "Resource") -> 'ServiceResponse[T]':
        """Build a not found error response."""
        return cls.error_response(f"{resource} not found", code=404)
    
    @classmethod
    def conflict_error(cls, error: str) -> 'ServiceResponse[T]':
        """Build a conflict error response."""
        return cls.error_response(error, code=409)

    @classmethod
    def internal_error(cls, error: str = "Internal server error") -> 'ServiceResponse[T]':
        """Build an internal error response."""
        return cls.error_response(error, code=500)


class ValidationResult(BaseModel):
    """Validation result."""
    is_valid: bool
    errors: List[str] = []
    
    def add_error(self, error: str):
        """Add an error."""
        self.errors.append(error)
        self.is_valid = False
    
    @property
    def error_message(self) -> str:
        """Joined error messages."""
        return "; ".join(self.errors) if self.errors else ""
