# backend/beautycatalog/core/exceptions.py
"""
Domain-specific exceptions for the service catalog.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Every exception carries a machine-readable code and structured details
so a UI can render an actionable message (minimum price, duration bounds).
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying the structured detail."""
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when input violates a stated invariant."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a referenced category, base service or offering does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when an invariant is violated by existing state."""

    status_code = status.HTTP_409_CONFLICT


class TransientStoreException(DomainException):
    """Raised when the underlying store fails for I/O reasons (network, timeout)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail=self.to_dict(),
            headers={"Retry-After": "2"},
        )


class ServiceException(DomainException):
    """Raised when a service operation fails unexpectedly."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific catalog exceptions


class DuplicateOfferingException(ConflictException):
    """Raised when a professional already offers the given base service."""

    def __init__(self, professional_id: str, base_service_id: str):
        super().__init__(
            message="You already offer this service",
            code="DUPLICATE_OFFERING",
            details={
                "professional_id": professional_id,
                "base_service_id": base_service_id,
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """

    def __init__(self, message: str, *, transient: bool = False, integrity: bool = False):
        super().__init__(message)
        self.transient = transient
        self.integrity = integrity
