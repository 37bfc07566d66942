"""Domain error taxonomy shared by every module.

Services raise subclasses of :class:`DomainError`; views translate them into
DRF ``APIException`` instances via :meth:`DomainError.as_api_exception`, and
the ``drf-standardized-errors`` handler renders them in the same envelope as
DRF's own errors::

    {"type": "client_error",
     "errors": [{"code": "insufficient_stock", "detail": "...", "attr": null}]}

Kinds:

- ``ValidationFailed`` (400): missing or malformed input.
- ``Forbidden`` (403): ownership or role violation.
- ``NotFound`` (404): referenced product/order/review absent.
- ``Conflict`` (409): insufficient stock, invalid transition, duplicates.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.exceptions import ValidationError as DRFValidationError


class DomainError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "error"
    default_message: str = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)

    def as_api_exception(self) -> APIException:
        exc = APIException(detail=self.message, code=self.code)
        exc.status_code = self.status_code
        return exc


class ValidationFailed(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "invalid"
    default_message = "Invalid input."


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "permission_denied"
    default_message = "You do not have permission to perform this action."


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_message = "Not found."


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"
    default_message = "Request conflicts with the current state."


def validation_error_from_pydantic(exc: PydanticValidationError) -> DRFValidationError:
    """Convert a Pydantic DTO error into a DRF field-keyed validation error."""
    detail: Dict[str, List[str]] = {}
    for error in exc.errors():
        attr = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        detail.setdefault(attr, []).append(error["msg"])
    return DRFValidationError(detail)
