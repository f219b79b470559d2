from __future__ import annotations


class SalesError(Exception):
    """Base error for sales pipeline operations."""


class ValidationError(SalesError):
    """Raised when input is well-formed JSON but not acceptable to the service."""


class NotFoundError(SalesError):
    """Raised when a referenced user or opportunity does not exist."""

    def __init__(self, resource: str, identifier: str) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")
