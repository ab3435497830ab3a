"""
Shared error handling for the Annotator.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.logging import reconcile_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    reconcile_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AnnotatorException(Exception):
    """Base exception for Annotator components."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            reconcile_id=reconcile_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ParseError(AnnotatorException):
    """Policy text is not valid structured data."""

    def __init__(self, message: str = "Policy parse failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("PARSE_ERROR", message, details)


class ValidationError(AnnotatorException):
    """A rule violates the policy grammar."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ProvenanceDecodeError(AnnotatorException):
    """Provenance marker could not be decoded.

    Never surfaced past the reconciler; it is logged and the marker is
    treated as empty.
    """

    def __init__(self, message: str = "Provenance marker decode failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("PROVENANCE_DECODE_ERROR", message, details)


class EncodeError(AnnotatorException):
    """Provenance marker could not be serialized."""

    def __init__(self, message: str = "Provenance marker encode failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("ENCODE_ERROR", message, details)


class ConflictError(AnnotatorException):
    """Object changed between read and write."""

    def __init__(self, message: str = "Object was modified concurrently", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFLICT_ERROR", message, details)


class NotFoundError(AnnotatorException):
    """Object does not exist."""

    def __init__(self, kind: str, namespace: str, name: str, details: Optional[Dict[str, Any]] = None):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        ref = f"{namespace}/{name}" if namespace else name
        super().__init__(
            "NOT_FOUND_ERROR",
            f"{kind} {ref} not found",
            {"kind": kind, "namespace": namespace, "name": name, **(details or {})}
        )
