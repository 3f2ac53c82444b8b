"""Validation modules for tenkiconv."""

from __future__ import annotations

from tenkiconv.validators.document_validator import (
    DocumentValidator,
    ValidationResult,
    Violation,
    ViolationKind,
    validate_document,
)

__all__ = [
    "DocumentValidator",
    "ValidationResult",
    "Violation",
    "ViolationKind",
    "validate_document",
]
