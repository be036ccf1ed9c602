"""Kanpo AI — フォーム検証"""
from .validator import (
    FieldId,
    ErrorCode,
    FieldError,
    validate_form,
    medication_chars_allowed,
    errors_by_field,
)

__all__ = [
    "FieldId",
    "ErrorCode",
    "FieldError",
    "validate_form",
    "medication_chars_allowed",
    "errors_by_field",
]
