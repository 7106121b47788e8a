"""ScriptForm - 常量集合."""

from scriptform.constants.http_status import HttpStatus
from scriptform.constants.system_constants import (
    RESERVED_FIELD_IDS,
    STORAGE_KEY_PATTERN,
    ErrorCategory,
    ErrorMessages,
    ErrorSeverity,
    SuccessMessages,
)

__all__ = [
    "RESERVED_FIELD_IDS",
    "STORAGE_KEY_PATTERN",
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "HttpStatus",
    "SuccessMessages",
]
