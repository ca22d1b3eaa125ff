"""Runtime helpers for the dlt-keys package"""

from .errors import (
    ErrorCode,
    KeyManagementError,
    BadKeyError,
    DerDecodeError,
    BadPemFileError,
    KeyMismatchError,
    UnsupportedOperationError,
)

__all__ = [
    "ErrorCode",
    "KeyManagementError",
    "BadKeyError",
    "DerDecodeError",
    "BadPemFileError",
    "KeyMismatchError",
    "UnsupportedOperationError",
]
