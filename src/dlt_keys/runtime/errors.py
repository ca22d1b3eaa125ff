"""
Key Management Error Model

This module provides the error handling framework for the key management
package. Every failure carries an error code so callers can tell
passphrase problems apart from format problems.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Key management error codes."""

    # Key format errors (700-749)
    BAD_KEY = 700
    DER_DECODE = 701
    BAD_PEM_FILE = 702

    # Key usage errors (750-799)
    KEY_MISMATCH = 750
    UNSUPPORTED_OPERATION = 751


class KeyManagementError(Exception):
    """
    Base class for all key management errors.

    Provides structured error information with an optional underlying cause.
    """

    def __init__(self, message: str, code: ErrorCode,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a key management error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class BadKeyError(KeyManagementError):
    """Key bytes or text could not be interpreted as an Ed25519 private key."""

    def __init__(self, message: str = "invalid private key", details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.BAD_KEY, details, cause)


class DerDecodeError(BadKeyError):
    """ASN.1 DER input is structurally malformed."""

    def __init__(self, message: str = "malformed DER input", details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, details, cause)
        self.code = ErrorCode.DER_DECODE


class BadPemFileError(KeyManagementError):
    """The PEM text does not contain the expected BEGIN/END section."""

    def __init__(self, message: str = "failed to find a private key section in the PEM file",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.BAD_PEM_FILE, details, cause)


class KeyMismatchError(KeyManagementError):
    """Keystore MAC verification failed: wrong passphrase or corrupted keystore."""

    def __init__(self, message: str = "key mismatch when loading from keystore",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.KEY_MISMATCH, details, cause)


class UnsupportedOperationError(KeyManagementError):
    """The operation is not available for this key."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.UNSUPPORTED_OPERATION, details, cause)


__all__ = [
    "ErrorCode",
    "KeyManagementError",
    "BadKeyError",
    "DerDecodeError",
    "BadPemFileError",
    "KeyMismatchError",
    "UnsupportedOperationError",
]
