"""Middleware module for Relay.

This module provides the exception taxonomy shared by the content core
and the handlers that turn it into standardized error responses.
"""

from relay.middleware.error_handler import (
    RelayException,
    ValidationException,
    NotFoundException,
    ConflictException,
    StorageException,
    ExternalSyncException,
    ErrorResponse,
    format_validation_errors,
    relay_exception_handler,
    validation_exception_handler,
    general_exception_handler,
)

__all__ = [
    "RelayException",
    "ValidationException",
    "NotFoundException",
    "ConflictException",
    "StorageException",
    "ExternalSyncException",
    "ErrorResponse",
    "format_validation_errors",
    "relay_exception_handler",
    "validation_exception_handler",
    "general_exception_handler",
]
