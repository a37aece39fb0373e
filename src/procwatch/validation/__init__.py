"""
Validation and error handling for the procwatch package.

This module provides simplified input validation and error handling
with consistent error reporting across the application.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_error,
    handle_config_error,
    handle_snapshot_error,
    handle_cli_error,
)

# Validation functions
from .validators import (
    validate_bool,
    validate_enum_choice,
    validate_identifier_list,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_snapshot_error",
    "handle_cli_error",
    # Validators
    "validate_bool",
    "validate_enum_choice",
    "validate_identifier_list",
    "validate_positive_float",
    "validate_positive_integer",
]
