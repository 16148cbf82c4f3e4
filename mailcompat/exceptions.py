# -*- coding: utf-8 -*-
"""Email Compatibility Exception Hierarchy.

Exception Hierarchy:
    EmailCompatibilityError (base)
    ├── InvalidTemplateError
    └── ConfigurationError

Lookups against the knowledge base never raise; these exceptions cover
caller contract violations only (malformed template input, inconsistent
configuration).

Example:
    >>> from mailcompat.exceptions import InvalidTemplateError
    >>> raise InvalidTemplateError(
    ...     message="Template node could not be parsed",
    ...     context={"index": 3},
    ... )
"""

import re
from datetime import datetime
from typing import Any, Dict, Optional


class EmailCompatibilityError(Exception):
    """Base exception for all compatibility engine errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g., "MC_INVALID_TEMPLATE_ERROR")
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "MC"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.timestamp = datetime.now()

    def _generate_error_code(self) -> str:
        """Derive an error code from the class name.

        Returns:
            Error code like "MC_CONFIGURATION_ERROR"
        """
        error_type = re.sub(r'(?<!^)(?=[A-Z])', '_', self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        if self.context:
            return f"[{self.error_code}] {self.message} (context: {self.context})"
        return f"[{self.error_code}] {self.message}"


class InvalidTemplateError(EmailCompatibilityError):
    """Template input could not be interpreted as a tree of nodes.

    Raised when a node is neither a TemplateNode nor a mapping that
    validates as one, including cyclic structures.
    """


class ConfigurationError(EmailCompatibilityError):
    """Configuration values are inconsistent or out of range."""


__all__ = [
    "EmailCompatibilityError",
    "InvalidTemplateError",
    "ConfigurationError",
]
