"""Custom exceptions for the RBAC Tools service"""

from typing import List, Optional, Dict, Any
from datetime import datetime, timezone


class InvalidRequirementsError(ValueError):
    """
    Raised when a least-privilege calculation is requested without any
    required permission.

    This exception is raised when:
    - Both the required actions and the required data actions are empty
    - Every supplied permission string is blank

    An empty requirement set is never treated as "anything matches".
    """

    def __init__(
        self,
        message: str = "At least one required action or data action must be provided",
        context: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize InvalidRequirementsError.

        Args:
            message: Human-readable error message
            context: Additional context about where the error occurred
            details: Additional error details for debugging
        """
        self.message = message
        self.context = context
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

        if context:
            message = f"{context}: {message}"

        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error_type": "invalid_requirements",
            "message": self.message,
            "context": self.context,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }

    def get_api_response(self) -> Dict[str, Any]:
        """
        Get API-friendly error response.

        Returns:
            Dictionary suitable for HTTP error responses
        """
        return {
            "detail": self.message,
            "type": "invalid_requirements",
            "fields": ["requiredActions", "requiredDataActions"],
            "timestamp": self.timestamp.isoformat()
        }


class CatalogUnavailableError(Exception):
    """
    Raised when a role catalog cannot be supplied.

    This exception is raised when:
    - The role definitions file is missing or unreadable
    - The file does not contain a JSON list of role definitions
    - A catalog is requested before it was ever loaded successfully

    It is kept distinct from InvalidRequirementsError so the boundary layer
    can answer with a service error instead of a misleading empty result.
    """

    def __init__(
        self,
        message: str,
        system: Optional[str] = None,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize CatalogUnavailableError.

        Args:
            message: Human-readable error message
            system: Role system whose catalog is unavailable (azure, entraid)
            source: Where the catalog was being loaded from
            details: Additional error details for debugging
        """
        self.message = message
        self.system = system
        self.source = source
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error_type": "catalog_unavailable",
            "message": self.message,
            "system": self.system,
            "source": self.source,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }

    def get_api_response(self) -> Dict[str, Any]:
        """
        Get API-friendly error response.

        The source path is left out so file-system layout is not exposed.
        """
        return {
            "detail": f"Role catalog for '{self.system}' is currently unavailable",
            "type": "catalog_unavailable",
            "system": self.system,
            "timestamp": self.timestamp.isoformat()
        }


class RoleNotFoundError(LookupError):
    """
    Raised when a role lookup by identifier finds nothing.
    """

    def __init__(
        self,
        role_id: str,
        system: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.role_id = role_id
        self.system = system
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

        super().__init__(f"Role '{role_id}' not found")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": "role_not_found",
            "message": str(self),
            "role_id": self.role_id,
            "system": self.system,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }

    def get_api_response(self) -> Dict[str, Any]:
        return {
            "detail": str(self),
            "type": "role_not_found",
            "role_id": self.role_id,
            "timestamp": self.timestamp.isoformat()
        }


class RoleDefinitionError(ValueError):
    """
    Raised by the adapters when a raw role record cannot be translated.

    The catalog loader catches it per record, logs it, and keeps loading the
    rest of the file.
    """

    def __init__(
        self,
        message: str,
        role_id: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None
    ):
        self.message = message
        self.role_id = role_id
        self.errors = errors or []

        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": "role_definition_error",
            "message": self.message,
            "role_id": self.role_id,
            "errors": self.errors
        }
