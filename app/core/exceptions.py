"""Custom exceptions for the funnel CRM backend."""


class FunnelCRMException(Exception):
    """Base exception for the funnel CRM backend."""

    pass


class ValidationError(FunnelCRMException):
    """Raised when a write would break a catalogue or model rule."""

    pass


class NotFoundError(FunnelCRMException):
    """Raised when a lead or template id does not exist."""

    pass


class DatabaseError(FunnelCRMException):
    """Raised when a database operation fails."""

    pass


class ServiceError(FunnelCRMException):
    """Raised when a service operation fails."""

    pass


class ConfigurationError(FunnelCRMException):
    """Raised when configuration is invalid."""

    pass
