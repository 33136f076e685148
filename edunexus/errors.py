"""
Domain exceptions.

Read misses are not errors: repositories return None and callers branch.
Everything here is raised on a real failure and mapped to an HTTP status by
the handlers registered in edunexus.main.
"""


class EduNexusError(Exception):
    """Base class for all EduNexus errors."""

    status_code = 500
    default_message = "Operation failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


# =============================================================================
# STORAGE
# =============================================================================


class DuplicateKeyError(EduNexusError):
    """A create collided with an existing key or unique index entry."""

    status_code = 409
    default_message = "Record already exists."


class ConflictError(EduNexusError):
    """An update carried a version that no longer matches the stored record."""

    status_code = 409
    default_message = "Record was modified by someone else. Reload and retry."


class StoreConnectionError(EduNexusError):
    """The store was unavailable or a transaction aborted."""

    status_code = 503
    default_message = "Operation failed."


# =============================================================================
# EXTERNAL SERVICES
# =============================================================================


class ExternalServiceError(EduNexusError):
    """The generative-model service failed or timed out."""

    status_code = 502
    default_message = "The AI service is unavailable. Please try again."


# =============================================================================
# AUTHENTICATION / ACCESS
# =============================================================================


class AuthenticationError(EduNexusError):
    """Base for login and registration rejections."""

    status_code = 401
    default_message = "Authentication failed."


class AccountNotFoundError(AuthenticationError):
    default_message = "Identity not found."


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid credentials."


class AccountBlockedError(AuthenticationError):
    status_code = 403
    default_message = "Access Denied: Account Blocked."


class MaintenanceModeError(AuthenticationError):
    status_code = 503
    default_message = "MAINTENANCE ACTIVE: Admin access only."


class FeatureDisabledError(EduNexusError):
    """A feature toggle in SystemSettings is off."""

    status_code = 403
    default_message = "This feature is disabled by system administration."
