"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions. Every exception carries a
machine-readable ``code`` that the API layer returns verbatim.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class LicenseNotFoundError(LicenseException):
    """Raised when a license key does not resolve to any record."""

    def __init__(self, message: str = "License key not found"):
        super().__init__(message, code="NOT_FOUND")


class LicenseRevokedError(LicenseException):
    """Raised when a revoked license key is validated."""

    def __init__(self, message: str = "License key has been revoked"):
        super().__init__(message, code="REVOKED")


class LicenseExpiredError(LicenseException):
    """Raised when an expired license key is validated."""

    def __init__(self, message: str = "License key has expired"):
        super().__init__(message, code="EXPIRED")


class LicenseNotActivatedError(LicenseException):
    """Raised when a pending license key is validated."""

    def __init__(self, message: str = "License key is not activated yet"):
        super().__init__(message, code="NOT_ACTIVATED")


class MaxActivationsReachedError(LicenseException):
    """Raised when a license key has no activation slots left."""

    def __init__(self, message: str = "Maximum number of activations reached"):
        super().__init__(message, code="MAX_ACTIVATIONS")


class DuplicateLicenseKeyError(LicenseException):
    """Raised when a generated key collides with an existing one."""

    def __init__(self, message: str = "License key already exists"):
        super().__init__(message, code="DUPLICATE_KEY")


class InvalidLicenseStatusError(LicenseException):
    """Raised when a license operation is invalid for the current status."""

    def __init__(self, message: str = "Invalid license status"):
        super().__init__(message, code="INVALID_LICENSE_STATUS")


class InvalidLicenseUpdateError(LicenseException):
    """Raised when an administrative edit would break a license invariant."""

    def __init__(self, message: str = "Invalid license update"):
        super().__init__(message, code="INVALID_LICENSE_UPDATE")


class SecurityException(DomainException):
    """Base exception for abuse-detection errors."""

    pass


class RateLimitedError(SecurityException):
    """Raised when a client IP is rate limited."""

    def __init__(self, message: str = "Too many invalid attempts, try again later"):
        super().__init__(message, code="RATE_LIMITED")


class SecurityEventNotFoundError(SecurityException):
    """Raised when a security event is not found."""

    def __init__(self, message: str = "Security event not found"):
        super().__init__(message, code="SECURITY_EVENT_NOT_FOUND")


class SecurityEventAlreadyResolvedError(SecurityException):
    """Raised when resolving an event that is already resolved."""

    def __init__(self, message: str = "Security event already resolved"):
        super().__init__(message, code="SECURITY_EVENT_ALREADY_RESOLVED")


class InvalidAPIKeyError(SecurityException):
    """Raised when an admin API key is missing or invalid."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message, code="INVALID_API_KEY")


class StoreUnavailableError(DomainException):
    """Raised when the persistence layer cannot be reached."""

    def __init__(self, message: str = "License store is unavailable"):
        super().__init__(message, code="STORE_UNAVAILABLE")
