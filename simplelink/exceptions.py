"""Application-wide exception hierarchy.

Every exception raised by the service layer carries the HTTP status code and
the machine-readable error code that the Lambda handlers put on the wire.

Classes:
    SimpleLinkError:
        Base exception for all application-specific errors (HTTP 500).

    ValidationError:
        Malformed URL, shortcode, email, password or request payload (HTTP 400).

    CollisionError:
        Requested shortcode is already taken (HTTP 409).

    AllocationExhaustedError:
        No free generated shortcode found within the attempt budget (HTTP 409).

    NotFoundError:
        Unknown shortcode or link (HTTP 404).

    UnauthorizedError, InvalidCredentialsError:
        Missing/invalid/expired bearer token, bad login (HTTP 401).

    ForbiddenError:
        Caller does not own the link or lacks admin rights (HTTP 403).

    ConfigurationError (+ subclasses), InfrastructureError (+ subclasses):
        Deployment problems (HTTP 500).
"""


class SimpleLinkError(Exception):
    """Base exception for all application-specific errors."""

    status_code = 500
    error_code = 'app:simplelink_error'


class ValidationError(SimpleLinkError):
    """Raised when client input fails server-side validation."""

    status_code = 400
    error_code = 'VALIDATION_ERROR'


class InvalidJsonError(ValidationError):
    """Raised when a request body is not a JSON object."""

    error_code = 'INVALID_JSON'


class CollisionError(SimpleLinkError):
    """Raised when a requested shortcode is already in use."""

    status_code = 409
    error_code = 'SHORT_CODE_TAKEN'


class AllocationExhaustedError(SimpleLinkError):
    """Raised when every generated shortcode candidate collided."""

    status_code = 409
    error_code = 'ALLOCATION_EXHAUSTED'


class NotFoundError(SimpleLinkError):
    """Raised when a link or shortcode does not exist."""

    status_code = 404
    error_code = 'NOT_FOUND'


class UnauthorizedError(SimpleLinkError):
    """Raised when a bearer token is missing, malformed or expired."""

    status_code = 401
    error_code = 'UNAUTHORIZED'


class InvalidCredentialsError(UnauthorizedError):
    """Raised when an email/password pair does not match a user."""

    error_code = 'INVALID_CREDENTIALS'


class ForbiddenError(SimpleLinkError):
    """Raised when an authenticated caller is not allowed to perform an action."""

    status_code = 403
    error_code = 'FORBIDDEN'


class MalformedResponseError(SimpleLinkError):
    """Raised when a response from an AWS service is malformed."""

    error_code = 'app:malformed_response_error'


class ConfigurationError(SimpleLinkError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class InfrastructureError(SimpleLinkError):
    """Base exception for all infrastructure (AWS) errors."""

    error_code = 'infra:infrastructure_error'


class AppConfigError(InfrastructureError):
    """Raised when AppConfig responds with erroneous data."""

    error_code = 'infra:appconfig_error'
