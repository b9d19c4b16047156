"""Error taxonomy for authentication, issuance and RBAC resolution.

Every error carries a human-readable ``message`` and the HTTP status the routing
layer should answer with. Messages are safe to return to callers.
"""


class AuthHubError(Exception):
    """Base class for all errors raised by the authentication core."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(AuthHubError):
    """Raised when raw input is malformed; names the offending field."""

    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class UnknownMethodError(AuthHubError):
    """Raised when no authentication method is registered under the given id."""

    def __init__(self, method_id: str) -> None:
        self.method_id = method_id
        super().__init__(f"Unknown authentication method: {method_id}")


class UnsupportedMethodError(AuthHubError):
    """Raised when the method is declared as a placeholder but not implemented."""

    def __init__(self, method_id: str) -> None:
        self.method_id = method_id
        super().__init__(f"Authentication method is not available yet: {method_id}")


class InvalidCredentialsError(AuthHubError):
    """Raised on failed password login. The message never says which factor failed."""

    status_code = 401

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class NotFoundError(AuthHubError):
    status_code = 404


class ConflictError(AuthHubError):
    status_code = 409


class InvalidServiceError(AuthHubError):
    """Raised when a service is missing or has no secret configured."""

    status_code = 401


class InvalidSecretError(AuthHubError):
    """Raised by the service self-check when the presented secret does not match."""

    status_code = 401

    def __init__(self) -> None:
        super().__init__("Invalid service secret")


class InvalidApiKeyError(AuthHubError):
    """Raised when an API key is absent or unknown."""

    status_code = 401


class InvalidTokenError(AuthHubError):
    """Raised for expired, forged or malformed tokens alike."""

    status_code = 401

    def __init__(self) -> None:
        super().__init__("Invalid or expired token")


class SecretFormatError(AuthHubError):
    """Raised when an encrypted secret blob is not iv:authTag:ciphertext."""

    status_code = 500


class TamperedSecretError(AuthHubError):
    """Raised when an encrypted secret fails its integrity check."""

    status_code = 500


class LastAdminError(AuthHubError):
    """Raised when an operation would leave the system without an admin."""

    status_code = 409

    def __init__(self) -> None:
        super().__init__("At least one admin user must remain")


class RbacConsistencyError(AuthHubError):
    """Raised when roles, permissions and models do not line up."""

    status_code = 422


class InternalInconsistencyError(AuthHubError):
    status_code = 500
