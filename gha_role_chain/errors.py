"""Error taxonomy for the role chain.

Rejections (empty or malformed role ARN) are a soft stop: they are logged and
end the run without failing it. Everything else is fatal and reported once.
"""


class RoleChainError(Exception):
    """Base class for role chain errors."""


class RejectionError(RoleChainError):
    """Raised when the caller-supplied role ARN is not usable."""

    message = "Role Arn rejected"

    def __init__(self, message: str = ""):
        super().__init__(message or self.message)


class EmptyRoleError(RejectionError):
    """Raised when no role ARN was supplied."""

    message = "Role Arn cannot be empty"


class MalformedRoleError(RejectionError):
    """Raised when the role ARN does not look like an IAM role ARN."""

    message = "Incorrect Role Arn format"


class TokenError(RoleChainError):
    """Raised when the OIDC identity token cannot be obtained."""


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or inconsistent."""


class ExchangeError(RoleChainError):
    """Fatal failure of a run stage.

    The message is the underlying error's message, unchanged, so the value
    reported to the workflow is exactly what STS, S3 or the token endpoint said.
    """

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage
        self.message = message

    @classmethod
    def from_exception(cls, stage: str, exc: BaseException) -> "ExchangeError":
        return cls(stage, str(exc))

    def format(self) -> str:
        """Format error for console output."""
        return f"❌ Role chain failed during {self.stage}: {self.message}"
