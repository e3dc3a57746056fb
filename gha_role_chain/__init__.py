"""Two-hop AWS role chaining for GitHub Actions.

The GitHub OIDC token is exchanged for broker role credentials, which then
assume the caller's role with provenance session tags. Both credential sets
are exported to the workflow and verified with GetCallerIdentity.
"""

from .errors import (
    ConfigurationError,
    EmptyRoleError,
    ExchangeError,
    MalformedRoleError,
    RejectionError,
    RoleChainError,
    TokenError,
)
from .models import CredentialSet, RunResult, RunStage, RunStatus, SessionTags
from .runner import RoleChainRunner
from .validation import validate_role_arn
from .version import __version__

__all__ = [
    "ConfigurationError",
    "CredentialSet",
    "EmptyRoleError",
    "ExchangeError",
    "MalformedRoleError",
    "RejectionError",
    "RoleChainError",
    "RoleChainRunner",
    "RunResult",
    "RunStage",
    "RunStatus",
    "SessionTags",
    "TokenError",
    "__version__",
    "validate_role_arn",
]
