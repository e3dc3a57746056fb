"""Second-hop role selection.

Production assumes the role the caller asked for. Local-test mode assumes a
pre-provisioned role instead, so a developer can exercise the chain without
editing workflow inputs.
"""

from abc import ABC, abstractmethod

import structlog

from ..config import Config
from ..errors import ConfigurationError
from ..validation import ROLE_ARN_PATTERN

logger = structlog.get_logger(__name__)


class RoleResolver(ABC):
    @abstractmethod
    def resolve(self, requested_role_arn: str) -> str:
        """Return the role ARN the second hop should assume."""


class RequestedRoleResolver(RoleResolver):
    """Assume exactly the role the caller requested."""

    def resolve(self, requested_role_arn: str) -> str:
        return requested_role_arn


class StaticRoleResolver(RoleResolver):
    """Always assume a fixed role. Local testing only."""

    def __init__(self, role_arn: str):
        if not role_arn:
            raise ConfigurationError("TARGET_ROLE_ARN must be set when APP_ENV=development")
        if not ROLE_ARN_PATTERN.match(role_arn):
            raise ConfigurationError(f"TARGET_ROLE_ARN is not a valid IAM role ARN: {role_arn!r}")
        self.role_arn = role_arn

    def resolve(self, requested_role_arn: str) -> str:
        logger.warning(
            "Overriding requested role (local-test mode)",
            requested_role_arn=requested_role_arn,
            role_arn=self.role_arn,
        )
        return self.role_arn


def create_role_resolver(config: Config) -> RoleResolver:
    """Select the role resolver for this process."""
    if config.local_test_mode:
        return StaticRoleResolver(config.target_role_arn)
    return RequestedRoleResolver()
