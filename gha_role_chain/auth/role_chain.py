"""AWS STS exchanges for the two-hop role chain.

Hop 1 trades the GitHub OIDC token for credentials of the broker role
(AssumeRoleWithWebIdentity). Hop 2 uses those credentials to assume the
caller's role with provenance session tags (AssumeRole). Every call is a
single attempt; errors are logged and re-raised unchanged.
"""

from typing import Any, Dict

import structlog

from ..models import CredentialSet, SessionTags
from .clients import AwsClientFactory

logger = structlog.get_logger(__name__)

BROKER_SESSION_NAME = "FederatedIdentityRole"
BROKER_DURATION_SECONDS = 3600  # 1 hour
TARGET_DURATION_SECONDS = 900  # 15 minutes, the STS minimum


class RoleChain:
    """Performs the STS calls of the role chain.

    Usage:
        chain = RoleChain(
            clients=AwsClientFactory("eu-west-1"),
            broker_role_arn="arn:aws:iam::123456789012:role/GitHubActionsOIDCRole",
        )

        broker = chain.assume_broker_role(token)
        chain.verify_identity(broker)
        target = chain.assume_target_role(broker, role_arn, "GHA-1234", tags)

    Attributes:
        clients: Factory for STS clients bound to a credential set
        broker_role_arn: ARN of the role trusted for the OIDC provider
    """

    def __init__(self, clients: AwsClientFactory, broker_role_arn: str):
        self.clients = clients
        self.broker_role_arn = broker_role_arn

    @staticmethod
    def _credentials(response: Dict[str, Any]) -> CredentialSet:
        return CredentialSet.model_validate(response["Credentials"])

    def assume_broker_role(self, token: str) -> CredentialSet:
        """Exchange an OIDC token for broker role credentials.

        Args:
            token: OIDC identity token for audience sts.amazonaws.com

        Returns:
            First-hop credentials

        Raises:
            Exception: If STS rejects the token or the call fails
        """
        try:
            sts_client = self.clients.sts()

            logger.debug(
                "Assuming broker role with web identity",
                role_arn=self.broker_role_arn,
                session_name=BROKER_SESSION_NAME,
            )

            response = sts_client.assume_role_with_web_identity(
                RoleArn=self.broker_role_arn,
                RoleSessionName=BROKER_SESSION_NAME,
                WebIdentityToken=token,
                DurationSeconds=BROKER_DURATION_SECONDS,
            )

            credentials = self._credentials(response)

            logger.info("Broker role assumed", role_arn=self.broker_role_arn)

            return credentials

        except Exception as e:
            logger.debug(
                "Failed to assume broker role",
                role_arn=self.broker_role_arn,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def assume_target_role(
        self,
        credentials: CredentialSet,
        role_arn: str,
        session_name: str,
        tags: SessionTags,
    ) -> CredentialSet:
        """Assume the caller's role from the broker session with session tags.

        All tag keys are declared transitive so they follow any further
        chained assumption.

        Args:
            credentials: First-hop credentials used to sign the call
            role_arn: Validated ARN of the role to assume
            session_name: Role session name, unique per workflow run
            tags: Provenance tags for the new session

        Returns:
            Second-hop credentials

        Raises:
            Exception: If role assumption fails
        """
        try:
            sts_client = self.clients.sts(credentials)

            logger.debug(
                "Assuming target role",
                role_arn=role_arn,
                session_name=session_name,
                tags=tags.model_dump(),
            )

            response = sts_client.assume_role(
                RoleArn=role_arn,
                RoleSessionName=session_name,
                Tags=tags.to_sts_tags(),
                TransitiveTagKeys=tags.transitive_keys(),
                DurationSeconds=TARGET_DURATION_SECONDS,
            )

            target = self._credentials(response)

            logger.info("Target role assumed", role_arn=role_arn, session_name=session_name)

            return target

        except Exception as e:
            logger.debug(
                "Failed to assume target role",
                role_arn=role_arn,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def verify_identity(self, credentials: CredentialSet) -> str:
        """Return the principal id the credentials authenticate as."""
        sts_client = self.clients.sts(credentials)
        identity = sts_client.get_caller_identity()
        user_id = identity.get("UserId", "")
        logger.info("Caller identity verified", user_id=user_id, arn=identity.get("Arn"))
        return user_id
