"""Credential exchange state machine.

    START -> VALIDATED -> HOP1_EXCHANGED -> HOP1_PUBLISHED -> HOP1_VERIFIED
          -> HOP2_EXCHANGED -> HOP2_PUBLISHED -> HOP2_VERIFIED -> PROBED -> DONE

An empty or malformed role ARN ends the run in REJECTED (logged, not a
failure). Any error after validation ends it in FAILED with the underlying
error's message. Hop 1 credentials that were already published stay
published.
"""

from typing import Optional

import structlog

from .auth.clients import AwsClientFactory
from .auth.role_chain import RoleChain
from .auth.role_resolver import RoleResolver, create_role_resolver
from .auth.token_provider import STS_AUDIENCE, TokenProvider, create_token_provider
from .config import Config
from .errors import ExchangeError, RejectionError
from .models import RunResult, RunStage, RunStatus, SessionTags
from .probe import probe_bucket
from .publisher import CredentialPublisher
from .validation import validate_role_arn

logger = structlog.get_logger(__name__)


class RoleChainRunner:
    """Runs the two-hop role chain once.

    All collaborators are passed in; from_config() wires the production set.
    """

    def __init__(
        self,
        config: Config,
        token_provider: TokenProvider,
        role_resolver: RoleResolver,
        clients: AwsClientFactory,
        publisher: CredentialPublisher,
        role_chain: Optional[RoleChain] = None,
    ):
        self.config = config
        self.token_provider = token_provider
        self.role_resolver = role_resolver
        self.clients = clients
        self.publisher = publisher
        self.role_chain = role_chain or RoleChain(clients, config.broker_role_arn)

    @classmethod
    def from_config(cls, config: Config) -> "RoleChainRunner":
        return cls(
            config=config,
            token_provider=create_token_provider(config),
            role_resolver=create_role_resolver(config),
            clients=AwsClientFactory(config.region),
            publisher=CredentialPublisher(github_env=config.github_env or None),
        )

    def session_tags(self) -> SessionTags:
        return SessionTags(
            event=self.config.event_name,
            ref=self.config.workflow_ref,
            repo=self.config.repository,
        )

    @staticmethod
    def _advance(result: RunResult, stage: RunStage) -> None:
        logger.debug("Run stage reached", stage=stage.value)
        result.stage = stage
        result.reached = stage

    def run(self, role_arn: Optional[str]) -> RunResult:
        result = RunResult()

        logger.info("Target Role Arn", role_arn=role_arn)

        try:
            requested_role_arn = validate_role_arn(role_arn)
        except RejectionError as e:
            logger.error(str(e))
            result.status = RunStatus.REJECTED
            result.stage = RunStage.REJECTED
            result.message = str(e)
            return result

        self._advance(result, RunStage.VALIDATED)

        try:
            self._exchange(result, requested_role_arn)
        except Exception as e:
            error = ExchangeError.from_exception(result.reached.value, e)
            logger.info("Run failed", stage=error.stage, error_type=type(e).__name__)
            logger.error(error.message)
            result.status = RunStatus.FAILED
            result.stage = RunStage.FAILED
            result.message = error.message
            return result

        self._advance(result, RunStage.DONE)
        logger.info("Role chain complete", principals=result.principals)
        return result

    def _exchange(self, result: RunResult, requested_role_arn: str) -> None:
        token = self.token_provider.get_token(STS_AUDIENCE)

        broker = self.role_chain.assume_broker_role(token)
        self._advance(result, RunStage.HOP1_EXCHANGED)

        self.publisher.publish(broker)
        self._advance(result, RunStage.HOP1_PUBLISHED)

        result.principals.append(self.role_chain.verify_identity(broker))
        self._advance(result, RunStage.HOP1_VERIFIED)

        target = self.role_chain.assume_target_role(
            broker,
            self.role_resolver.resolve(requested_role_arn),
            self.config.session_name,
            self.session_tags(),
        )
        self._advance(result, RunStage.HOP2_EXCHANGED)

        self.publisher.publish(target)
        self._advance(result, RunStage.HOP2_PUBLISHED)

        result.principals.append(self.role_chain.verify_identity(target))
        self._advance(result, RunStage.HOP2_VERIFIED)

        result.listing = probe_bucket(self.clients.s3(target), self.config.probe_bucket)
        logger.info("Bucket contents", bucket=self.config.probe_bucket, listing=result.listing)
        self._advance(result, RunStage.PROBED)
