from typing import Optional

import boto3
import structlog
from botocore.config import Config as BotocoreConfig

from ..models import CredentialSet

logger = structlog.get_logger(__name__)


class AwsClientFactory:
    """Builds STS and S3 clients for an explicit credential set.

    Clients are never shared between credential sets: each call builds a
    session from the credentials it is given, so hop 1 and hop 2 cannot leak
    into each other and nothing lives at module scope.

    Attributes:
        region: AWS region for every client
        botocore_config: Client configuration (single attempt, no retries)
    """

    def __init__(self, region: str):
        self.region = region
        self.botocore_config = BotocoreConfig(
            region_name=region,
            retries={"total_max_attempts": 1, "mode": "standard"},
        )

    def _session(self, credentials: Optional[CredentialSet]) -> boto3.Session:
        if credentials is None:
            return boto3.Session(region_name=self.region)
        return boto3.Session(region_name=self.region, **credentials.as_session_kwargs())

    def sts(self, credentials: Optional[CredentialSet] = None):
        """STS client; without credentials it is only usable for web identity calls."""
        return self._session(credentials).client("sts", config=self.botocore_config)

    def s3(self, credentials: CredentialSet):
        return self._session(credentials).client("s3", config=self.botocore_config)
