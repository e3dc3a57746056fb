"""OIDC identity token providers.

The provider is chosen once at startup by create_token_provider(). The
production provider asks the GitHub Actions runtime for a fresh token; the
static provider hands back a pre-provisioned token for local testing.
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests
import structlog

from ..config import Config
from ..errors import ConfigurationError, TokenError

logger = structlog.get_logger(__name__)

STS_AUDIENCE = "sts.amazonaws.com"


class TokenProvider(ABC):
    """Source of the identity token presented to STS."""

    @abstractmethod
    def get_token(self, audience: str = STS_AUDIENCE) -> str:
        """Return an identity token scoped to audience."""


class GitHubActionsTokenProvider(TokenProvider):
    """Requests an ID token from the GitHub Actions OIDC endpoint.

    The runner exposes the endpoint as ACTIONS_ID_TOKEN_REQUEST_URL and a
    bearer token for it as ACTIONS_ID_TOKEN_REQUEST_TOKEN. Both are only
    present when the workflow grants `permissions: id-token: write`.
    """

    def __init__(self, request_url: str, request_token: str, http: Optional[requests.Session] = None):
        self.request_url = request_url
        self.request_token = request_token
        self._http = http or requests.Session()

    def get_token(self, audience: str = STS_AUDIENCE) -> str:
        if not self.request_url:
            raise TokenError(
                "Unable to get ACTIONS_ID_TOKEN_REQUEST_URL env variable. "
                "Grant the workflow 'permissions: id-token: write'."
            )
        if not self.request_token:
            raise TokenError(
                "Unable to get ACTIONS_ID_TOKEN_REQUEST_TOKEN env variable. "
                "Grant the workflow 'permissions: id-token: write'."
            )

        logger.debug("Requesting OIDC token", audience=audience)

        try:
            response = self._http.get(
                self.request_url,
                params={"audience": audience},
                headers={
                    "Authorization": f"Bearer {self.request_token}",
                    "Accept": "application/json",
                },
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.debug("Failed to get OIDC token", error=str(e), error_type=type(e).__name__)
            raise TokenError(f"Failed to get ID Token: {e}") from e
        except ValueError as e:
            raise TokenError(f"Failed to get ID Token: response is not JSON ({e})") from e

        token = payload.get("value") if isinstance(payload, dict) else None
        if not token:
            raise TokenError("Failed to get ID Token: response did not contain a token value")

        logger.info("OIDC token issued", audience=audience)
        return token


class StaticTokenProvider(TokenProvider):
    """Returns a pre-provisioned token. Local testing only."""

    def __init__(self, token: str):
        if not token:
            raise ConfigurationError("ACCESS_TOKEN must be set when APP_ENV=development")
        self._token = token

    def get_token(self, audience: str = STS_AUDIENCE) -> str:
        logger.warning("Using pre-provisioned OIDC token (local-test mode)", audience=audience)
        return self._token


def create_token_provider(config: Config) -> TokenProvider:
    """Select the token provider for this process."""
    if config.local_test_mode:
        return StaticTokenProvider(config.access_token)
    return GitHubActionsTokenProvider(config.token_request_url, config.token_request_token)
