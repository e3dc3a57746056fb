import os
from dataclasses import dataclass

import structlog

from .errors import ConfigurationError
from .validation import ROLE_ARN_PATTERN

logger = structlog.get_logger(__name__)

DEFAULT_REGION = "eu-west-1"
DEFAULT_PROBE_BUCKET = "gha-oid-test-bucket"
LOCAL_TEST_ENV = "development"


@dataclass
class Config:
    """Run configuration, read once from the environment.

    GitHub Actions provides the run context (GITHUB_RUN_ID, GITHUB_EVENT_NAME,
    GITHUB_WORKFLOW_REF, GITHUB_REPOSITORY) and the OIDC token request
    endpoint (ACTIONS_ID_TOKEN_REQUEST_URL, ACTIONS_ID_TOKEN_REQUEST_TOKEN).

    Required environment variables:
        - BROKER_ROLE_ARN: Role trusted for the GitHub OIDC provider (first hop).
          The action input broker-role-arn (INPUT_BROKER-ROLE-ARN) is accepted too.
        - GITHUB_RUN_ID, GITHUB_EVENT_NAME, GITHUB_WORKFLOW_REF, GITHUB_REPOSITORY

    Optional environment variables:
        - APP_ENV: "development" selects local-test mode (default: production)
        - ACCESS_TOKEN: Pre-provisioned OIDC token (local-test mode only)
        - TARGET_ROLE_ARN: Second-hop role override (local-test mode only)
        - REGION: AWS region (default: eu-west-1)
        - PROBE_BUCKET: Bucket listed by the smoke test (default: gha-oid-test-bucket)
        - LOG_LEVEL: Logging level (default: INFO)
        - FAIL_ON_REJECTION: Fail the step on an empty or malformed role ARN (default: false)
        - GITHUB_ENV: File command path used to export variables to later steps
    """

    app_env: str = ""
    log_level: str = ""
    region: str = ""
    broker_role_arn: str = ""
    run_id: str = ""
    event_name: str = ""
    workflow_ref: str = ""
    repository: str = ""
    probe_bucket: str = ""
    fail_on_rejection: bool = False
    github_env: str = ""
    token_request_url: str = ""
    token_request_token: str = ""

    # Local-test values, only read by the local-test strategies
    access_token: str = ""
    target_role_arn: str = ""

    def __post_init__(self):
        self.app_env = os.getenv("APP_ENV", "production").lower()
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.region = os.getenv("REGION") or DEFAULT_REGION

        self.broker_role_arn = os.getenv("BROKER_ROLE_ARN") or os.getenv("INPUT_BROKER-ROLE-ARN", "")

        self.run_id = os.getenv("GITHUB_RUN_ID", "")
        self.event_name = os.getenv("GITHUB_EVENT_NAME", "")
        self.workflow_ref = os.getenv("GITHUB_WORKFLOW_REF", "")
        self.repository = os.getenv("GITHUB_REPOSITORY", "")

        self.probe_bucket = os.getenv("PROBE_BUCKET") or DEFAULT_PROBE_BUCKET
        fail_on_rejection = os.getenv("FAIL_ON_REJECTION", "false").lower()
        self.fail_on_rejection = fail_on_rejection in ("true", "1", "yes")
        self.github_env = os.getenv("GITHUB_ENV", "")

        self.token_request_url = os.getenv("ACTIONS_ID_TOKEN_REQUEST_URL", "")
        self.token_request_token = os.getenv("ACTIONS_ID_TOKEN_REQUEST_TOKEN", "")

        if self.local_test_mode:
            self.access_token = os.getenv("ACCESS_TOKEN", "")
            self.target_role_arn = os.getenv("TARGET_ROLE_ARN", "")

        self._validate()

    @property
    def local_test_mode(self) -> bool:
        return self.app_env == LOCAL_TEST_ENV

    @property
    def session_name(self) -> str:
        """Second-hop session name, unique per workflow run."""
        return f"GHA-{self.run_id}"

    def _validate(self):
        required = {
            "BROKER_ROLE_ARN": self.broker_role_arn,
            "GITHUB_RUN_ID": self.run_id,
            "GITHUB_EVENT_NAME": self.event_name,
            "GITHUB_WORKFLOW_REF": self.workflow_ref,
            "GITHUB_REPOSITORY": self.repository,
        }

        missing = [key for key, value in required.items() if not value]

        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}\n"
                "\n"
                "Required environment variables:\n"
                "  - BROKER_ROLE_ARN: IAM role trusted for the GitHub OIDC provider\n"
                "    (or the broker-role-arn action input)\n"
                "  - GITHUB_RUN_ID, GITHUB_EVENT_NAME, GITHUB_WORKFLOW_REF, GITHUB_REPOSITORY\n"
                "    (set automatically by GitHub Actions)\n"
                "\n"
                "For local testing, export the GITHUB_* values yourself and set\n"
                "APP_ENV=development with ACCESS_TOKEN and TARGET_ROLE_ARN.\n"
            )

        if not ROLE_ARN_PATTERN.match(self.broker_role_arn):
            raise ConfigurationError(f"BROKER_ROLE_ARN is not a valid IAM role ARN: {self.broker_role_arn!r}")

        logger.debug(
            "Configuration loaded",
            app_env=self.app_env,
            region=self.region,
            local_test_mode=self.local_test_mode,
            probe_bucket=self.probe_bucket,
            has_github_env=bool(self.github_env),
        )


def get_config() -> Config:
    """Get configuration instance read from the current environment."""
    return Config()
