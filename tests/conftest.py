"""Pytest configuration and fixtures for test isolation."""

from datetime import datetime, timedelta, timezone

import pytest
import structlog


@pytest.fixture(scope="function", autouse=True)
def isolate_environment(monkeypatch):
    """Automatically isolate each test from the host environment.

    Clears AWS credentials and GitHub Actions runner variables that could leak
    from a developer machine or CI job into tests, and restores structlog's
    default configuration afterwards.
    """
    env_vars_to_clear = [
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SESSION_TOKEN",
        "AWS_PROFILE",
        "ACTIONS_ID_TOKEN_REQUEST_URL",
        "ACTIONS_ID_TOKEN_REQUEST_TOKEN",
        "ACCESS_TOKEN",
        "APP_ENV",
        "BROKER_ROLE_ARN",
        "INPUT_BROKER-ROLE-ARN",
        "INPUT_ROLE-ARN",
        "FAIL_ON_REJECTION",
        "GITHUB_ACTIONS",
        "GITHUB_ENV",
        "GITHUB_EVENT_NAME",
        "GITHUB_REPOSITORY",
        "GITHUB_RUN_ID",
        "GITHUB_WORKFLOW_REF",
        "LOG_LEVEL",
        "PROBE_BUCKET",
        "REGION",
        "TARGET_ROLE_ARN",
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    yield

    structlog.reset_defaults()


@pytest.fixture
def action_env(monkeypatch):
    """Environment of a GitHub Actions run with a configured broker role."""
    values = {
        "BROKER_ROLE_ARN": "arn:aws:iam::038462754764:role/GitHubActionsOIDCRole",
        "GITHUB_RUN_ID": "1234",
        "GITHUB_EVENT_NAME": "push",
        "GITHUB_WORKFLOW_REF": "my-org/my-repo/.github/workflows/test.yml@refs/heads/main",
        "GITHUB_REPOSITORY": "my-org/my-repo",
        "ACTIONS_ID_TOKEN_REQUEST_URL": "https://token.actions.example.com/token?api-version=2.0",
        "ACTIONS_ID_TOKEN_REQUEST_TOKEN": "runtime-token",
    }
    for key, value in values.items():
        monkeypatch.setenv(key, value)
    return values


@pytest.fixture
def sample_role_arn():
    """Sample IAM role ARN for testing."""
    return "arn:aws:iam::123456789012:role/MyTestRole"


def make_sts_credentials(suffix: str = "") -> dict:
    return {
        "AccessKeyId": f"ASIAEXAMPLE{suffix}",
        "SecretAccessKey": f"wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY{suffix}",
        "SessionToken": f"FwoGZXIvYXdzEBMaDJ{suffix}",
        "Expiration": datetime.now(timezone.utc) + timedelta(hours=1),
    }


@pytest.fixture
def sts_response_factory():
    """Build STS responses whose credentials carry a distinguishing suffix."""

    def factory(suffix: str = "") -> dict:
        return {"Credentials": make_sts_credentials(suffix)}

    return factory


@pytest.fixture
def mock_sts_response():
    """Mock STS assume_role / assume_role_with_web_identity response."""
    return {
        "Credentials": make_sts_credentials(),
        "AssumedRoleUser": {
            "AssumedRoleId": "AROA123456789EXAMPLE:session-name",
            "Arn": "arn:aws:sts::123456789012:assumed-role/RoleName/session-name",
        },
    }
