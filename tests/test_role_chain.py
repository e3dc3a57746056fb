"""Unit tests for RoleChain and AwsClientFactory.

Tests both STS hops, identity verification and error propagation.
"""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from gha_role_chain.auth.clients import AwsClientFactory
from gha_role_chain.auth.role_chain import (
    BROKER_DURATION_SECONDS,
    BROKER_SESSION_NAME,
    TARGET_DURATION_SECONDS,
    RoleChain,
)
from gha_role_chain.models import CredentialSet, SessionTags

BROKER_ROLE_ARN = "arn:aws:iam::038462754764:role/GitHubActionsOIDCRole"


@pytest.fixture
def broker_credentials():
    return CredentialSet(access_key_id="ASIABROKER", secret_access_key="broker-secret", session_token="broker-token")


@pytest.fixture
def session_tags():
    return SessionTags(
        event="push",
        ref="my-org/my-repo/.github/workflows/test.yml@refs/heads/main",
        repo="my-org/my-repo",
    )


@pytest.fixture
def clients():
    factory = MagicMock(spec=AwsClientFactory)
    factory.sts.return_value = MagicMock()
    return factory


class TestAwsClientFactory:
    @patch("boto3.Session")
    def test_sts_without_credentials(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session

        factory = AwsClientFactory("eu-west-1")
        client = factory.sts()

        mock_session_class.assert_called_once_with(region_name="eu-west-1")
        mock_session.client.assert_called_once_with("sts", config=factory.botocore_config)
        assert client == mock_session.client.return_value

    @patch("boto3.Session")
    def test_clients_use_given_credentials(self, mock_session_class, broker_credentials):
        factory = AwsClientFactory("eu-west-1")

        factory.sts(broker_credentials)
        factory.s3(broker_credentials)

        for call in mock_session_class.call_args_list:
            assert call.kwargs == {
                "region_name": "eu-west-1",
                "aws_access_key_id": "ASIABROKER",
                "aws_secret_access_key": "broker-secret",
                "aws_session_token": "broker-token",
            }
        services = [call.args[0] for call in mock_session_class.return_value.client.call_args_list]
        assert services == ["sts", "s3"]

    def test_single_attempt(self):
        factory = AwsClientFactory("eu-west-1")

        assert factory.botocore_config.retries["total_max_attempts"] == 1
        assert factory.botocore_config.region_name == "eu-west-1"


class TestBrokerRole:
    def test_assume_broker_role(self, clients, mock_sts_response):
        sts = clients.sts.return_value
        sts.assume_role_with_web_identity.return_value = mock_sts_response

        chain = RoleChain(clients, BROKER_ROLE_ARN)
        credentials = chain.assume_broker_role("oidc-token")

        clients.sts.assert_called_once_with()
        sts.assume_role_with_web_identity.assert_called_once_with(
            RoleArn=BROKER_ROLE_ARN,
            RoleSessionName=BROKER_SESSION_NAME,
            WebIdentityToken="oidc-token",
            DurationSeconds=BROKER_DURATION_SECONDS,
        )
        assert BROKER_SESSION_NAME == "FederatedIdentityRole"
        assert BROKER_DURATION_SECONDS == 3600
        assert credentials.access_key_id == "ASIAEXAMPLE"

    def test_assume_broker_role_failure_propagates(self, clients):
        error = ClientError(
            {"Error": {"Code": "InvalidIdentityToken", "Message": "Token audience mismatch"}},
            "AssumeRoleWithWebIdentity",
        )
        clients.sts.return_value.assume_role_with_web_identity.side_effect = error

        chain = RoleChain(clients, BROKER_ROLE_ARN)

        with pytest.raises(ClientError) as exc_info:
            chain.assume_broker_role("oidc-token")

        assert exc_info.value is error
        assert clients.sts.return_value.assume_role_with_web_identity.call_count == 1

    def test_incomplete_credentials_fail(self, clients):
        clients.sts.return_value.assume_role_with_web_identity.return_value = {
            "Credentials": {"AccessKeyId": "ASIA", "SecretAccessKey": "secret"}
        }

        chain = RoleChain(clients, BROKER_ROLE_ARN)

        with pytest.raises(Exception):
            chain.assume_broker_role("oidc-token")


class TestTargetRole:
    def test_assume_target_role_with_tags(
        self, clients, broker_credentials, session_tags, sample_role_arn, mock_sts_response
    ):
        sts = clients.sts.return_value
        sts.assume_role.return_value = mock_sts_response

        chain = RoleChain(clients, BROKER_ROLE_ARN)
        credentials = chain.assume_target_role(broker_credentials, sample_role_arn, "GHA-1234", session_tags)

        clients.sts.assert_called_once_with(broker_credentials)
        call_kwargs = sts.assume_role.call_args.kwargs
        assert call_kwargs["RoleArn"] == sample_role_arn
        assert call_kwargs["RoleSessionName"] == "GHA-1234"
        assert call_kwargs["Tags"] == [
            {"Key": "event", "Value": "push"},
            {"Key": "ref", "Value": "my-org/my-repo/.github/workflows/test.yml@refs/heads/main"},
            {"Key": "repo", "Value": "my-org/my-repo"},
        ]
        assert call_kwargs["TransitiveTagKeys"] == ["event", "ref", "repo"]
        assert call_kwargs["DurationSeconds"] == TARGET_DURATION_SECONDS == 900
        assert isinstance(credentials, CredentialSet)

    def test_target_duration_shorter_than_broker(self):
        assert TARGET_DURATION_SECONDS < BROKER_DURATION_SECONDS

    def test_assume_target_role_failure_propagates(self, clients, broker_credentials, session_tags, sample_role_arn):
        clients.sts.return_value.assume_role.side_effect = Exception("AccessDenied")

        chain = RoleChain(clients, BROKER_ROLE_ARN)

        with pytest.raises(Exception, match="AccessDenied"):
            chain.assume_target_role(broker_credentials, sample_role_arn, "GHA-1234", session_tags)


class TestVerifyIdentity:
    def test_returns_user_id(self, clients, broker_credentials):
        clients.sts.return_value.get_caller_identity.return_value = {
            "UserId": "AROA123456789EXAMPLE:FederatedIdentityRole",
            "Account": "038462754764",
            "Arn": "arn:aws:sts::038462754764:assumed-role/GitHubActionsOIDCRole/FederatedIdentityRole",
        }

        chain = RoleChain(clients, BROKER_ROLE_ARN)

        assert chain.verify_identity(broker_credentials) == "AROA123456789EXAMPLE:FederatedIdentityRole"
        clients.sts.assert_called_once_with(broker_credentials)

    def test_failure_propagates(self, clients, broker_credentials):
        clients.sts.return_value.get_caller_identity.side_effect = Exception("ExpiredToken")

        chain = RoleChain(clients, BROKER_ROLE_ARN)

        with pytest.raises(Exception, match="ExpiredToken"):
            chain.verify_identity(broker_credentials)
