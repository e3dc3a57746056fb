"""
Data models for the role chain

Credentials and session tags use the AWS STS wire names as aliases so that
STS responses can be validated directly and requests can be rendered with
model_dump(by_alias=True).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

SESSION_TAG_KEYS = ("event", "ref", "repo")


class CredentialSet(BaseModel):
    """Temporary AWS credentials returned by an STS exchange.

    The three key fields are always produced and consumed together.
    Secret material is kept out of repr so credentials never end up in logs.
    """

    access_key_id: str = Field(..., alias="AccessKeyId", min_length=1)
    secret_access_key: str = Field(..., alias="SecretAccessKey", min_length=1, repr=False)
    session_token: str = Field(..., alias="SessionToken", min_length=1, repr=False)
    expiration: Optional[datetime] = Field(None, alias="Expiration")

    class Config:
        populate_by_name = True
        frozen = True
        extra = "ignore"

    def as_environment(self) -> Dict[str, str]:
        """Map credentials to the environment variable names the AWS SDKs read."""
        return {
            "AWS_ACCESS_KEY_ID": self.access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.secret_access_key,
            "AWS_SESSION_TOKEN": self.session_token,
        }

    def as_session_kwargs(self) -> Dict[str, str]:
        """Keyword arguments for boto3.Session."""
        return {
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
            "aws_session_token": self.session_token,
        }


class SessionTags(BaseModel):
    """Provenance tags attached to the second-hop session."""

    event: str = Field(..., description="Name of the event that triggered the workflow")
    ref: str = Field(..., description="Workflow reference (path@ref)")
    repo: str = Field(..., description="Repository owner/name")

    class Config:
        frozen = True

    def to_sts_tags(self) -> List[Dict[str, str]]:
        return [{"Key": key, "Value": getattr(self, key)} for key in SESSION_TAG_KEYS]

    @staticmethod
    def transitive_keys() -> List[str]:
        return list(SESSION_TAG_KEYS)


class RunStage(str, Enum):
    """States of the credential exchange state machine."""

    START = "start"
    VALIDATED = "validated"
    HOP1_EXCHANGED = "hop1_exchanged"
    HOP1_PUBLISHED = "hop1_published"
    HOP1_VERIFIED = "hop1_verified"
    HOP2_EXCHANGED = "hop2_exchanged"
    HOP2_PUBLISHED = "hop2_published"
    HOP2_VERIFIED = "hop2_verified"
    PROBED = "probed"
    DONE = "done"
    FAILED = "failed"
    REJECTED = "rejected"


class RunStatus(str, Enum):
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class RunResult:
    """Outcome of one run.

    Attributes:
        status: succeeded, rejected or failed
        stage: current state; DONE, REJECTED or FAILED once the run is over
        reached: last non-terminal state the run got to
        message: rejection or failure message (empty on success)
        principals: principal ids resolved after each hop
        listing: bullet list produced by the smoke-test probe
    """

    status: RunStatus = RunStatus.SUCCEEDED
    stage: RunStage = RunStage.START
    reached: RunStage = RunStage.START
    message: str = ""
    principals: List[str] = field(default_factory=list)
    listing: str = ""

    @property
    def failed(self) -> bool:
        return self.status is RunStatus.FAILED

    @property
    def rejected(self) -> bool:
        return self.status is RunStatus.REJECTED
