"""Export credentials to the current process and to later workflow steps.

GitHub Actions reads exported variables from the file named by GITHUB_ENV,
using the same heredoc syntax as the @actions/core toolkit:

    NAME<<ghadelimiter_<uuid>
    value
    ghadelimiter_<uuid>
"""

import os
import sys
import uuid
from typing import MutableMapping, Optional, TextIO

import structlog

from .models import CredentialSet

logger = structlog.get_logger(__name__)

# Values the runner should redact from all subsequent log output
MASKED_VARIABLES = ("AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN")


def format_env_entry(name: str, value: str, delimiter: str) -> str:
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected input: {name} contains the delimiter {delimiter!r}")
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


class CredentialPublisher:
    """Publishes a credential set as AWS_* environment variables.

    All three variables are written together: the GITHUB_ENV block is built
    in full before a single append, and the process environment is updated
    only after that append succeeds. Republishing overwrites previous values.
    """

    def __init__(
        self,
        github_env: Optional[str] = None,
        environ: Optional[MutableMapping[str, str]] = None,
        stream: Optional[TextIO] = None,
    ):
        self.github_env = github_env
        self.environ = os.environ if environ is None else environ
        self.stream = stream or sys.stdout

    def publish(self, credentials: CredentialSet) -> None:
        variables = credentials.as_environment()

        for name in MASKED_VARIABLES:
            self.stream.write(f"::add-mask::{variables[name]}\n")
        self.stream.flush()

        if self.github_env:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            block = "".join(format_env_entry(name, value, delimiter) for name, value in variables.items())
            with open(self.github_env, "a", encoding="utf-8") as f:
                f.write(block)

        self.environ.update(variables)

        logger.info(
            "Credentials published",
            access_key_id=credentials.access_key_id,
            variables=list(variables),
            github_env=bool(self.github_env),
        )
