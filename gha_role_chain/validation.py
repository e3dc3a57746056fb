import re
from typing import Optional

from .errors import EmptyRoleError, MalformedRoleError

ROLE_ARN_PATTERN = re.compile(r"^arn:(aws|aws-cn|aws-us-gov):iam::[0-9]{12}:.*$")


def validate_role_arn(value: Optional[str]) -> str:
    """Check a role ARN before any network call is made.

    Args:
        value: Role ARN supplied by the caller (may be None or empty)

    Returns:
        The role ARN, unchanged

    Raises:
        EmptyRoleError: If the value is missing or blank
        MalformedRoleError: If the value is not an IAM ARN with a 12-digit account
    """
    if not value or not value.strip():
        raise EmptyRoleError()
    if not ROLE_ARN_PATTERN.match(value):
        raise MalformedRoleError()
    return value
