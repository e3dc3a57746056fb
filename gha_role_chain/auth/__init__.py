"""AWS authentication for the role chain.

This module provides the OIDC token sources, second-hop role selection and
the STS exchanges themselves.
"""

from .clients import AwsClientFactory
from .role_chain import RoleChain
from .role_resolver import RoleResolver, create_role_resolver
from .token_provider import TokenProvider, create_token_provider

__all__ = [
    "AwsClientFactory",
    "RoleChain",
    "RoleResolver",
    "TokenProvider",
    "create_role_resolver",
    "create_token_provider",
]
