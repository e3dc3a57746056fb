#!/usr/bin/env python3
"""
Role chain command

Runs the two-hop role chain as a GitHub Actions step:

    gha-role-chain --role-arn arn:aws:iam::123456789012:role/MyRole
    python -m gha_role_chain            # role ARN from INPUT_ROLE-ARN

Exit status is 0 when the chain completes or the role ARN is rejected
(set FAIL_ON_REJECTION=true to fail instead) and 1 on any failure.

Module: cli
"""

import os
import sys

import click
from dotenv import load_dotenv

from .config import get_config
from .errors import ConfigurationError, ExchangeError
from .logging_config import configure_logging
from .runner import RoleChainRunner
from .version import __version__


def handle_error(error: Exception, verbose: bool = False) -> None:
    """Handle and format errors"""
    if verbose:
        click.echo(f"Error: {type(error).__name__}: {error}", err=True)
        import traceback

        traceback.print_exc()
    else:
        click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def load_env_file(ctx: click.Context, param: click.Parameter, value: str) -> str:
    """Load a .env file before the remaining options read their envvars."""
    load_dotenv(value)
    return value


@click.command()
@click.version_option(version=__version__, prog_name="gha-role-chain")
@click.option(
    "--env-file",
    default=".env",
    type=click.Path(dir_okay=False),
    is_eager=True,
    expose_value=False,
    callback=load_env_file,
    help="Environment file loaded before the other options (default: .env)",
)
@click.option(
    "--role-arn",
    envvar="INPUT_ROLE-ARN",
    default="",
    help="ARN of the role to assume on the second hop (env: INPUT_ROLE-ARN)",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging and verbose error output")
def main(role_arn: str, verbose: bool):
    """
    Exchange the GitHub OIDC token for AWS credentials and assume a tagged role.

    The resulting credentials are exported as AWS_ACCESS_KEY_ID,
    AWS_SECRET_ACCESS_KEY and AWS_SESSION_TOKEN for later steps.
    """
    configure_logging("DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO"))

    try:
        config = get_config()
        runner = RoleChainRunner.from_config(config)
    except ConfigurationError as e:
        handle_error(e, verbose)
        return

    result = runner.run(role_arn)

    if result.failed:
        click.echo(ExchangeError(result.reached.value, result.message).format(), err=True)
        sys.exit(1)

    if result.rejected and config.fail_on_rejection:
        sys.exit(1)


if __name__ == "__main__":
    main()
