import argparse
import datetime
import sys

from azure.core.exceptions import ClientAuthenticationError

from cfa.credentials.config import EnvHostEnvironment, StaticHostEnvironment
from cfa.credentials.provider import (
    TokenCredentialProvider,
    is_cli_compatible_environment,
)


def describe_credential():
    parser = argparse.ArgumentParser(
        description="Show which Azure credential is used for an environment"
    )
    parser.add_argument(
        "-e",
        "--environment",
        type=str,
        default=None,
        help="Environment name. Read from CFA_ENVIRONMENT, APP_ENVIRONMENT or ENVIRONMENT if omitted",
    )
    parser.add_argument(
        "-p", "--dotenv_path", type=str, default=None, help="Path to .env file"
    )
    parser.add_argument(
        "-s",
        "--scope",
        type=str,
        default=None,
        help="Acquire a token for this scope to check the credential works",
    )
    args = parser.parse_args()

    # loads the .env file, which may also set CI or proxy variables
    environment = EnvHostEnvironment(dotenv_path=args.dotenv_path)
    if args.environment is not None:
        environment = StaticHostEnvironment(args.environment)

    environment_name = environment.environment_name
    credential = TokenCredentialProvider(environment).get_token_credential()
    print(f"Environment: {environment_name}")
    print(f"Azure CLI compatible: {is_cli_compatible_environment(environment_name)}")
    print(f"Credential: {type(credential).__name__}")

    if args.scope is None:
        return

    try:
        token = credential.get_token(args.scope)
    except ClientAuthenticationError as e:
        print(f"Could not acquire a token for {args.scope}: {e.message}")
        sys.exit(1)
    expires = datetime.datetime.fromtimestamp(token.expires_on, tz=datetime.timezone.utc)
    print(f"Token for {args.scope} expires at {expires:%Y-%m-%d %H:%M:%S%z}")
