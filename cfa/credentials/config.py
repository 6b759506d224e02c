"""
Functions and classes for resolving configuration values
and the host environment name.
"""

import logging
import os

from dotenv import load_dotenv

import cfa.credentials.defaults as d
from cfa.credentials.helpers import is_blank

logger = logging.getLogger(__name__)


def try_get_val_from_env(
    env_variable_name: str, value_name: str = None
) -> tuple[str, str]:
    """Attempt to get a configuration value from local environment variables.

    Blank values count as missing.

    Args:
        env_variable_name: Name of the environment variable to attempt to retrieve.
        value_name: Descriptive name for the value, for more readable failure messages.
            If None, use the value of ``env_variable_name``.

    Returns:
        tuple[str, str]: The value (or None) and a failure message (or None on success).

    Example:
        >>> os.environ["TEST_VAR"] = "test_value"
        >>> try_get_val_from_env("TEST_VAR")
        ('test_value', None)
    """
    if value_name is None:
        value_name = env_variable_name

    result = os.environ.get(env_variable_name, None)

    if is_blank(result):
        return None, (
            f"Could not find a valid configuration value for '{value_name}' "
            f"among available environment variables. Looked for an environment "
            f"variable named '{env_variable_name}'."
        )
    return result, None


def get_config_val(
    key: str,
    config_dict: dict = None,
    try_env: bool = True,
    env_variable_name: str = None,
    value_name: str = None,
) -> str | None:
    """Get a configuration value from a dictionary and/or from environment variables.

    The dictionary is consulted first. The environment is consulted next when
    ``try_env`` is True, under ``env_variable_name`` or ``key.upper()``.

    Args:
        key: Key to look up in ``config_dict``.
        config_dict: Dictionary of configuration values. Optional.
        try_env: Look in environment variables when the dictionary has no value?
        env_variable_name: Environment variable name to check. Defaults to ``key.upper()``.
        value_name: Descriptive name for the value, used in the warning logged
            when nothing is found. Defaults to ``key``.

    Returns:
        str | None: The configuration value, or None if it could not be found.

    Example:
        >>> get_config_val("api_key", config_dict={"api_key": "abc"})
        'abc'
    """
    if value_name is None:
        value_name = key
    if env_variable_name is None:
        env_variable_name = key.upper()

    if config_dict is not None and config_dict.get(key) is not None:
        return config_dict[key]

    if not try_env:
        logger.warning(
            f"No configuration value for '{value_name}' under the key '{key}' "
            "and environment variables were not searched."
        )
        return None

    result, message = try_get_val_from_env(env_variable_name, value_name=value_name)
    if result is None:
        logger.warning(message)
    return result


class StaticHostEnvironment:
    """Host environment with a fixed environment name."""

    def __init__(self, environment_name: str):
        self.environment_name = environment_name

    def __repr__(self):
        return f"StaticHostEnvironment({self.environment_name!r})"


class EnvHostEnvironment:
    """Host environment whose name is read from environment variables.

    The name is re-read on every access of ``environment_name`` so changes to
    the process environment are observed by later callers. The first non-blank
    variable among ``variable_names`` wins; ``default`` is used when none is set.

    Args:
        variable_names: Environment variables to consult, in order.
        default: Environment name used when no variable is set.
        dotenv_path: Path to a .env file loaded once at construction.
            Existing environment variables are not overridden.

    Example:
        >>> os.environ["CFA_ENVIRONMENT"] = "Local"
        >>> EnvHostEnvironment().environment_name
        'Local'
    """

    def __init__(
        self,
        variable_names: tuple[str, ...] = d.default_environment_name_variables,
        default: str = d.default_environment_name,
        dotenv_path: str = None,
    ):
        self.variable_names = tuple(variable_names)
        self.default = default
        if dotenv_path is not None:
            logger.debug(f"Loading environment variables from {dotenv_path}.")
            load_dotenv(dotenv_path=dotenv_path, override=False)

    @property
    def environment_name(self) -> str:
        for name in self.variable_names:
            value, _ = try_get_val_from_env(name)
            if value is not None:
                logger.debug(f"Environment name '{value.strip()}' read from {name}.")
                return value.strip()
        logger.debug(f"No environment name variable set. Using '{self.default}'.")
        return self.default

    def __repr__(self):
        return f"EnvHostEnvironment(variable_names={self.variable_names!r})"
