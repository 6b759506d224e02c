import datetime
import logging
import os
import sys

from .browser import CachedInteractiveBrowserCredential
from .config import EnvHostEnvironment, StaticHostEnvironment
from .helpers import get_log_level
from .provider import (
    CredentialStrategy,
    TokenCredentialProvider,
    get_token_credential,
    is_running_on_build_agent,
    select_credential_strategy,
)
from .proxy import is_fiddler_active

__all__ = [
    "CachedInteractiveBrowserCredential",
    "CredentialStrategy",
    "EnvHostEnvironment",
    "StaticHostEnvironment",
    "TokenCredentialProvider",
    "get_token_credential",
    "is_fiddler_active",
    "is_running_on_build_agent",
    "select_credential_strategy",
]

run_time = datetime.datetime.now()
now_string = f"{run_time:%Y-%m-%d_%H:%M:%S%z}"
FORMAT = "[%(levelname)s] %(asctime)s: %(message)s"

log_status = os.getenv("LOG_OUTPUT")
logfile = os.path.join("logs", f"{now_string}.log")


def get_handlers(log_status, logfile):
    if log_status is None:
        return [logging.StreamHandler(sys.stdout)]
    status = log_status.lower()
    if status.startswith("both") or status.startswith("file"):
        os.makedirs(os.path.dirname(logfile), exist_ok=True)
    if status.startswith("both"):
        return [logging.StreamHandler(sys.stdout), logging.FileHandler(logfile)]
    if status.startswith("file"):
        return [logging.FileHandler(logfile)]
    if not status.startswith("std"):
        print(f"Did not recognize {log_status}. Setting to stdout.")
    return [logging.StreamHandler(sys.stdout)]


level = get_log_level()
logging.basicConfig(
    level=level,
    format=FORMAT,
    datefmt="%Y-%m-%d_%H:%M:%S%z",
    handlers=get_handlers(log_status, logfile),
)
logger = logging.getLogger(__name__)
logger.debug(f"logging set to {level} to output: {log_status or 'stdout'}.")
