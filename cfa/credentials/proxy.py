"""
Detection of a local Fiddler debugging proxy.

Azure CLI authentication does not work while Fiddler intercepts traffic, so
credential selection needs a cheap yes/no probe. Detection looks at proxy
environment variables and, on Windows, the current user's WinINET proxy
settings, which Fiddler rewrites while capturing.
"""

import logging
import os
import sys
from urllib.parse import urlsplit

import cfa.credentials.defaults as d

logger = logging.getLogger(__name__)


def proxy_points_to_fiddler(
    proxy: str, ports: tuple[int, ...] = d.default_fiddler_proxy_ports
) -> bool:
    """Check whether a single proxy address targets a loopback Fiddler port.

    IPv6 hosts may be bracketed (``[::1]:8888``) or not (``::1:8888``, as
    WinINET can store them); an unbracketed address is read as host and port
    split at the last colon.

    Args:
        proxy: Proxy address, with or without a scheme, e.g. ``127.0.0.1:8888``
            or ``http://localhost:8888``.
        ports: Ports considered to belong to Fiddler.

    Returns:
        bool: True if the host is loopback and the port is one of ``ports``.
    """
    if not proxy or not proxy.strip():
        return False
    proxy = proxy.strip()
    if "://" not in proxy:
        proxy = f"http://{proxy}"

    scheme, _, address = proxy.partition("://")
    netloc, slash, path = address.partition("/")
    if netloc.count(":") > 1 and "[" not in netloc:
        host, _, port = netloc.rpartition(":")
        proxy = f"{scheme}://[{host}]:{port}{slash}{path}"

    try:
        parts = urlsplit(proxy)
        return parts.hostname in d.loopback_hosts and parts.port in ports
    except ValueError:
        logger.debug(f"Could not parse proxy address {proxy!r}.")
        return False


def _environment_proxy_is_fiddler(ports: tuple[int, ...]) -> bool:
    for name in d.default_proxy_environment_variables:
        value = os.environ.get(name)
        if value and proxy_points_to_fiddler(value, ports):
            logger.debug(f"Proxy variable {name}={value} points to Fiddler.")
            return True
    return False


def _wininet_proxy_is_fiddler(ports: tuple[int, ...]) -> bool:
    if sys.platform != "win32":
        return False

    import winreg

    with winreg.OpenKey(winreg.HKEY_CURRENT_USER, d.wininet_settings_key) as key:
        enabled, _ = winreg.QueryValueEx(key, "ProxyEnable")
        if not enabled:
            return False
        server, _ = winreg.QueryValueEx(key, "ProxyServer")

    # Either "host:port" or "http=host:port;https=host:port"
    for entry in str(server).split(";"):
        address = entry.split("=", 1)[-1]
        if proxy_points_to_fiddler(address, ports):
            logger.debug(f"WinINET proxy {server} points to Fiddler.")
            return True
    return False


def is_fiddler_active(ports: tuple[int, ...] = d.default_fiddler_proxy_ports) -> bool:
    """Check whether Fiddler appears to be intercepting traffic on this machine.

    Never raises: any failure while probing (e.g. access denied reading the
    registry) is logged and treated as "not active".

    Args:
        ports: Ports considered to belong to Fiddler. Defaults to 8888 and 8866.

    Returns:
        bool: True if a Fiddler proxy was detected.

    Example:
        >>> os.environ["HTTPS_PROXY"] = "http://127.0.0.1:8888"
        >>> is_fiddler_active()
        True
    """
    try:
        return _environment_proxy_is_fiddler(ports) or _wininet_proxy_is_fiddler(
            ports
        )
    except Exception as e:
        logger.debug(f"Fiddler detection failed, assuming inactive: {e}")
        return False
