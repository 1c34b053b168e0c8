"""
Connection settings for a SharePoint site and the header sets used by requests.

Settings can be built directly or loaded from the environment. A .env file is
honoured through python-dotenv, using the same variable names as below::

    sp_site_url=https://yourtenant.sharepoint.com/sites/yoursite
    sp_server_relative_url=/sites/yoursite/Shared Documents
    sp_access_token=eyJ0eXAiOi...
    sp_timeout=30

Acquiring the bearer token is left to the caller (for example an Entra ID
client credentials flow). The token can be given here or supplied per request
through a token provider on the client.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

import dotenv

from sharepoint_connector.exceptions import SharePointConfigurationError

logger = logging.getLogger(__name__)

ODATA_NOMETADATA = "application/json;odata=nometadata"


class HeaderActionType(Enum):
    """Header set attached to a SharePoint REST request."""

    DELETE_RESOURCE = "delete_resource"
    APPJSON_NOMETADATA = "appjson_nometadata"


def build_headers(action: HeaderActionType, token: str) -> dict[str, str]:
    """Return the request headers for an action, including authorization."""
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": ODATA_NOMETADATA,
    }
    if action is HeaderActionType.DELETE_RESOURCE:
        headers["IF-MATCH"] = "*"
        headers["X-HTTP-Method"] = "DELETE"
    elif action is HeaderActionType.APPJSON_NOMETADATA:
        headers["Content-Type"] = ODATA_NOMETADATA
    else:
        raise ValueError(f"Unknown header action type: {action}")
    return headers


@dataclass(frozen=True)
class SharePointContextConfiguration:
    """Site and base folder every command is resolved against."""

    site_url: str
    server_relative_url: str
    access_token: str | None = None
    timeout: float = 30.0

    def __post_init__(self) -> None:
        parsed = urlparse(self.site_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"site_url must be an absolute http(s) URL: {self.site_url}")
        if any(char.isspace() or not char.isprintable() for char in self.site_url):
            raise ValueError(
                f"site_url must not contain whitespace or control characters: {self.site_url!r}"
            )
        if not self.server_relative_url.startswith("/"):
            raise ValueError("server_relative_url must start with '/'")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        # frozen dataclass, normalise through object.__setattr__
        object.__setattr__(self, "site_url", self.site_url.rstrip("/"))
        object.__setattr__(
            self, "server_relative_url", self.server_relative_url.rstrip("/")
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = "sp_",
        *,
        dotenv_path: str | os.PathLike | None = None,
    ) -> SharePointContextConfiguration:
        """Build a configuration from environment variables (and a .env file)."""
        loaded = dotenv.load_dotenv(dotenv_path=dotenv_path, override=False)
        logger.debug(f"Loaded .env file: {loaded}")

        timeout_raw = os.getenv(f"{prefix}timeout")
        try:
            timeout = float(timeout_raw) if timeout_raw else 30.0
        except ValueError as exc:
            raise SharePointConfigurationError(
                f"Invalid value for {prefix}timeout: {timeout_raw!r}", cause=exc
            ) from exc

        try:
            return cls(
                site_url=_get_required_env(f"{prefix}site_url"),
                server_relative_url=_get_required_env(f"{prefix}server_relative_url"),
                access_token=os.getenv(f"{prefix}access_token") or None,
                timeout=timeout,
            )
        except ValueError as exc:
            raise SharePointConfigurationError(str(exc), cause=exc) from exc


def _get_required_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise SharePointConfigurationError(
            f"Missing required environment variable: {key}"
        )
    return value
