"""
sharepoint-connector: File and folder commands for the SharePoint REST API.

A small client for the ``_api/web`` endpoints of a SharePoint site. Every
command resolves its path against a configured base folder, issues a single
request and returns the parsed result:

- delete a folder or a file
- create a folder
- upload a file (replacing an existing one)
- move a folder to the recycle bin and restore it again

Example:
    >>> from sharepoint_connector import (
    ...     SharePointContextConfiguration,
    ...     SharePointDataClient,
    ... )
    >>> configuration = SharePointContextConfiguration(
    ...     site_url="https://contoso.sharepoint.com/sites/demo",
    ...     server_relative_url="/sites/demo/Shared Documents",
    ...     access_token=token,
    ... )
    >>> client = SharePointDataClient(configuration)
    >>> client.create_folder("Reports")
"""

from sharepoint_connector.client import SharePointDataClient
from sharepoint_connector.configuration import (
    HeaderActionType,
    SharePointContextConfiguration,
    build_headers,
)
from sharepoint_connector.exceptions import (
    SharePointAuthError,
    SharePointConfigurationError,
    SharePointError,
    SharePointRequestError,
    SharePointResponseError,
)
from sharepoint_connector.models import SharePointFile, SharePointFolder

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Client
    "SharePointDataClient",
    # Configuration
    "SharePointContextConfiguration",
    "HeaderActionType",
    "build_headers",
    # Return types
    "SharePointFolder",
    "SharePointFile",
    # Exceptions
    "SharePointError",
    "SharePointConfigurationError",
    "SharePointAuthError",
    "SharePointRequestError",
    "SharePointResponseError",
]
