class SharePointError(Exception):
    """Base class for every error raised by the SharePoint connector."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        if message is None:
            message = "SharePoint operation failed"
        super().__init__(message)
        # Optional chaining for debugging
        self.__cause__ = cause


class SharePointConfigurationError(SharePointError):
    """Raised when the connector configuration is missing or invalid."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        if message is None:
            message = "Invalid SharePoint connector configuration"
        super().__init__(message, cause=cause)


class SharePointAuthError(SharePointError):
    """Raised when no bearer token is available for a request."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        if message is None:
            message = "No access token available for SharePoint request"
        super().__init__(message, cause=cause)


class SharePointRequestError(SharePointError):
    """Raised when a SharePoint HTTP request fails or returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None,
        body: str | None,
        url: str,
        server_message: str | None = None,
        cause: Exception = None,
    ):
        if server_message:
            message = f"{message}: {server_message}"
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.body = body
        self.url = url
        self.server_message = server_message


class SharePointResponseError(SharePointError):
    """Raised when a SharePoint response cannot be interpreted."""

    def __init__(
        self,
        message: str,
        *,
        body: str | None = None,
        url: str | None = None,
        cause: Exception = None,
    ):
        super().__init__(message, cause=cause)
        self.body = body
        self.url = url
