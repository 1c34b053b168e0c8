"""
SharePoint REST client for file and folder commands under a configured base path.
"""

from __future__ import annotations

import json
import logging
import uuid
from http.client import HTTPException
from typing import Any, Callable, TypeVar
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from sharepoint_connector.configuration import (
    HeaderActionType,
    SharePointContextConfiguration,
    build_headers,
)
from sharepoint_connector.exceptions import (
    SharePointAuthError,
    SharePointRequestError,
    SharePointResponseError,
)
from sharepoint_connector.models import SharePointFile, SharePointFolder

logger = logging.getLogger(__name__)

_Entity = TypeVar("_Entity", SharePointFile, SharePointFolder)


def join_server_relative_url(base: str, *parts: str | None) -> str:
    """Append path segments to a server-relative base path."""
    segments = [part.strip("/") for part in parts if part and part.strip("/")]
    path = "/".join([base.rstrip("/"), *segments])
    return path or "/"


def odata_literal(value: str) -> str:
    """Escape a value for use inside a quoted OData string literal in a URL."""
    return quote(value.replace("'", "''"), safe="/")


def _extract_server_message(body: bytes | None) -> str | None:
    """Pull the human readable message out of a SharePoint error payload."""
    if not body:
        return None
    try:
        data = json.loads(body.decode("utf-8", errors="replace"))
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("odata.error") or data.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if isinstance(message, dict):
        message = message.get("value")
    return message if isinstance(message, str) and message else None


class SharePointDataClient:
    """Commands that change content of a SharePoint site below a base folder."""

    def __init__(
        self,
        configuration: SharePointContextConfiguration,
        *,
        token_provider: Callable[[], str] | None = None,
        request_func: Callable[..., object] | None = None,
    ) -> None:
        self._configuration = configuration
        self._token_provider = token_provider
        self._request = request_func or urlopen

    @property
    def configuration(self) -> SharePointContextConfiguration:
        return self._configuration

    def resolve_path(self, *parts: str | None) -> str:
        """Resolve relative segments against the configured base path."""
        return join_server_relative_url(
            self._configuration.server_relative_url, *parts
        )

    def delete_resource(self, server_relative_url: str) -> bool:
        """Delete the folder at a path relative to the base path."""
        path = self.resolve_path(server_relative_url)
        self._command(
            f"_api/web/GetFolderByServerRelativeUrl('{odata_literal(path)}')",
            HeaderActionType.DELETE_RESOURCE,
            request_kind="delete resource",
        )
        return True

    def delete_file(self, server_relative_url: str, file_name: str) -> bool:
        """Delete a file from a folder relative to the base path."""
        _validate_name(file_name, "file_name")
        path = self.resolve_path(server_relative_url, file_name)
        self._command(
            f"_api/web/GetFileByServerRelativeUrl('{odata_literal(path)}')",
            HeaderActionType.DELETE_RESOURCE,
            request_kind="delete file",
        )
        return True

    def create_folder(
        self, folder_name: str, server_relative_url: str | None = None
    ) -> SharePointFolder:
        """
        Create a folder.

        Without ``server_relative_url`` the folder is created directly below
        the configured base path, otherwise below that relative path.
        """
        if not folder_name or not folder_name.replace("/", "").strip():
            raise ValueError("folder_name must not be empty")
        path = self.resolve_path(server_relative_url, folder_name)
        payload = json.dumps({"ServerRelativeUrl": path}).encode("utf-8")
        url, body = self._command(
            "_api/web/folders",
            HeaderActionType.APPJSON_NOMETADATA,
            data=payload,
            request_kind="create folder",
        )
        return self._parse_entity(SharePointFolder, body, url, "create folder")

    def upload_file(
        self, server_relative_url: str, file_name: str, content: bytes
    ) -> SharePointFile:
        """Upload file bytes into a folder, replacing an existing file of that name."""
        _validate_name(file_name, "file_name")
        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise TypeError("content must be bytes")
        folder = self.resolve_path(server_relative_url)
        url, body = self._command(
            f"_api/web/GetFolderByServerRelativeUrl('{odata_literal(folder)}')"
            f"/Files/add(overwrite=true,url='{odata_literal(file_name)}')",
            HeaderActionType.APPJSON_NOMETADATA,
            data=bytes(content),
            content_type="application/octet-stream",
            request_kind="upload file",
        )
        return self._parse_entity(SharePointFile, body, url, "upload file")

    def recycle_resource(self, server_relative_url: str) -> uuid.UUID | None:
        """
        Move a folder to the site recycle bin.

        Returns the recycle bin item id needed to restore it, or ``None`` when
        SharePoint answers with an empty id.
        """
        path = self.resolve_path(server_relative_url)
        url, body = self._command(
            f"_api/web/GetFolderByServerRelativeUrl('{odata_literal(path)}')/recycle",
            HeaderActionType.APPJSON_NOMETADATA,
            request_kind="recycle resource",
        )
        data = self._parse_json(body, url, "recycle resource")
        if not isinstance(data, dict):
            raise SharePointResponseError(
                "Recycle response is not a JSON object",
                body=body.decode("utf-8", errors="replace"),
                url=url,
            )
        value = data.get("value")
        if value is None and isinstance(data.get("d"), dict):
            value = data["d"].get("Recycle")
        if not value:
            logger.warning(f"Recycle of [{path}] returned an empty recycle bin id")
            return None
        try:
            return uuid.UUID(str(value))
        except ValueError as exc:
            raise SharePointResponseError(
                f"Recycle response contains an invalid id: {value!r}",
                body=body.decode("utf-8", errors="replace"),
                url=url,
                cause=exc,
            ) from exc

    def restore_recycle_bin_resource(self, resource_id: uuid.UUID | str) -> bool:
        """Restore a recycle bin item by its id."""
        if not isinstance(resource_id, uuid.UUID):
            try:
                resource_id = uuid.UUID(str(resource_id))
            except ValueError as exc:
                raise ValueError(
                    f"resource_id is not a valid GUID: {resource_id!r}"
                ) from exc
        self._command(
            f"_api/web/recyclebin('{resource_id}')/restore",
            HeaderActionType.APPJSON_NOMETADATA,
            request_kind="restore resource",
        )
        return True

    def _resolve_token(self) -> str:
        if self._token_provider is not None:
            try:
                token = self._token_provider()
            except Exception as exc:
                raise SharePointAuthError(
                    f"Token provider failed: {exc}", cause=exc
                ) from exc
        else:
            token = self._configuration.access_token
        if not token:
            raise SharePointAuthError()
        return token

    def _command(
        self,
        endpoint: str,
        action: HeaderActionType,
        *,
        request_kind: str,
        data: bytes = b"",
        content_type: str | None = None,
    ) -> tuple[str, bytes]:
        """POST to an endpoint below the site URL and return the URL and response body."""
        url = f"{self._configuration.site_url}/{endpoint}"
        headers = build_headers(action, self._resolve_token())
        if content_type is not None:
            headers["Content-Type"] = content_type
        # an empty body keeps Content-Length: 0 on bodiless POSTs
        request = Request(url, data=data, headers=headers, method="POST")
        logger.info(f"SharePoint {request_kind}: POST {url}")

        response = self._open(request, request_kind)
        try:
            status = getattr(response, "status", None)
            if status is None:
                status = response.getcode()
            body = response.read()
        except (OSError, HTTPException) as exc:
            raise SharePointRequestError(
                f"SharePoint {request_kind} response could not be read: {exc!r}",
                status_code=None,
                body=None,
                url=url,
            ) from exc
        finally:
            try:
                response.close()
            except OSError:
                pass

        logger.debug(f"SharePoint {request_kind} returned {status} ({len(body)} bytes)")
        if status is None or not (200 <= status < 300):
            raise SharePointRequestError(
                f"SharePoint {request_kind} request returned status {status}",
                status_code=status,
                body=body.decode("utf-8", errors="replace") if body else None,
                url=url,
                server_message=_extract_server_message(body),
            )
        return url, body

    def _open(self, request: Request, request_kind: str) -> Any:
        """Open the request, turning transport and HTTP failures into request errors."""
        try:
            return self._request(request, timeout=self._configuration.timeout)
        except HTTPError as exc:
            try:
                body = exc.read()
            except (OSError, HTTPException):
                body = None
            raise SharePointRequestError(
                f"SharePoint {request_kind} request failed with status {exc.code}",
                status_code=exc.code,
                body=body.decode("utf-8", errors="replace") if body else None,
                url=request.full_url,
                server_message=_extract_server_message(body),
            ) from exc
        except (URLError, OSError, HTTPException) as exc:
            reason = getattr(exc, "reason", exc)
            raise SharePointRequestError(
                f"SharePoint {request_kind} request failed due to network error: {reason}",
                status_code=None,
                body=None,
                url=request.full_url,
            ) from exc

    def _parse_json(self, body: bytes, url: str, request_kind: str) -> Any:
        text = body.decode("utf-8", errors="replace")
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SharePointResponseError(
                f"Invalid JSON response for SharePoint {request_kind}",
                body=text,
                url=url,
                cause=exc,
            ) from exc

    def _parse_entity(
        self, model: type[_Entity], body: bytes, url: str, request_kind: str
    ) -> _Entity:
        data = self._parse_json(body, url, request_kind)
        try:
            return model.from_json(data)
        except SharePointResponseError as exc:
            raise SharePointResponseError(
                f"Unexpected SharePoint {request_kind} response: {exc}",
                body=body.decode("utf-8", errors="replace"),
                url=url,
                cause=exc,
            ) from exc


def _validate_name(name: str, field: str) -> None:
    if not name or not name.strip():
        raise ValueError(f"{field} must not be empty")
    if "/" in name:
        raise ValueError(f"{field} must not contain '/'")
