"""
Data objects returned by the SharePoint data commands.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from sharepoint_connector.exceptions import SharePointResponseError


def _unwrap(payload: Any) -> dict[str, Any]:
    """Return the entity dict, accepting the verbose OData {"d": {...}} envelope."""
    if not isinstance(payload, dict):
        raise SharePointResponseError(
            f"Expected a JSON object, got {type(payload).__name__}"
        )
    inner = payload.get("d")
    if isinstance(inner, dict):
        return inner
    return payload


def _optional_int(value: Any) -> int | None:
    # Length and version numbers are sent as strings by SharePoint
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class SharePointFolder:
    """A SharePoint folder as returned by the folders endpoint."""

    name: str
    server_relative_url: str
    unique_id: str | None = None
    exists: bool | None = None
    item_count: int | None = None
    time_created: str | None = None
    time_last_modified: str | None = None

    @classmethod
    def from_json(cls, payload: Any) -> SharePointFolder:
        data = _unwrap(payload)
        return cls(
            name=data.get("Name", ""),
            server_relative_url=data.get("ServerRelativeUrl", ""),
            unique_id=data.get("UniqueId"),
            exists=data.get("Exists"),
            item_count=_optional_int(data.get("ItemCount")),
            time_created=data.get("TimeCreated"),
            time_last_modified=data.get("TimeLastModified"),
        )

    def to_json(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SharePointFile:
    """A SharePoint file as returned after an upload."""

    name: str
    server_relative_url: str
    unique_id: str | None = None
    length: int | None = None
    title: str | None = None
    major_version: int | None = None
    minor_version: int | None = None
    ui_version_label: str | None = None
    check_out_type: int | None = None
    time_created: str | None = None
    time_last_modified: str | None = None
    etag: str | None = None

    @classmethod
    def from_json(cls, payload: Any) -> SharePointFile:
        data = _unwrap(payload)
        return cls(
            name=data.get("Name", ""),
            server_relative_url=data.get("ServerRelativeUrl", ""),
            unique_id=data.get("UniqueId"),
            length=_optional_int(data.get("Length")),
            title=data.get("Title"),
            major_version=_optional_int(data.get("MajorVersion")),
            minor_version=_optional_int(data.get("MinorVersion")),
            ui_version_label=data.get("UIVersionLabel"),
            check_out_type=_optional_int(data.get("CheckOutType")),
            time_created=data.get("TimeCreated"),
            time_last_modified=data.get("TimeLastModified"),
            etag=data.get("ETag"),
        )

    def to_json(self) -> dict[str, Any]:
        return asdict(self)
