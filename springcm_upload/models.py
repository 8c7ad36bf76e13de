"""Data models for SpringCM API objects."""

from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import ConfigError, InvalidResponseError

DATA_CENTERS = ("na11", "na21", "eu11", "uatna11", "uateu11")


@dataclass(frozen=True)
class Credentials:
    """SpringCM API user credentials for one task."""

    client_id: str
    client_secret: str = ""
    data_center: str = "na11"

    def __repr__(self) -> str:
        # Never print the secret
        return (
            f"Credentials(client_id={self.client_id!r}, "
            f"data_center={self.data_center!r})"
        )

    @property
    def is_uat(self) -> bool:
        """Whether these credentials target a UAT (sandbox) data center."""
        return self.data_center.startswith("uat")

    @classmethod
    def from_dict(cls, data: Any) -> "Credentials":
        """Create credentials from a task's ``auth`` mapping.

        Accepts both camelCase (``clientId``) and snake_case (``client_id``)
        keys.

        Raises:
            ConfigError: If the mapping is missing or incomplete
        """
        if not isinstance(data, dict):
            raise ConfigError("Task 'auth' must be an object")

        client_id = data.get("clientId", data.get("client_id"))
        client_secret = data.get("clientSecret", data.get("client_secret", ""))
        data_center = data.get("dataCenter", data.get("data_center", "na11"))

        if not client_id or not isinstance(client_id, str):
            raise ConfigError("Task 'auth' requires a 'clientId'")
        if not isinstance(client_secret, str):
            raise ConfigError("Task 'auth.clientSecret' must be a string")
        if data_center not in DATA_CENTERS:
            raise ConfigError(
                f"Unknown data center '{data_center}'. "
                f"Expected one of: {', '.join(DATA_CENTERS)}"
            )

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            data_center=data_center,
        )


@dataclass
class Folder:
    """Handle to a folder in the SpringCM document repository."""

    id: str
    name: str
    path: str
    href: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Folder":
        """Create a Folder from a SpringCM folder resource.

        The folder id is the last segment of the resource ``Href``.
        """
        href = data.get("Href")
        if not href or not isinstance(href, str):
            raise InvalidResponseError(f"Folder response without Href: {data}")

        return cls(
            id=href.rstrip("/").rsplit("/", 1)[-1],
            name=data.get("Name", ""),
            path=data.get("Path", ""),
            href=href,
        )


@dataclass
class UploadedDocument:
    """Document created by an upload."""

    name: str
    href: Optional[str] = None
    size: Optional[int] = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "UploadedDocument":
        """Create an UploadedDocument from a SpringCM document resource."""
        return cls(
            name=data.get("Name", ""),
            href=data.get("Href"),
            size=data.get("NativeFileSize"),
        )
