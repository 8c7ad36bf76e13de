"""Configuration management for the SpringCM upload agent."""

import os
from pathlib import Path
from typing import Any, Optional

CONFIG_DIR_NAME = "springcm-upload"
CONFIG_FILE_NAME = "config.json"


class Config:
    """Environment configuration.

    Credentials given in the environment fill in whatever a task's ``auth``
    block leaves out, so secrets do not have to live in the task file.
    """

    def __init__(self) -> None:
        self.client_id: Optional[str] = os.environ.get("SPRINGCM_CLIENT_ID")
        self.client_secret: Optional[str] = os.environ.get("SPRINGCM_CLIENT_SECRET")
        self.data_center: Optional[str] = os.environ.get("SPRINGCM_DATA_CENTER")
        self.config_file: Optional[str] = os.environ.get("SPRINGCM_UPLOAD_CONFIG")

    @staticmethod
    def get_config_dir() -> Path:
        """Get the user configuration directory (honours XDG_CONFIG_HOME)."""
        base = os.environ.get("XDG_CONFIG_HOME")
        root = Path(base) if base else Path.home() / ".config"
        return root / CONFIG_DIR_NAME

    def get_config_path(self) -> Path:
        """Get the path of the user configuration file."""
        return self.get_config_dir() / CONFIG_FILE_NAME

    def auth_defaults(self) -> dict[str, Any]:
        """Credential fields available from the environment."""
        defaults: dict[str, Any] = {}
        if self.client_id:
            defaults["clientId"] = self.client_id
        if self.client_secret:
            defaults["clientSecret"] = self.client_secret
        if self.data_center:
            defaults["dataCenter"] = self.data_center
        return defaults

    def merge_auth(self, auth: Optional[dict[str, Any]]) -> dict[str, Any]:
        """Merge a task's auth block over the environment defaults."""
        merged = self.auth_defaults()
        if auth:
            for key, value in auth.items():
                if value in (None, ""):
                    continue
                merged[_AUTH_KEY_ALIASES.get(key, key)] = value
        return merged


_AUTH_KEY_ALIASES = {
    "client_id": "clientId",
    "client_secret": "clientSecret",
    "data_center": "dataCenter",
}


config = Config()
