"""SpringCM Upload - deliver triggered local directories to SpringCM."""

from .api import SpringCMClient
from .exceptions import (
    AuthenticationError,
    ConfigError,
    DeliveryFailedError,
    DeliveryFilesystemError,
    InvalidResponseError,
    NetworkError,
    NotFoundError,
    PatternError,
    RateLimitError,
    RepositoryConnectionError,
    RepositoryError,
    UploadError,
    UploaderError,
)
from .models import Credentials, Folder, UploadedDocument

__version__ = "0.1.0"

__all__ = [
    "SpringCMClient",
    "Credentials",
    "Folder",
    "UploadedDocument",
    "UploaderError",
    "AuthenticationError",
    "ConfigError",
    "DeliveryFailedError",
    "DeliveryFilesystemError",
    "InvalidResponseError",
    "NetworkError",
    "NotFoundError",
    "PatternError",
    "RateLimitError",
    "RepositoryConnectionError",
    "RepositoryError",
    "UploadError",
]
