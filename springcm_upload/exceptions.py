"""Exceptions raised by the SpringCM upload agent."""

from typing import Optional


class UploaderError(Exception):
    """Base exception for all springcm-upload errors."""


class ConfigError(UploaderError):
    """Raised when a task or path mapping is configured incorrectly."""


class PatternError(UploaderError):
    """Raised when a glob pattern cannot be evaluated.

    Either the pattern itself is malformed or the directory it is applied
    to cannot be read.
    """

    def __init__(self, message: str, pattern: Optional[str] = None):
        super().__init__(message)
        self.pattern = pattern


class DeliveryFilesystemError(UploaderError):
    """Raised when deleting a trigger file or removing a directory fails."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class DeliveryFailedError(UploaderError):
    """Raised at the end of a run that continued past one or more failures."""

    def __init__(self, message: str, errors: Optional[list[Exception]] = None):
        super().__init__(message)
        self.errors = errors or []


class RepositoryError(UploaderError):
    """Base exception for errors talking to the SpringCM API."""


class RepositoryConnectionError(RepositoryError):
    """Raised when the client cannot connect to the document repository."""


class AuthenticationError(RepositoryConnectionError):
    """Raised when the API user credentials are rejected."""


class NetworkError(RepositoryError):
    """Raised on transport level failures (timeouts, DNS, refused connections)."""


class RateLimitError(RepositoryError):
    """Raised when the API keeps answering 429 after all retries."""


class NotFoundError(RepositoryError):
    """Raised when a remote folder or resource does not exist."""


class InvalidResponseError(RepositoryError):
    """Raised when the API returns something that is not the expected JSON."""


class UploadError(RepositoryError):
    """Raised when a single document upload fails."""

    def __init__(self, message: str, file_name: Optional[str] = None):
        super().__init__(message)
        self.file_name = file_name
