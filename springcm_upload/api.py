"""API client for the SpringCM document repository."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Iterable, Iterator
from typing import IO, Any

import httpx

from .exceptions import (
    AuthenticationError,
    InvalidResponseError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RepositoryConnectionError,
    RepositoryError,
    UploadError,
)
from .models import Credentials, Folder, UploadedDocument
from .utils import (
    API_VERSION,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    DEFAULT_UPLOAD_TIMEOUT,
    UPLOAD_CHUNK_SIZE,
    mime_type_for,
    normalize_remote_path,
)

logger = logging.getLogger(__name__)

AUTH_URL = "https://auth.springcm.com"
AUTH_URL_UAT = "https://authuat.springcm.com"


class SpringCMClient:
    """Client for interacting with the SpringCM REST API.

    The client must be connected before folders can be resolved or
    documents uploaded::

        client = SpringCMClient(credentials)
        client.connect()
        try:
            folder = client.get_folder("/Admin/Inbound")
            with open("report.pdf", "rb") as f:
                client.upload_document(folder, f, name="report.pdf", file_type="pdf")
        finally:
            client.close()
    """

    def __init__(
        self,
        credentials: Credentials,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT,
    ):
        """Initialize SpringCM API client.

        Args:
            credentials: API user credentials
            max_retries: Maximum number of retry attempts per request (default: 3)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Request timeout in seconds (default: 30.0)
            upload_timeout: Timeout for document uploads in seconds (default: 300.0)
        """
        self.credentials = credentials
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.upload_timeout = upload_timeout

        self.access_token: str | None = None
        self.api_url: str | None = None
        self.upload_url: str | None = None

        self._client: httpx.Client | None = None

    @property
    def auth_url(self) -> str:
        """Authentication endpoint for the configured data center."""
        base = AUTH_URL_UAT if self.credentials.is_uat else AUTH_URL
        return f"{base}/api/{API_VERSION}/apiuser"

    @property
    def is_connected(self) -> bool:
        """Whether connect() succeeded and close() has not been called."""
        return self.access_token is not None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    # =========================
    # Session
    # =========================

    def connect(self) -> None:
        """Authenticate as the API user and open a session.

        Raises:
            AuthenticationError: If the credentials are rejected
            RepositoryConnectionError: If the auth service cannot be reached
                or returns an unusable response
        """
        logger.info(
            f"Connecting to SpringCM (client id {self.credentials.client_id}, "
            f"data center {self.credentials.data_center})"
        )
        payload = {
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
        }

        try:
            data = self._send("POST", self.auth_url, json=payload)
        except AuthenticationError as e:
            raise AuthenticationError(
                f"SpringCM rejected the API user credentials: {e}"
            ) from e
        except RepositoryError as e:
            raise RepositoryConnectionError(
                f"Could not connect to SpringCM: {e}"
            ) from e

        token = data.get("access_token") if isinstance(data, dict) else None
        api_base_url = data.get("api_base_url") if isinstance(data, dict) else None
        if not token or not api_base_url:
            raise RepositoryConnectionError(
                "SpringCM authentication response is missing "
                "access_token or api_base_url"
            )

        self.access_token = token
        self.api_url = f"{api_base_url.rstrip('/')}/{API_VERSION}"
        # Uploads go to the upload host: https://apina11 -> https://apiuploadna11
        self.upload_url = self.api_url.replace("://api", "://apiupload", 1)
        logger.debug(f"Connected to SpringCM API at {self.api_url}")

    def close(self) -> None:
        """Close the client and release connections.

        Safe to call more than once.
        """
        self.access_token = None
        if self._client is not None and not self._client.is_closed:
            self._client.close()
        self._client = None

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise RepositoryConnectionError("Not connected to SpringCM")

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"bearer {self.access_token}"}

    # =========================
    # Request handling
    # =========================

    def _should_retry(self, exception: Exception, attempt: int) -> bool:
        """Determine if a request should be retried.

        Args:
            exception: The exception that occurred
            attempt: Current attempt number (0-based)

        Returns:
            True if the request should be retried, False otherwise
        """
        if attempt >= self.max_retries:
            return False

        if isinstance(exception, (NetworkError, RateLimitError)):
            return True

        if isinstance(exception, httpx.HTTPStatusError):
            return 500 <= exception.response.status_code < 600

        return False

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        # Add jitter: +/- 25% of base delay
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    def _error_for_status(self, e: httpx.HTTPStatusError) -> RepositoryError:
        """Translate an HTTP error response into a repository exception."""
        status_code = e.response.status_code

        if status_code in (401, 403):
            return AuthenticationError(
                f"Unauthorized (status {status_code}) - check the API user "
                "credentials and permissions"
            )
        if status_code == 404:
            return NotFoundError(f"Resource not found: {e.request.url}")
        if status_code == 429:
            return RateLimitError("Rate limit exceeded - please try again later")

        error_msg = f"API request failed with status {status_code}"
        try:
            if e.response.content:
                error_data = e.response.json()
                if isinstance(error_data, dict):
                    errors = error_data.get("Error") or error_data.get("Errors")
                    if isinstance(errors, list) and errors:
                        errors = errors[0]
                    if isinstance(errors, dict):
                        msg = errors.get("UserMessage") or errors.get(
                            "DeveloperMessage"
                        )
                    else:
                        msg = error_data.get("message") or error_data.get("error")
                    if msg:
                        error_msg = f"{error_msg}: {msg}"
        except ValueError:
            pass

        return RepositoryError(error_msg)

    def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send an HTTP request with retry logic and decode the JSON body.

        Args:
            method: HTTP method
            url: Absolute URL
            **kwargs: Additional arguments passed to httpx

        Returns:
            Decoded JSON response ({} for an empty body)

        Raises:
            RepositoryError: If the request fails after all retries
        """
        last_exception: Exception | None = None
        client = self._get_client()

        for attempt in range(self.max_retries + 1):
            try:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()

                if not response.content:
                    return {}

                content_type = response.headers.get("Content-Type", "")
                if "json" not in content_type:
                    raise InvalidResponseError(
                        f"Unexpected response type: {content_type}"
                    )
                try:
                    return response.json()
                except ValueError as e:
                    raise InvalidResponseError(
                        "Invalid JSON response from SpringCM"
                    ) from e

            except httpx.HTTPStatusError as e:
                error = self._error_for_status(e)
                last_exception = error

                if self._should_retry(error, attempt) or self._should_retry(
                    e, attempt
                ):
                    delay = self._calculate_retry_delay(attempt)
                    retry_after = e.response.headers.get("Retry-After")
                    if isinstance(error, RateLimitError) and retry_after:
                        if retry_after.isdigit():
                            delay = float(retry_after)
                    logger.debug(
                        f"{method} {url} failed with status "
                        f"{e.response.status_code}, retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)
                    continue
                raise error from e
            except RepositoryError:
                raise
            except httpx.RequestError as e:
                error = NetworkError(f"Network error: {e}")
                last_exception = error
                if self._should_retry(error, attempt):
                    delay = self._calculate_retry_delay(attempt)
                    logger.debug(
                        f"{method} {url} failed ({e}), retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)
                    continue
                raise error from e

        if last_exception:
            raise last_exception
        raise RepositoryError("Request failed after all retry attempts")

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make an authenticated API request against the REST API host."""
        self._require_connection()
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        return self._send(method, url, headers=headers, **kwargs)

    # =========================
    # Folder Operations
    # =========================

    def get_folder(self, path: str) -> Folder:
        """Resolve a remote folder path to a folder handle.

        Args:
            path: Folder path, e.g. "/Admin/Inbound"

        Returns:
            Folder handle usable for uploads

        Raises:
            NotFoundError: If the folder does not exist
            RepositoryError: If the API call fails
        """
        path = normalize_remote_path(path)
        try:
            data = self._request("GET", "/folders", params={"path": path})
        except NotFoundError as e:
            raise NotFoundError(f"Folder not found: {path}") from e

        if not isinstance(data, dict) or not data.get("Href"):
            raise NotFoundError(f"Folder not found: {path}")

        folder = Folder.from_api_response(data)
        if not folder.path:
            folder.path = path
        return folder

    # =========================
    # Upload Operations
    # =========================

    @staticmethod
    def _iter_stream(stream: IO[bytes]) -> Iterator[bytes]:
        while True:
            chunk = stream.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk

    def upload_document(
        self,
        folder: Folder,
        stream: IO[bytes] | Iterable[bytes],
        name: str,
        file_type: str = "",
    ) -> UploadedDocument:
        """Upload a document into a folder.

        The body is streamed in chunks, the file is never read into memory
        as a whole. Uploads are not retried: a stream cannot be rewound
        reliably, and a failed delivery is retried as a whole on the next run.

        Args:
            folder: Destination folder handle
            stream: Binary file object (or iterable of byte chunks)
            name: Document name in the repository
            file_type: Lowercase file type used to pick the content type

        Returns:
            The created document

        Raises:
            UploadError: If the upload fails
        """
        self._require_connection()

        url = f"{self.upload_url}/folders/{folder.id}/documents"
        headers = {
            **self._auth_headers(),
            "Content-Type": mime_type_for(file_type),
        }
        body = self._iter_stream(stream) if hasattr(stream, "read") else stream

        try:
            response = self._get_client().post(
                url,
                params={"name": name},
                content=body,
                headers=headers,
                timeout=self.upload_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error = self._error_for_status(e)
            raise UploadError(
                f"Upload of '{name}' to {folder.path} failed: {error}", file_name=name
            ) from e
        except httpx.RequestError as e:
            raise UploadError(
                f"Network error uploading '{name}' to {folder.path}: {e}",
                file_name=name,
            ) from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        return UploadedDocument.from_api_response({"Name": name, **data})
