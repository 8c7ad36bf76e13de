"""Utility functions for the SpringCM upload agent."""

import mimetypes
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# SpringCM REST API version used for every endpoint
API_VERSION: str = "v201606"

# Retry configuration for transient HTTP errors
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_DELAY: float = 1.0  # seconds

# Request timeout for API calls and uploads
DEFAULT_TIMEOUT: float = 30.0  # seconds
DEFAULT_UPLOAD_TIMEOUT: float = 300.0  # seconds

# Pause between runs in watch mode
DEFAULT_WATCH_INTERVAL: float = 60.0  # seconds

# Chunk size used when streaming a file into an upload request (64 KB)
UPLOAD_CHUNK_SIZE: int = 64 * 1024


# =============================================================================
# File naming utilities
# =============================================================================


def file_type_for(file_name: str) -> str:
    """Get the file type a document is tagged with on upload.

    The file type is the lowercased text after the final dot of the name,
    or an empty string when the name contains no dot.

    Args:
        file_name: Base name of the file

    Returns:
        Lowercase file type

    Examples:
        >>> file_type_for("Report.PDF")
        'pdf'
        >>> file_type_for("archive.tar.gz")
        'gz'
        >>> file_type_for("README")
        ''
    """
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[1].lower()


def mime_type_for(file_type: str) -> str:
    """Map a file type to a MIME type for the upload request.

    Args:
        file_type: Lowercase file type without the dot (may be empty)

    Returns:
        MIME type string (defaults to 'application/octet-stream')
    """
    mime_type: Optional[str] = None
    if file_type:
        mime_type, _ = mimetypes.guess_type(f"document.{file_type}")
    return mime_type or "application/octet-stream"


def normalize_remote_path(path: str) -> str:
    """Normalize a remote folder path.

    Backslashes become forward slashes, duplicate slashes are collapsed,
    the path always starts with a slash and never ends with one (except
    for the root itself).

    Examples:
        >>> normalize_remote_path("Admin/Inbound/")
        '/Admin/Inbound'
        >>> normalize_remote_path("/")
        '/'
    """
    parts = [part for part in path.replace("\\", "/").split("/") if part]
    return "/" + "/".join(parts)


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
