"""Side effects of a delivery: uploads and local cleanup."""

import logging
import shutil
from pathlib import Path

from ..api import SpringCMClient
from ..exceptions import DeliveryFilesystemError, UploadError
from ..models import Folder, UploadedDocument
from ..utils import file_type_for, format_size

logger = logging.getLogger(__name__)


class DeliveryOperations:
    """Upload and cleanup operations used by the delivery executor."""

    def __init__(self, client: SpringCMClient):
        """Initialize delivery operations.

        Args:
            client: Connected SpringCM client
        """
        self.client = client

    def upload_file(self, file_path: Path, folder: Folder) -> UploadedDocument:
        """Upload a local file into a remote folder.

        The document is named after the file's base name and tagged with its
        lowercase extension.

        Args:
            file_path: Local file to upload
            folder: Destination folder

        Returns:
            The uploaded document

        Raises:
            UploadError: If the file cannot be read or the upload fails
        """
        name = file_path.name
        file_type = file_type_for(name)

        try:
            size = file_path.stat().st_size
            with open(file_path, "rb") as stream:
                logger.debug(f"Streaming {name} ({format_size(size)})")
                return self.client.upload_document(
                    folder, stream, name=name, file_type=file_type
                )
        except OSError as e:
            raise UploadError(f"Cannot read {file_path}: {e}", file_name=name) from e

    def delete_trigger(self, trigger_file: Path) -> None:
        """Delete a trigger file.

        Raises:
            DeliveryFilesystemError: If the file cannot be deleted
        """
        try:
            trigger_file.unlink()
        except OSError as e:
            raise DeliveryFilesystemError(
                f"Cannot delete trigger file {trigger_file}: {e}",
                path=str(trigger_file),
            ) from e

    def remove_directory(self, directory: Path) -> None:
        """Recursively remove a delivered directory.

        Raises:
            DeliveryFilesystemError: If the directory cannot be removed
        """
        try:
            shutil.rmtree(directory)
        except OSError as e:
            raise DeliveryFilesystemError(
                f"Cannot remove directory {directory}: {e}", path=str(directory)
            ) from e
