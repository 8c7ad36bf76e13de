"""Delivery executor: uploads a triggered directory and cleans up after it."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..api import SpringCMClient
from ..exceptions import UploaderError
from ..models import Folder
from .manifest import resolve
from .mapping import PathMapping
from .operations import DeliveryOperations
from .trigger import scan

logger = logging.getLogger(__name__)


@dataclass
class DeliveryReport:
    """Counters for the deliveries of one path mapping."""

    mapping: str = ""
    triggers_found: int = 0
    delivered: int = 0
    skipped: int = 0
    files_uploaded: int = 0
    directories_removed: int = 0
    errors: list[Exception] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)


class DeliveryExecutor:
    """Delivers the files of triggered directories to a remote folder.

    A delivery is strictly sequential: resolve the manifest, upload every
    file, delete the trigger file and, if the mapping asks for it, remove the
    directory. The first failing step stops the delivery and leaves the
    trigger file in place, so the next run delivers the whole directory
    again.
    """

    def __init__(
        self,
        client: SpringCMClient,
        dry_run: bool = False,
        operations: Optional[DeliveryOperations] = None,
    ):
        """Initialize the executor.

        Args:
            client: Connected SpringCM client
            dry_run: Only resolve and log manifests, never upload or delete
            operations: Side-effect implementation (defaults to one using client)
        """
        self.client = client
        self.dry_run = dry_run
        self.operations = operations or DeliveryOperations(client)

    def process_mapping(
        self, mapping: PathMapping, continue_on_error: bool = False
    ) -> DeliveryReport:
        """Deliver every triggered directory of a path mapping.

        The remote folder is only resolved when at least one trigger file
        exists, and then only once for all deliveries of the mapping.

        Args:
            mapping: Path mapping to process
            continue_on_error: Record a failed delivery and go on with the
                next trigger file instead of raising

        Returns:
            Report of what was delivered

        Raises:
            ConfigError, PatternError: If the trigger scan fails
            NotFoundError: If the remote folder does not exist
            UploaderError: From a failed delivery unless continue_on_error
        """
        report = DeliveryReport(mapping=mapping.name)

        trigger_scan = scan(mapping.local, mapping.trigger)
        if trigger_scan.should_skip:
            logger.info(f"No trigger files for {mapping.name}, nothing to do")
            return report

        report.triggers_found = len(trigger_scan.trigger_files)
        directory_count = len(trigger_scan.directories)
        logger.info(
            f"{report.triggers_found} trigger file(s) in {directory_count} "
            f"director{'y' if directory_count == 1 else 'ies'} for {mapping.name}"
        )

        folder = self.client.get_folder(mapping.remote)
        logger.debug(f"Resolved remote folder {folder.path} (id {folder.id})")

        for trigger_file in trigger_scan.trigger_files:
            try:
                self.deliver(mapping, folder, trigger_file, report)
            except UploaderError as e:
                if not continue_on_error:
                    raise
                logger.exception(f"Delivery of {trigger_file} failed: {e}")
                report.errors.append(e)

        return report

    def deliver(
        self,
        mapping: PathMapping,
        folder: Folder,
        trigger_file: Path,
        report: Optional[DeliveryReport] = None,
    ) -> DeliveryReport:
        """Deliver the directory guarded by one trigger file.

        Args:
            mapping: Path mapping the trigger file belongs to
            folder: Remote folder resolved for the mapping
            trigger_file: Absolute path of the trigger file
            report: Report to update (a new one is created if omitted)

        Returns:
            The updated report

        Raises:
            PatternError: If the manifest cannot be resolved
            UploadError: If any upload fails (trigger file is kept)
            DeliveryFilesystemError: If the cleanup fails
        """
        report = report if report is not None else DeliveryReport(mapping=mapping.name)
        directory = trigger_file.parent

        # An earlier delivery may have removed it together with its directory
        if not trigger_file.exists():
            logger.info(f"Trigger file {trigger_file} is gone, skipping")
            report.skipped += 1
            return report

        manifest = resolve(directory, mapping.filter.include, mapping.filter.exclude)
        logger.info(
            f"Upload manifest for {trigger_file}: "
            f"{', '.join(str(p) for p in manifest) or '(empty)'}"
        )

        if self.dry_run:
            logger.info(f"Dry run: not uploading {len(manifest)} file(s)")
            report.skipped += 1
            return report

        for file_path in manifest:
            logger.info(f"Uploading {file_path} to {folder.path}")
            self.operations.upload_file(file_path, folder)
            report.files_uploaded += 1

        self.operations.delete_trigger(trigger_file)
        logger.info(f"Deleted trigger file {trigger_file}")

        if mapping.delete:
            if directory.resolve() == Path(mapping.local).resolve():
                logger.warning(
                    f"Not removing {directory}: it is the local root of {mapping.name}"
                )
            else:
                self.operations.remove_directory(directory)
                report.directories_removed += 1
                logger.info(f"Removed folder {directory}")

        report.delivered += 1
        return report
