"""Task runner: one SpringCM session per task, path mappings in order."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..api import SpringCMClient
from ..exceptions import DeliveryFailedError, UploaderError
from ..models import Credentials
from .executor import DeliveryExecutor, DeliveryReport
from .mapping import Task

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Credentials], SpringCMClient]


@dataclass
class TaskReport:
    """Outcome of one task run."""

    task: str = ""
    mappings: list[DeliveryReport] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def files_uploaded(self) -> int:
        return sum(m.files_uploaded for m in self.mappings)

    @property
    def delivered(self) -> int:
        return sum(m.delivered for m in self.mappings)

    @property
    def directories_removed(self) -> int:
        return sum(m.directories_removed for m in self.mappings)


class TaskRunner:
    """Runs delivery tasks.

    Each task connects once, processes its path mappings strictly in
    configuration order and always disconnects at the end. By default the
    first error aborts the remaining mappings of the task; with
    ``continue_on_error`` failures are recorded and the run goes on, but the
    task is still reported as failed.
    """

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        dry_run: bool = False,
        continue_on_error: Optional[bool] = None,
    ):
        """Initialize the runner.

        Args:
            client_factory: Creates a client from task credentials
                (defaults to SpringCMClient)
            dry_run: Resolve and log manifests without uploading or deleting
            continue_on_error: Override the per-task failure policy
        """
        self.client_factory = client_factory or SpringCMClient
        self.dry_run = dry_run
        self.continue_on_error = continue_on_error

    def _policy(self, task: Task) -> bool:
        if self.continue_on_error is not None:
            return self.continue_on_error
        return task.continue_on_error

    def run(self, task: Task, report: Optional[TaskReport] = None) -> TaskReport:
        """Run one task.

        Args:
            task: Task to run
            report: Report to fill in (a new one is created if omitted)

        Returns:
            Report of the run

        Raises:
            RepositoryConnectionError: If connecting fails
            UploaderError: The first failure, unless continuing on errors
            DeliveryFailedError: Summary of failures when continuing on errors
        """
        report = report if report is not None else TaskReport()
        report.task = task.display_name
        continue_on_error = self._policy(task)
        errors: list[Exception] = []

        client = self.client_factory(task.auth)
        try:
            try:
                client.connect()
            except UploaderError as e:
                logger.exception(f"Task {task.display_name}: {e}")
                raise

            executor = DeliveryExecutor(client, dry_run=self.dry_run)

            for mapping in task.paths:
                logger.info(f"Processing {mapping.name}")
                try:
                    mapping_report = executor.process_mapping(
                        mapping, continue_on_error=continue_on_error
                    )
                except UploaderError as e:
                    logger.exception(f"{mapping.name}: {e}")
                    if not continue_on_error:
                        raise
                    errors.append(e)
                    report.mappings.append(
                        DeliveryReport(mapping=mapping.name, errors=[e])
                    )
                    continue

                report.mappings.append(mapping_report)
                errors.extend(mapping_report.errors)
        finally:
            self._disconnect(client)

        if errors:
            raise DeliveryFailedError(
                f"Task {task.display_name} finished with {len(errors)} "
                f"failed deliver{'y' if len(errors) == 1 else 'ies'}; "
                f"first error: {errors[0]}",
                errors=errors,
            )

        return report

    def _disconnect(self, client: SpringCMClient) -> None:
        """Close the client; a failure here never changes the run's outcome."""
        logger.info("Disconnecting from SpringCM")
        try:
            client.close()
        except Exception as e:
            logger.warning(f"Error while disconnecting from SpringCM: {e}")

    def run_tasks(self, tasks: list[Task]) -> list[TaskReport]:
        """Run several tasks in order.

        A failed task is logged and recorded in its report; the following
        tasks still run.

        Returns:
            One report per task, in task order
        """
        reports = []
        for task in tasks:
            report = TaskReport(task=task.display_name)
            try:
                self.run(task, report)
            except UploaderError as e:
                report.error = e
            reports.append(report)
        return reports
