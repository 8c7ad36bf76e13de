"""CLI interface for the SpringCM upload agent."""

import logging
import time
from typing import Any, Optional

import click
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .api import SpringCMClient
from .delivery import TaskReport, TaskRunner, find_config_file, load_tasks_from_json
from .delivery.mapping import Task
from .exceptions import ConfigError, UploaderError
from .output import OutputFormatter
from .utils import DEFAULT_WATCH_INTERVAL

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: int, log_file: Optional[str]) -> None:
    """Configure the root logger for the command line.

    Args:
        verbose: 0 for warnings only, 1 for progress (INFO), 2+ for debug
        log_file: Optional file that receives the log in addition to stderr
    """
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        # The log file always records delivery progress
        level = min(level, logging.INFO)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if verbose >= 2 else logging.WARNING
    )


def _load_tasks(ctx: Any) -> list[Task]:
    """Load tasks from the configured file, exiting with code 1 on error."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        path = find_config_file(ctx.obj["config_path"])
        tasks = load_tasks_from_json(path)
    except ConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return []
    return tasks


def _report_to_dict(report: TaskReport) -> dict[str, Any]:
    return {
        "task": report.task,
        "ok": report.ok,
        "delivered": report.delivered,
        "files_uploaded": report.files_uploaded,
        "directories_removed": report.directories_removed,
        "error": str(report.error) if report.error else None,
        "mappings": [
            {
                "mapping": m.mapping,
                "triggers_found": m.triggers_found,
                "delivered": m.delivered,
                "skipped": m.skipped,
                "files_uploaded": m.files_uploaded,
                "directories_removed": m.directories_removed,
                "errors": [str(e) for e in m.errors],
            }
            for m in report.mappings
        ],
    }


def _run_once(
    out: OutputFormatter, runner: TaskRunner, tasks: list[Task]
) -> list[TaskReport]:
    """Run all tasks once and print the outcome."""
    if out.quiet or out.json_output:
        reports = runner.run_tasks(tasks)
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(f"Running {len(tasks)} task(s)...", total=None)
            reports = runner.run_tasks(tasks)

    if out.json_output:
        out.output_json([_report_to_dict(r) for r in reports])
        return reports

    for report in reports:
        if report.ok:
            out.print_summary(
                f"Task {report.task}",
                [
                    ("Deliveries", str(report.delivered)),
                    ("Files uploaded", str(report.files_uploaded)),
                    ("Folders removed", str(report.directories_removed)),
                ],
            )
        else:
            out.error(f"Task {report.task} failed: {report.error}")

    return reports


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Configuration file to load",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Log delivery progress (-v) or debug output (-vv)",
)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also log to file")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.version_option(__version__, "--version")
@click.pass_context
def main(
    ctx: Any,
    config_path: Optional[str],
    verbose: int,
    log_file: Optional[str],
    quiet: bool,
    json: bool,
) -> None:
    """SpringCM Upload - deliver triggered directories to SpringCM."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    configure_logging(verbose, log_file)


@main.command()
@click.option(
    "--dry-run", is_flag=True, help="Show manifests without uploading or deleting"
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Keep processing later path mappings after a failure",
)
@click.pass_context
def run(ctx: Any, dry_run: bool, continue_on_error: bool) -> None:
    """Run every configured task once."""
    out: OutputFormatter = ctx.obj["out"]
    tasks = _load_tasks(ctx)
    if dry_run:
        out.warning("Dry run: nothing will be uploaded or deleted")

    # Without the flag each task keeps its own continueOnError setting
    runner = TaskRunner(dry_run=dry_run, continue_on_error=continue_on_error or None)
    reports = _run_once(out, runner, tasks)

    if not all(report.ok for report in reports):
        ctx.exit(1)


@main.command()
@click.option(
    "--interval",
    "-i",
    type=click.FloatRange(min=1.0),
    default=DEFAULT_WATCH_INTERVAL,
    show_default=True,
    help="Seconds between runs",
)
@click.option(
    "--cycles",
    type=click.IntRange(min=0),
    default=0,
    help="Stop after this many runs (0 runs forever)",
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Keep processing later path mappings after a failure",
)
@click.pass_context
def watch(ctx: Any, interval: float, cycles: int, continue_on_error: bool) -> None:
    """Run every configured task repeatedly.

    The configuration is reloaded before each run. A failed run is reported
    and the next run still happens.
    """
    out: OutputFormatter = ctx.obj["out"]
    runner = TaskRunner(continue_on_error=continue_on_error or None)

    out.info(f"Watching for trigger files every {interval:g}s (Ctrl+C to stop)")
    cycle = 0
    try:
        while True:
            cycle += 1
            logger.debug(f"Watch cycle {cycle}")
            try:
                tasks = load_tasks_from_json(find_config_file(ctx.obj["config_path"]))
            except ConfigError as e:
                out.error(str(e))
            else:
                _run_once(out, runner, tasks)

            if cycles and cycle >= cycles:
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        out.info("Stopped")


@main.command()
@click.pass_context
def validate(ctx: Any) -> None:
    """Load the configuration and report what it contains."""
    out: OutputFormatter = ctx.obj["out"]
    tasks = _load_tasks(ctx)
    path_count = sum(len(task.paths) for task in tasks)

    if out.json_output:
        out.output_json(
            {
                "valid": True,
                "tasks": [
                    {
                        "name": task.display_name,
                        "paths": [
                            {
                                "local": str(m.local),
                                "remote": m.remote,
                                "trigger": m.trigger,
                                "filter": {
                                    "in": m.filter.include,
                                    "out": m.filter.exclude,
                                },
                                "delete": m.delete,
                            }
                            for m in task.paths
                        ],
                    }
                    for task in tasks
                ],
            }
        )
        return

    out.success(
        f"Configuration is valid: {len(tasks)} task(s), {path_count} path mapping(s)"
    )
    for task in tasks:
        out.info(f"Task {task.display_name}")
        for mapping in task.paths:
            out.info(f"  {mapping.local} -> {mapping.remote}")


@main.command()
@click.pass_context
def check(ctx: Any) -> None:
    """Connect with each task's credentials and resolve its remote folders."""
    out: OutputFormatter = ctx.obj["out"]
    tasks = _load_tasks(ctx)
    failures = 0

    for task in tasks:
        client = SpringCMClient(task.auth)
        try:
            client.connect()
            out.success(f"Task {task.display_name}: connected")
            for mapping in task.paths:
                try:
                    folder = client.get_folder(mapping.remote)
                    out.success(f"  {mapping.remote} (id {folder.id})")
                except UploaderError as e:
                    failures += 1
                    out.error(f"  {mapping.remote}: {e}")
        except UploaderError as e:
            failures += 1
            out.error(f"Task {task.display_name}: {e}")
        finally:
            client.close()

    if failures:
        ctx.exit(1)


if __name__ == "__main__":
    main()
