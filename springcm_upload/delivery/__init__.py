"""Trigger-driven delivery of local files to SpringCM."""

from .config import find_config_file, load_tasks, load_tasks_from_json
from .executor import DeliveryExecutor, DeliveryReport
from .manifest import resolve
from .mapping import Filter, PathMapping, Task, normalize_patterns
from .matcher import match, match_all
from .operations import DeliveryOperations
from .runner import TaskReport, TaskRunner
from .trigger import ScanOutcome, TriggerScan, scan

__all__ = [
    "DeliveryExecutor",
    "DeliveryOperations",
    "DeliveryReport",
    "Filter",
    "PathMapping",
    "ScanOutcome",
    "Task",
    "TaskReport",
    "TaskRunner",
    "TriggerScan",
    "find_config_file",
    "load_tasks",
    "load_tasks_from_json",
    "match",
    "match_all",
    "normalize_patterns",
    "resolve",
    "scan",
]
