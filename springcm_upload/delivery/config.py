"""Loading delivery tasks from a JSON configuration file."""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from ..config import Config, config
from ..exceptions import ConfigError
from ..models import Credentials
from .mapping import PathMapping, Task

logger = logging.getLogger(__name__)

ROOT_KEY = "upload-springcm"
LOCAL_CONFIG_NAMES = (".springcm-uploadrc", "springcm-upload.json")


def find_config_file(
    explicit: Optional[Union[str, Path]] = None,
    settings: Optional[Config] = None,
) -> Path:
    """Find the configuration file to load.

    Lookup order: the explicit path, ``$SPRINGCM_UPLOAD_CONFIG``,
    ``./.springcm-uploadrc``, ``./springcm-upload.json`` and finally the user
    configuration file.

    Raises:
        ConfigError: If an explicit path does not exist or nothing is found
    """
    settings = settings or config

    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigError(f"Configuration file not found: {path}")
        return path

    candidates: list[Path] = []
    if settings.config_file:
        candidates.append(Path(settings.config_file).expanduser())
    candidates.extend(Path.cwd() / name for name in LOCAL_CONFIG_NAMES)
    candidates.append(settings.get_config_path())

    for candidate in candidates:
        if candidate.is_file():
            logger.debug(f"Using configuration file {candidate}")
            return candidate

    raise ConfigError(
        "No configuration file found. Looked in: "
        + ", ".join(str(c) for c in candidates)
    )


def parse_task(data: Any, index: int, settings: Optional[Config] = None) -> Task:
    """Build a Task from one entry of the ``tasks`` list.

    Raises:
        ConfigError: With the task (and path) index in the message
    """
    settings = settings or config
    if not isinstance(data, dict):
        raise ConfigError(f"tasks[{index}]: task must be an object")

    auth = data.get("auth")
    if auth is not None and not isinstance(auth, dict):
        raise ConfigError(f"tasks[{index}]: 'auth' must be an object")

    try:
        credentials = Credentials.from_dict(settings.merge_auth(auth))
    except ConfigError as e:
        raise ConfigError(f"tasks[{index}]: {e}") from e

    paths = data.get("paths")
    if not isinstance(paths, list):
        raise ConfigError(f"tasks[{index}]: 'paths' must be a list")

    mappings = []
    for path_index, path_data in enumerate(paths):
        try:
            mappings.append(PathMapping.from_dict(path_data))
        except ConfigError as e:
            raise ConfigError(f"tasks[{index}].paths[{path_index}]: {e}") from e

    continue_on_error = data.get("continueOnError", False)
    if not isinstance(continue_on_error, bool):
        raise ConfigError(f"tasks[{index}]: 'continueOnError' must be true or false")

    return Task(
        auth=credentials,
        paths=mappings,
        name=data.get("name"),
        continue_on_error=continue_on_error,
    )


def load_tasks(data: Any, settings: Optional[Config] = None) -> list[Task]:
    """Build tasks from already decoded configuration data.

    Both ``{"upload-springcm": {"tasks": [...]}}`` and ``{"tasks": [...]}``
    are accepted.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    section = data.get(ROOT_KEY, data)
    if not isinstance(section, dict):
        raise ConfigError(f"'{ROOT_KEY}' must be an object")

    tasks = section.get("tasks")
    if not isinstance(tasks, list):
        raise ConfigError("Configuration has no 'tasks' list")

    return [parse_task(task, i, settings) for i, task in enumerate(tasks)]


def load_tasks_from_json(
    path: Union[str, Path], settings: Optional[Config] = None
) -> list[Task]:
    """Load delivery tasks from a JSON configuration file.

    Args:
        path: Configuration file
        settings: Environment configuration (defaults to the global one)

    Returns:
        Tasks in configuration order

    Raises:
        ConfigError: If the file cannot be read or is not valid
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    tasks = load_tasks(data, settings)
    logger.debug(f"Loaded {len(tasks)} task(s) from {path}")
    return tasks
