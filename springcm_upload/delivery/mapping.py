"""Path mappings and tasks: what gets delivered where."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from ..exceptions import ConfigError
from ..models import Credentials
from ..utils import normalize_remote_path


def normalize_patterns(value: Any, what: str, allow_missing: bool = True) -> list[str]:
    """Normalize a pattern setting into a list of pattern strings.

    A single string becomes a one-element list. ``None`` becomes an empty
    list when ``allow_missing`` is set.

    Args:
        value: Raw configuration value
        what: Setting name used in error messages (e.g. "trigger")
        allow_missing: Whether ``None`` is accepted

    Raises:
        ConfigError: If the value is neither a string nor a list of strings
    """
    if value is None and allow_missing:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        if not all(isinstance(item, str) for item in value):
            raise ConfigError(
                f"Invalid {what} pattern(s): all patterns must be strings"
            )
        return list(value)
    raise ConfigError(f"Invalid {what} pattern(s): expected a string or a list")


@dataclass(frozen=True)
class Filter:
    """Include/exclude glob patterns selecting the files to deliver."""

    include: list[str] = field(default_factory=list)
    """Patterns selecting files (``filter.in``); empty means nothing is delivered"""

    exclude: list[str] = field(default_factory=list)
    """Patterns removed from the included set (``filter.out``)"""

    @classmethod
    def from_dict(cls, data: Any) -> "Filter":
        """Create a filter from the ``filter`` mapping of a path config."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("Invalid filter: expected an object with 'in'/'out'")
        return cls(
            include=normalize_patterns(data.get("in"), "filter.in"),
            exclude=normalize_patterns(data.get("out"), "filter.out"),
        )


@dataclass(frozen=True)
class PathMapping:
    """One local directory -> remote folder delivery rule.

    Examples:
        >>> mapping = PathMapping(
        ...     remote="/Admin/Inbound/",
        ...     local="/data/outbound",
        ...     trigger="*.trigger",
        ...     filter=Filter(include=["*.pdf"]),
        ... )
        >>> mapping.remote
        '/Admin/Inbound'
        >>> mapping.trigger
        ['*.trigger']
    """

    remote: str
    """Remote folder path in the document repository"""

    local: Union[Path, str]
    """Local root directory that is scanned for trigger files"""

    trigger: Union[list[str], str]
    """Trigger file pattern(s), relative to ``local``"""

    filter: Filter = field(default_factory=Filter)
    """Files delivered from a triggered directory"""

    delete: bool = False
    """Remove the whole triggered directory after a successful delivery"""

    alias: Optional[str] = None
    """Optional name used in log messages"""

    def __post_init__(self) -> None:
        if not isinstance(self.remote, str) or not self.remote.strip():
            raise ConfigError("Path mapping requires a 'remote' folder path")
        if not isinstance(self.local, (str, Path)) or not str(self.local):
            raise ConfigError("Path mapping requires a 'local' directory")

        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "remote", normalize_remote_path(self.remote))
        object.__setattr__(self, "local", Path(self.local).expanduser())
        object.__setattr__(
            self,
            "trigger",
            normalize_patterns(self.trigger, "trigger", allow_missing=False),
        )
        if not isinstance(self.delete, bool):
            raise ConfigError("Path mapping 'delete' must be true or false")

    @property
    def name(self) -> str:
        """Display name: the alias if set, otherwise ``local -> remote``."""
        return self.alias or f"{self.local} -> {self.remote}"

    @classmethod
    def from_dict(cls, data: Any) -> "PathMapping":
        """Create a path mapping from a configuration dictionary.

        Expected keys: ``remote``, ``local``, ``trigger``, ``filter``
        (with ``in``/``out``), ``delete`` and optionally ``alias``.
        """
        if not isinstance(data, dict):
            raise ConfigError("Path mapping must be an object")
        return cls(
            remote=data.get("remote"),  # type: ignore[arg-type]
            local=data.get("local"),  # type: ignore[arg-type]
            trigger=data.get("trigger"),  # type: ignore[arg-type]
            filter=Filter.from_dict(data.get("filter")),
            delete=data.get("delete", False),
            alias=data.get("alias"),
        )


@dataclass
class Task:
    """An authenticated session scoped to a list of path mappings."""

    auth: Credentials
    paths: list[PathMapping] = field(default_factory=list)
    name: Optional[str] = None
    continue_on_error: bool = False
    """Keep going after a failed delivery instead of aborting the task"""

    @property
    def display_name(self) -> str:
        return self.name or self.auth.client_id
