"""Finding trigger files under a path mapping's local root."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union

from .mapping import normalize_patterns
from .matcher import match

logger = logging.getLogger(__name__)


class ScanOutcome(Enum):
    """Result of a trigger scan."""

    SKIP = "skip"
    """No trigger files: nothing to deliver for this mapping"""

    PROCEED = "proceed"
    """At least one trigger file was found"""


@dataclass
class TriggerScan:
    """Trigger files found for one path mapping."""

    outcome: ScanOutcome
    trigger_files: list[Path] = field(default_factory=list)
    """Absolute trigger file paths in scan order"""

    @classmethod
    def skip(cls) -> "TriggerScan":
        return cls(ScanOutcome.SKIP)

    @classmethod
    def proceed(cls, trigger_files: list[Path]) -> "TriggerScan":
        return cls(ScanOutcome.PROCEED, trigger_files)

    @property
    def should_skip(self) -> bool:
        return self.outcome is ScanOutcome.SKIP

    @property
    def directories(self) -> list[Path]:
        """Deduplicated directories containing trigger files, in scan order."""
        return list(dict.fromkeys(path.parent for path in self.trigger_files))


def scan(local_root: Union[str, Path], trigger_patterns: Any) -> TriggerScan:
    """Find trigger files under a local root.

    Args:
        local_root: Directory the trigger patterns are relative to
        trigger_patterns: A pattern or a list of patterns

    Returns:
        ``TriggerScan`` with outcome SKIP when no trigger file exists

    Raises:
        ConfigError: If ``trigger_patterns`` is neither a string nor a list
        PatternError: If a pattern is malformed or the root cannot be read
    """
    patterns = normalize_patterns(trigger_patterns, "trigger", allow_missing=False)
    root = Path(local_root)

    found: dict[str, None] = {}
    for pattern in patterns:
        files = match(pattern, root)
        for relative_path in files:
            found.setdefault(relative_path, None)

        if files:
            directories = sorted({str(Path(f).parent) for f in files})
            logger.info(
                f"Found {len(files)} trigger file(s) for pattern '{pattern}' "
                f"in {root}: {', '.join(files)} "
                f"(directories: {', '.join(directories)})"
            )
        else:
            logger.debug(f"No trigger files for pattern '{pattern}' in {root}")

    if not found:
        return TriggerScan.skip()

    return TriggerScan.proceed([root / relative_path for relative_path in found])
