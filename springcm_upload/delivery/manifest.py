"""Resolving the list of files delivered from a triggered directory."""

import logging
from pathlib import Path
from typing import Sequence, Union

from .matcher import match_all

logger = logging.getLogger(__name__)


def resolve(
    directory: Union[str, Path],
    include: Sequence[str],
    exclude: Sequence[str] = (),
) -> list[Path]:
    """Compute the delivery manifest of a directory.

    The manifest is every file matching an include pattern minus every file
    matching an exclude pattern. With no include patterns the manifest is
    empty: files are only ever delivered when explicitly selected.

    Args:
        directory: Directory containing the trigger file
        include: Include patterns (``filter.in``)
        exclude: Exclude patterns (``filter.out``)

    Returns:
        Absolute file paths, deduplicated, in include-pattern order

    Raises:
        PatternError: If a pattern or the directory cannot be evaluated
    """
    directory = Path(directory)

    if not include:
        logger.debug(f"No include patterns for {directory}, manifest is empty")
        return []

    included = match_all(include, directory)

    if exclude:
        excluded = set(match_all(exclude, directory))
        included = [path for path in included if path not in excluded]

    return [directory / relative_path for relative_path in included]
