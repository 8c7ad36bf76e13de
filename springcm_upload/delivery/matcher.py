"""Glob matching of file patterns against a base directory."""

import fnmatch
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Union

from ..exceptions import PatternError

logger = logging.getLogger(__name__)


def _check_pattern(pattern: object) -> str:
    if not isinstance(pattern, str) or not pattern.strip():
        raise PatternError(f"Invalid glob pattern: {pattern!r}", pattern=None)

    posix = pattern.replace("\\", "/")
    if PurePosixPath(posix).is_absolute() or Path(pattern).is_absolute():
        raise PatternError(
            f"Glob pattern must be relative: {pattern!r}", pattern=pattern
        )
    if ".." in PurePosixPath(posix).parts:
        raise PatternError(
            f"Glob pattern must not leave its directory: {pattern!r}",
            pattern=pattern,
        )
    return posix


def _check_base_dir(base_dir: Path) -> None:
    if not base_dir.exists():
        raise PatternError(f"Directory does not exist: {base_dir}")
    if not base_dir.is_dir():
        raise PatternError(f"Not a directory: {base_dir}")


def _scan_dir(directory: str, pattern: str) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as entries:
            return list(entries)
    except OSError as e:
        raise PatternError(
            f"Cannot read directory {directory}: {e}", pattern=pattern
        ) from e


def _segment_matches(name: str, segment: str) -> bool:
    # Hidden entries only match a segment that names the dot explicitly
    if name.startswith(".") and not segment.startswith("."):
        return False
    return fnmatch.fnmatchcase(name, segment)


def _select(
    directory: str, segments: list[str], relative: str, pattern: str
) -> Iterator[str]:
    """Yield relative paths of the files below directory matching segments."""
    segment, rest = segments[0], segments[1:]
    entries = _scan_dir(directory, pattern)

    if segment == "**":
        # "**" matches zero or more directories, "a/**" every file below a
        if rest:
            yield from _select(directory, rest, relative, pattern)
        for entry in entries:
            if entry.name.startswith("."):
                continue
            path = f"{relative}{entry.name}"
            if not rest and entry.is_file():
                yield path
            elif entry.is_dir(follow_symlinks=False):
                yield from _select(entry.path, segments, f"{path}/", pattern)
        return

    for entry in entries:
        if not _segment_matches(entry.name, segment):
            continue
        path = f"{relative}{entry.name}"
        if rest:
            if entry.is_dir():
                yield from _select(entry.path, rest, f"{path}/", pattern)
        elif entry.is_file():
            yield path


def match(pattern: str, base_dir: Union[str, Path]) -> list[str]:
    """Match a glob pattern against a directory.

    Supports ``*``, ``?``, ``[...]`` and ``**`` for any number of
    directories; a trailing ``**`` matches every file below its directory.
    Wildcards do not match names starting with a dot unless the pattern
    segment starts with one. Only regular files are returned, directories
    never are.

    Args:
        pattern: Glob pattern relative to ``base_dir`` (e.g. "*.pdf", "**/*.xml")
        base_dir: Directory the pattern is evaluated in

    Returns:
        Sorted relative paths (forward slashes) of the matching files

    Raises:
        PatternError: If the pattern is malformed, or a directory the pattern
            has to look into cannot be read

    Examples:
        >>> match("*.pdf", "/data/outbound/batch-1")  # doctest: +SKIP
        ['invoice.pdf', 'report.pdf']
    """
    posix = _check_pattern(pattern)
    base = Path(base_dir)
    _check_base_dir(base)

    # A trailing slash only matches directories
    if posix.endswith("/"):
        return []

    segments = [s for s in posix.split("/") if s not in ("", ".")]
    if not segments:
        return []

    found = sorted(set(_select(str(base), segments, "", pattern)))
    logger.debug(f"Pattern '{pattern}' matched {len(found)} file(s) in {base}")
    return found


def match_all(patterns: Iterable[str], base_dir: Union[str, Path]) -> list[str]:
    """Match several patterns and return the union of the results.

    Patterns are applied in the given order; each file appears once, at the
    position where it was first matched.
    """
    results: dict[str, None] = {}
    for pattern in patterns:
        for relative_path in match(pattern, base_dir):
            results.setdefault(relative_path, None)
    return list(results)
