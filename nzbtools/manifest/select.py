"""File selection and manifest combination."""

import re
from fnmatch import fnmatchcase

from nzbtools.exceptions import InvalidPatternError
from nzbtools.models.nzb import Nzb


def matches_pattern(name: str, pattern: str, *, regex: bool = False) -> bool:
    """
    Check a file name against a glob or regular expression.

    Regular expressions match anywhere in the name; globs must match the
    whole name.

    Raises:
        InvalidPatternError: If a regular expression does not compile.
    """
    if not regex:
        return fnmatchcase(name, pattern)
    try:
        return re.search(pattern, name) is not None
    except re.error as e:
        msg = f"Invalid regular expression: {pattern}"
        raise InvalidPatternError(msg, error=str(e)) from e


def extract_files(nzb: Nzb, pattern: str, *, regex: bool = False) -> Nzb:
    """Keep only the files whose name matches; the head is preserved."""
    if regex:
        # Fails on a bad pattern even when there are no files.
        matches_pattern("", pattern, regex=True)
    return Nzb(
        meta=nzb.meta,
        files=tuple(f for f in nzb.files if matches_pattern(f.name, pattern, regex=regex)),
    )


def combine(target: Nzb, *sources: Nzb) -> Nzb:
    """Append the files of every source to the target, keeping its head."""
    files = list(target.files)
    for source in sources:
        files.extend(source.files)
    return Nzb(meta=target.meta, files=tuple(files))
