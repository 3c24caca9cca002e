"""
NZB manifest handling.

Parsing, rendering, loading from paths or URLs, and file selection.
"""

from nzbtools.manifest.loader import load_nzb
from nzbtools.manifest.parser import parse_nzb, parse_subject
from nzbtools.manifest.select import combine, extract_files, matches_pattern
from nzbtools.manifest.writer import render_nzb

__all__ = [
    "combine",
    "extract_files",
    "load_nzb",
    "matches_pattern",
    "parse_nzb",
    "parse_subject",
    "render_nzb",
]
