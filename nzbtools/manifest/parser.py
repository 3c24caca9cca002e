"""
NZB XML parsing.

Element names are matched without their namespace, so documents with or
without the newzbin xmlns parse the same way.
"""

import re
import xml.etree.ElementTree as ET

from nzbtools.exceptions import ManifestError
from nzbtools.models.nzb import Meta, Nzb, NzbFile, Segment

SUBJECT_RE = re.compile(
    r'"(?P<name>[^"]+)"(?: yEnc)?(?: \((?P<partnum>\d+)/(?P<numparts>\d+)\))?(?: yEnc)?[^\d]?(?P<size>\d+)?'
)


def parse_subject(subject: str) -> tuple[str, int]:
    """
    Extract the file name and size from a yEnc-style subject.

    Example:
        >>> parse_subject('[1/3] - "movie.mkv" yEnc (1/50) 123456')
        ('movie.mkv', 123456)

    Returns:
        (name, size); ("", 0) if the subject has no quoted name, and a
        size of 0 if none follows it.
    """
    match = SUBJECT_RE.search(subject)
    if match is None:
        return "", 0
    size = match.group("size")
    return match.group("name"), int(size) if size else 0


def parse_nzb(data: bytes | str) -> Nzb:
    """
    Parse an NZB document.

    Segments of each file are sorted by their number attribute; the file
    name and size come from the subject, with the size falling back to the
    sum of segment sizes.

    Raises:
        ManifestError: If the document is not well-formed NZB XML.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        msg = "Invalid NZB XML"
        raise ManifestError(msg, error=str(e)) from e

    if _local(root.tag) != "nzb":
        msg = f"Unexpected root element: {_local(root.tag)}"
        raise ManifestError(msg)

    meta: list[Meta] = []
    files: list[NzbFile] = []
    for child in root:
        tag = _local(child.tag)
        if tag == "head":
            meta.extend(
                Meta(type=m.get("type", ""), value=(m.text or "").strip())
                for m in _children(child, "meta")
            )
        elif tag == "file":
            files.append(_parse_file(child))

    return Nzb(meta=tuple(meta), files=tuple(files))


def _parse_file(element: ET.Element) -> NzbFile:
    subject = element.get("subject", "")
    groups = tuple(
        (g.text or "").strip()
        for container in _children(element, "groups")
        for g in _children(container, "group")
    )
    segments = sorted(
        (
            _parse_segment(s)
            for container in _children(element, "segments")
            for s in _children(container, "segment")
        ),
        key=lambda s: s.number,
    )
    name, size = parse_subject(subject)
    return NzbFile(
        poster=element.get("poster", ""),
        date=element.get("date", ""),
        subject=subject,
        groups=groups,
        segments=tuple(segments),
        name=name,
        declared_size=size,
    )


def _parse_segment(element: ET.Element) -> Segment:
    try:
        size = int(element.get("bytes", "0"))
        number = int(element.get("number", "0"))
    except ValueError as e:
        msg = "Invalid segment attributes"
        raise ManifestError(msg, bytes=element.get("bytes"), number=element.get("number")) from e
    if size < 0:
        msg = "Segment size must be non-negative"
        raise ManifestError(msg, bytes=size)
    return Segment(message_id=(element.text or "").strip(), size=size, number=number)


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [c for c in element if _local(c.tag) == name]


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]
