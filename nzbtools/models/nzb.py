"""
NZB manifest domain models.
"""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class Meta:
    """A <meta type="..."> entry from the NZB head."""

    type: str
    value: str


@dataclass(frozen=True, kw_only=True)
class Segment:
    """
    One article carrying part of a file.

    The size is the byte count declared by the manifest; it is trusted
    and never checked against the transported payload.
    """

    message_id: str
    size: int
    number: int = 0


@dataclass(frozen=True, kw_only=True)
class NzbFile:
    """
    A logical file split across ordered segments.

    Segment order defines byte-offset order within the file.
    """

    poster: str = ""
    date: str = ""
    subject: str = ""
    groups: tuple[str, ...] = ()
    segments: tuple[Segment, ...] = ()
    name: str = ""
    declared_size: int = 0  # Parsed from the subject, 0 if absent

    @property
    def segment_bytes(self) -> int:
        """Sum of declared segment sizes."""
        return sum(s.size for s in self.segments)

    @property
    def size(self) -> int:
        """Size from the subject when present, else the segment total."""
        if self.declared_size > 0:
            return self.declared_size
        return self.segment_bytes


@dataclass(frozen=True, kw_only=True)
class Nzb:
    """A parsed NZB document."""

    meta: tuple[Meta, ...] = ()
    files: tuple[NzbFile, ...] = ()

    def get_file(self, name: str) -> NzbFile | None:
        """Get a file by name, first match wins."""
        return next((f for f in self.files if f.name == name), None)
