"""
yEnc line codec.

Each transported line carries raw bytes shifted by 42. Output bytes that
would collide with the protocol (NUL, LF, CR, the '=' escape marker, or a
'.' opening the line) are sent as '=' followed by the shifted value plus 64.
"""

from nzbtools.exceptions import MalformedEscapeError

ESCAPE = 0x3D  # '='
_OFFSET = 42
_ESCAPE_OFFSET = 64
_CRITICAL = frozenset({0x00, 0x0A, 0x0D, ESCAPE})
_DOT = 0x2E

_METADATA_PREFIXES = ("=ybegin", "=ypart", "=yend")


def decode_line(transported: bytes) -> bytes:
    """
    Decode one yEnc line into raw bytes.

    Args:
        transported: Line content without the line terminator.

    Returns:
        Decoded bytes; empty input gives empty output.

    Raises:
        MalformedEscapeError: If the escape marker is the final byte.
    """
    out = bytearray()
    i = 0
    n = len(transported)
    while i < n:
        c = transported[i]
        if c == ESCAPE:
            if i + 1 >= n:
                raise MalformedEscapeError(position=i)
            out.append((transported[i + 1] - _ESCAPE_OFFSET - _OFFSET) & 0xFF)
            i += 2
            continue
        out.append((c - _OFFSET) & 0xFF)
        i += 1
    return bytes(out)


def encode_line(data: bytes) -> bytes:
    """Encode raw bytes as a single yEnc line (no terminator)."""
    out = bytearray()
    for b in data:
        v = (b + _OFFSET) & 0xFF
        if v in _CRITICAL or (v == _DOT and not out):
            out.append(ESCAPE)
            out.append((v + _ESCAPE_OFFSET) & 0xFF)
        else:
            out.append(v)
    return bytes(out)


def encode_lines(data: bytes, line_length: int = 128) -> list[bytes]:
    """Split data into chunks of line_length raw bytes and encode each."""
    if line_length <= 0:
        msg = "line_length must be positive"
        raise ValueError(msg)
    return [encode_line(data[i : i + line_length]) for i in range(0, len(data), line_length)]


def is_metadata_line(line: str) -> bool:
    """Check if a line is yEnc header/trailer markup rather than data."""
    return line.startswith(_METADATA_PREFIXES)


def undot(line: str) -> str:
    """Strip one leading '.' from a line that starts with '..'."""
    if line.startswith(".."):
        return line[1:]
    return line
