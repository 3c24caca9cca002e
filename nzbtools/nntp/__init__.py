"""
NNTP client layer.

Provides async command/response communication with Usenet servers.
"""

from nzbtools.nntp.commands import fetch_body, fetch_head, format_message_id, stat_article
from nzbtools.nntp.session import NNTPCode, NNTPSession, sanitize_command

__all__ = [
    "NNTPCode",
    "NNTPSession",
    "fetch_body",
    "fetch_head",
    "format_message_id",
    "sanitize_command",
    "stat_article",
]
