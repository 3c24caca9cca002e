"""
Business logic services for nzbtools.
"""

from nzbtools.services.check_service import CheckService
from nzbtools.services.index_server import create_index_server
from nzbtools.services.range_planner import plan_pieces, segment_offsets
from nzbtools.services.range_service import ByteSink, RangeService, fetch_range
from nzbtools.services.validation_service import validate_server, validate_servers

__all__ = [
    "ByteSink",
    "CheckService",
    "RangeService",
    "create_index_server",
    "fetch_range",
    "plan_pieces",
    "segment_offsets",
    "validate_server",
    "validate_servers",
]
