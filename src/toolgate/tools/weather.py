"""Weather lookup; runs only after the user confirms."""

import logging

from pydantic import (
    BaseModel,
    Field,
)

from toolgate.core.context import ToolContext
from toolgate.tools import (
    EXECUTIONS,
    TOOL_REGISTRY,
)

logger = logging.getLogger(__name__)


class WeatherArgs(BaseModel):
    city: str = Field(..., description="City to report the weather for")


TOOL_REGISTRY.confirm_tool(
    "getWeatherInformation", "show the weather in a given city to the user", params=WeatherArgs
)


@EXECUTIONS.register("getWeatherInformation")
async def get_weather_information(city: str, *, context: ToolContext) -> str:
    logger.info("Getting weather information for %s (session=%s)", city, context.session_id)
    return f"The weather in {city} is sunny"
