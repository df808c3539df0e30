"""
Mission Parser Service

Extracts structured attributes (industry, location, role, description)
from a free-text networking mission with a low-temperature chat call.
The attributes feed the mission embedding text.

Usage:
    service = MissionParserService()
    attributes = await service.parse("Looking for construction contractors in Texas")
"""

import logging
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from tenacity import retry, stop_after_attempt, wait_exponential

from src.common.config import Config
from src.common.error_handling import EmptyInputError, MissionParseError
from src.common.json_utils import parse_llm_json
from src.common.llm_factory import create_chat_llm
from src.common.types import MissionAttributes

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert at analyzing business mission statements and extracting "
    "structured data. Always respond with valid JSON only."
)

USER_PROMPT_TEMPLATE = """Analyze the following mission statement and extract key attributes in JSON format.

Mission: "{mission}"

Extract and return ONLY a valid JSON object with these exact fields:
{{
  "industry": "the primary industry or sector",
  "location": "the geographic location or region",
  "role": "the type of role or relationship being sought",
  "description": "a brief summary of the mission"
}}

CRITICAL: Return ONLY the JSON object. No explanations, no markdown, no additional text. Just the raw JSON."""

MAX_TOKENS = 500


class MissionParserService:
    """Turns a mission statement into MissionAttributes."""

    def __init__(self, llm: Any = None):
        """
        Initialize the service.

        Args:
            llm: Optional chat model. If not provided, one is created from Config.
        """
        self._llm = llm

    @property
    def llm(self) -> Any:
        if self._llm is None:
            self._llm = create_chat_llm(
                temperature=Config.ANALYTICAL_TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        return self._llm

    @retry(stop=stop_after_attempt(2), wait=wait_exponential(min=1, max=5))
    async def _extract(self, mission: str) -> dict:
        response = await self.llm.ainvoke([
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=USER_PROMPT_TEMPLATE.format(mission=mission)),
        ])
        return parse_llm_json(str(getattr(response, "content", "") or ""))

    async def parse(self, mission: str) -> MissionAttributes:
        """
        Extract attributes from the mission.

        Missing or blank fields become "Not specified".

        Raises:
            EmptyInputError: Blank mission
            ConfigurationError: No LLM provider configured
            MissionParseError: The model response could not be parsed
        """
        mission = (mission or "").strip()
        if not mission:
            raise EmptyInputError("Mission statement is required")

        llm = self.llm  # ConfigurationError surfaces before the retry loop
        logger.debug(f"Parsing mission with {type(llm).__name__}")
        try:
            data = await self._extract(mission)
        except Exception as e:
            logger.error(f"✗ Mission parsing failed: {e}")
            raise MissionParseError("Failed to parse mission statement", details=str(e)) from e

        attributes = MissionAttributes(
            industry=data.get("industry"),
            location=data.get("location"),
            role=data.get("role"),
            description=data.get("description"),
        )
        logger.info(
            f"✓ Mission parsed: industry={attributes.industry}, "
            f"location={attributes.location}, role={attributes.role}"
        )
        return attributes


async def parse_mission(mission: str, llm: Optional[Any] = None) -> MissionAttributes:
    """Convenience wrapper around MissionParserService.parse()."""
    return await MissionParserService(llm=llm).parse(mission)
