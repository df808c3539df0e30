"""
Services module for operations that sit around the match engine.
"""

from src.services.mission_parser_service import MissionParserService, parse_mission

__all__ = [
    "MissionParserService",
    "parse_mission",
]
