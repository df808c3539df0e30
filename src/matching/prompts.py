"""
Prompt templates for the explanation generator.
"""

from typing import List

from src.common.types import MatchResult, NOT_SPECIFIED

SYSTEM_PROMPT_REASONING = (
    "You are a professional network analyst who provides concise, specific "
    "reasoning for why profiles match networking goals."
)

SYSTEM_PROMPT_RECOMMENDATION = (
    "You are a professional network analyst who provides concise "
    "recommendations for business networking."
)

GENERIC_REASONING = (
    "This profile matches your networking goals based on their professional "
    "background and experience."
)

GENERIC_RECOMMENDATION = (
    "Review the matches above and reach out to the contacts whose experience "
    "is closest to your mission, starting with the highest similarity scores."
)

FALLBACK_MESSAGE = "Matches found using text analysis (embeddings not available)"

FALLBACK_RECOMMENDATION = (
    "These matches are based on text analysis. For more precise matching, try "
    "uploading profiles with more detailed information."
)

USER_PROMPT_REASONING = """Mission: {mission}

Profile Details:
- Name: {name}
- Title: {title}
- Company: {company}
- Location: {location}
- Industry: {industry}
- Summary: {summary}
- Similarity Score: {similarity:.1f}%

Explain in 2-3 sentences why this profile is a good match for the mission. Focus on specific skills, experience, or background that aligns with the mission."""


def build_reasoning_prompt(mission: str, match: MatchResult) -> str:
    return USER_PROMPT_REASONING.format(
        mission=mission,
        name=match.name,
        title=match.title or NOT_SPECIFIED,
        company=match.company or NOT_SPECIFIED,
        location=match.location or NOT_SPECIFIED,
        industry=match.industry or NOT_SPECIFIED,
        summary=match.summary or NOT_SPECIFIED,
        similarity=match.similarity * 100,
    )


def build_recommendation_prompt(mission: str, matches: List[MatchResult]) -> str:
    lines = []
    for i, match in enumerate(matches, 1):
        lines.append(
            f"{i}. {match.name} - {match.title or NOT_SPECIFIED} at "
            f"{match.company or NOT_SPECIFIED} (Similarity: {match.similarity * 100:.1f}%)"
        )
    return (
        f"Mission: {mission}\n\n"
        f"Top matches:\n" + "\n".join(lines) + "\n\n"
        "Provide a brief summary (2-3 sentences) highlighting the best matches and next steps."
    )
