"""
Text Prefilter

Network-free keyword scoring that narrows a session's candidates before any
embedding call is made. Candidates scoring zero are excluded.
"""

import logging
import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Pattern

from src.common.types import Candidate, ScoredCandidate

logger = logging.getLogger(__name__)

DEFAULT_PREFILTER_LIMIT = 15

INDUSTRY_POINTS = 3
ROLE_POINTS = 2
DOMAIN_POINTS = 2
LOCATION_POINTS = 1

STOP_WORDS = frozenset({
    "the", "and", "for", "with", "from", "that", "this", "who", "whom", "are",
    "was", "were", "can", "could", "would", "should", "will", "want", "need",
    "needs", "looking", "find", "finding", "seeking", "help", "have", "has",
    "our", "your", "their", "into", "about", "some", "any", "all",
    "people", "someone", "connect", "connections", "network", "networking",
    "like", "just", "also", "more", "most", "very", "what", "which", "where",
    "when", "how", "them", "they", "get", "make", "new",
})

# Declaration order breaks ties in detect_primary_industry
INDUSTRY_KEYWORDS: Dict[str, List[str]] = {
    "construction": [
        "construction", "contractor", "builder", "renovation", "remodel",
        "architect", "civil", "concrete", "roofing", "plumbing", "electrician",
        "hvac", "carpentry", "excavation",
    ],
    "technology": [
        "software", "technology", "tech", "developer", "engineering", "saas",
        "cloud", "data", "devops", "cybersecurity", "programming", "startup",
        "machine learning", "ai",
    ],
    "healthcare": [
        "healthcare", "health", "medical", "hospital", "clinic", "nurse",
        "physician", "doctor", "pharma", "biotech", "patient", "dental",
    ],
    "finance": [
        "finance", "financial", "bank", "investment", "investor", "capital",
        "accounting", "accountant", "fintech", "insurance", "venture", "equity",
    ],
    "education": [
        "education", "school", "teacher", "university", "college", "academic",
        "training", "edtech", "tutor", "curriculum",
    ],
    "marketing": [
        "marketing", "brand", "advertising", "seo", "content", "social media",
        "campaign", "growth", "public relations", "creative",
    ],
    "sales": [
        "sales", "business development", "account executive", "revenue",
        "partnership", "customer success", "retail", "distribution",
    ],
}

ROLE_KEYWORDS = [
    "manager", "director", "lead", "senior", "specialist", "consultant",
    "contractor", "independent", "founder", "owner", "partner", "executive",
    "president", "principal", "head", "supervisor", "coordinator",
]

DOMAIN_KEYWORDS = [
    "business", "services", "solutions", "operations", "strategy",
    "project", "development", "management", "professional", "consulting",
]

_TOKEN_RE = re.compile(r"[a-z0-9+#]+")


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> Pattern[str]:
    # Short keywords ("ai", "seo") must match whole words; longer ones match
    # as word prefixes so plurals and derived forms count.
    escaped = re.escape(keyword)
    if len(keyword) <= 3:
        return re.compile(rf"\b{escaped}\b")
    return re.compile(rf"\b{escaped}")


def keyword_present(keyword: str, text: str) -> bool:
    """Word-prefix keyword test against lowercase text."""
    return bool(_keyword_pattern(keyword).search(text))


def count_keywords(keywords: Iterable[str], text: str) -> int:
    return sum(1 for keyword in keywords if keyword_present(keyword, text))


def tokenize(text: str) -> List[str]:
    """Lowercase mission words, minus short words and stop words (order kept, no repeats)."""
    seen = set()
    tokens = []
    for token in _TOKEN_RE.findall((text or "").lower()):
        if len(token) <= 2 or token in STOP_WORDS or token in seen:
            continue
        seen.add(token)
        tokens.append(token)
    return tokens


def detect_primary_industry(mission: str) -> Optional[str]:
    """
    Pick the industry category with the most keyword hits in the mission.

    Ties go to the first-declared category; no hits at all returns None.
    """
    text = (mission or "").lower()
    best: Optional[str] = None
    best_count = 0
    for industry, keywords in INDUSTRY_KEYWORDS.items():
        hits = count_keywords(keywords, text)
        if hits > best_count:
            best, best_count = industry, hits
    return best


def _haystack(candidate: Candidate) -> str:
    parts = [candidate.title, candidate.company, candidate.industry, candidate.summary]
    return " ".join(p for p in parts if p).lower()


def score_candidate(
    candidate: Candidate,
    mission_tokens: List[str],
    primary_industry: Optional[str],
) -> int:
    """Keyword score for one candidate; 0 means irrelevant."""
    haystack = _haystack(candidate)
    score = 0

    if primary_industry:
        score += INDUSTRY_POINTS * count_keywords(INDUSTRY_KEYWORDS[primary_industry], haystack)
    score += ROLE_POINTS * count_keywords(ROLE_KEYWORDS, haystack)
    score += DOMAIN_POINTS * count_keywords(DOMAIN_KEYWORDS, haystack)

    location = (candidate.location or "").strip().lower()
    if location:
        score += LOCATION_POINTS * sum(
            1 for token in mission_tokens if token in location or location in token
        )
    return score


def prefilter_candidates(
    mission: str,
    candidates: List[Candidate],
    limit: int = DEFAULT_PREFILTER_LIMIT,
) -> List[ScoredCandidate]:
    """
    Score every candidate against the mission and keep the best ones.

    Args:
        mission: Raw mission text
        candidates: Session candidates in store order
        limit: Maximum number of candidates returned

    Returns:
        ScoredCandidates with score > 0, highest first (ties keep input order),
        at most ``limit`` long
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    mission_tokens = tokenize(mission)
    primary_industry = detect_primary_industry(mission)
    logger.debug(
        f"Prefilter: {len(mission_tokens)} mission keywords, primary industry={primary_industry}"
    )

    scored = []
    for candidate in candidates:
        score = score_candidate(candidate, mission_tokens, primary_industry)
        if score > 0:
            scored.append(ScoredCandidate(candidate=candidate, text_score=score))

    # sorted() is stable, so equal scores keep their store order
    scored = sorted(scored, key=lambda s: s.text_score, reverse=True)[:limit]
    logger.info(
        f"Prefilter kept {len(scored)}/{len(candidates)} candidates "
        f"(industry={primary_industry or 'none'})"
    )
    return scored
