"""
Unified Deduplication Module

Single source of truth for the composite keys that identify a contact.

Two keys are derived from the same (name, company) pair:
- dedupe key: "{name}|{company}" used by the ranker to collapse duplicates
- candidate key: "{user}|{session}|{name}|{company}" used by the store as
  the unique, upsert-by-key identity of a contact within one upload session

Usage:
    from src.common.dedupe import generate_dedupe_key, generate_candidate_key

    generate_dedupe_key("  Jane Doe ", "BuildCo")
    # Result: "jane doe|buildco"

    generate_candidate_key("user_1", "upload-user_1-17", "Jane Doe", None)
    # Result: "user_1|upload-user_1-17|jane doe|unknown"
"""

from typing import Optional

UNKNOWN_COMPANY = "unknown"


def normalize_key_part(text: Optional[str]) -> str:
    """
    Normalize one component of a composite key.

    Matching is case-insensitive and ignores surrounding whitespace only;
    inner punctuation is kept ("O'Neil" and "ONeil" stay distinct).

    Examples:
        >>> normalize_key_part("  McKinsey & Company ")
        'mckinsey & company'
        >>> normalize_key_part(None)
        ''
    """
    if not text:
        return ""
    return text.strip().lower()


def generate_dedupe_key(name: str, company: Optional[str] = None) -> str:
    """
    Generate the (name, company) key used to collapse duplicate contacts.

    A missing or blank company is treated as "unknown" so that two
    company-less records with the same name collide.

    Examples:
        >>> generate_dedupe_key("Jane Doe", "BuildCo")
        'jane doe|buildco'
        >>> generate_dedupe_key("Jane Doe", "   ")
        'jane doe|unknown'
    """
    norm_company = normalize_key_part(company) or UNKNOWN_COMPANY
    return f"{normalize_key_part(name)}|{norm_company}"


def generate_candidate_key(
    user_id: str,
    session_id: str,
    name: str,
    company: Optional[str] = None,
) -> str:
    """
    Generate the store identity of a contact.

    Scoped to (user, session): uploading the same CSV twice into two
    sessions yields two independent candidates.
    """
    return f"{normalize_key_part(user_id)}|{normalize_key_part(session_id)}|{generate_dedupe_key(name, company)}"
