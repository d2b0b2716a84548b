"""Cross-session response-style preferences.

Parsing and rendering are pure functions; persistence goes through a
:class:`~folio_assistant.data.cache_provider.CacheProvider`. Invalid stored
state is discarded, never raised.
"""

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import ValidationError

from folio_assistant.config import PREFERENCE_CACHE_KEY_PREFIX, PREFERENCE_TTL_SECONDS
from folio_assistant.data.cache_provider import CacheProvider
from folio_assistant.models.preferences import (
    PreferenceUpdate,
    ResponseStyle,
    UserPreferences,
)

logger = logging.getLogger(__name__)

_RESPONSE_NOUNS = r"(?:answers?|responses?|replies|reply)"

CONCISE_PATTERNS = (
    re.compile(rf"\b{_RESPONSE_NOUNS}\b.*\b(?:concise|concisely|short|brief|briefly)\b"),
    re.compile(r"\banswer\s+(?:briefly|concisely|shortly)\b"),
    re.compile(r"\b(?:be|stay)\s+(?:more\s+)?(?:concise|brief)\b"),
    re.compile(rf"\b(?:shorter|concise|brief)\s+{_RESPONSE_NOUNS}\b"),
)
DETAILED_PATTERNS = (
    re.compile(rf"\b{_RESPONSE_NOUNS}\b.*\b(?:detailed|verbose|thorough|longer)\b"),
    re.compile(r"\banswer\s+in\s+(?:more\s+)?detail\b"),
    re.compile(r"\bmore\s+detail(?:s|ed)?\b"),
    re.compile(rf"\b(?:detailed|longer|thorough|verbose)\s+{_RESPONSE_NOUNS}\b"),
    re.compile(r"\bbe\s+(?:more\s+)?(?:detailed|thorough|verbose)\b"),
)
CLEAR_PATTERNS = (
    re.compile(r"\b(?:clear|reset|forget|delete|remove|wipe)\b.*\bpreferences?\b"),
    re.compile(r"\bforget\s+(?:everything\s+)?(?:about\s+me|what\s+you\s+know)\b"),
)
RECALL_PATTERNS = (
    re.compile(r"\bwhat\s+do\s+you\s+remember\s+about\s+me\b"),
    re.compile(r"^\s*(?:show|list)\s+(?:me\s+)?(?:my\s+)?(?:saved\s+)?preferences\b"),
    re.compile(r"\bwhat\s+are\s+my\s+(?:saved\s+)?preferences\b"),
    re.compile(
        r"\b(?:which|what)\s+preferences\s+(?:do|did|have)\s+you\s+"
        r"(?:remember|save|saved|store|stored|keep|kept)\b"
    ),
)

NO_PREFERENCES_SUMMARY = "I have no saved cross-session preferences yet."
CLEARED_ACK = "Cleared your saved cross-session preferences."
NOTHING_TO_CLEAR_ACK = "No saved cross-session preferences to clear."


def _normalize(query: str) -> str:
    return " ".join(query.lower().split())


def _matches(patterns: tuple[re.Pattern[str], ...], text: str) -> bool:
    return any(p.search(text) for p in patterns)


def _utc_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_preference_update(
    query: str,
    user_preferences: UserPreferences | None = None,
    now: Callable[[], str] = _utc_timestamp,
) -> PreferenceUpdate:
    """Turn a query into a preference mutation, or a no-op."""
    current = user_preferences or UserPreferences()
    text = _normalize(query)

    wants_concise = _matches(CONCISE_PATTERNS, text)
    wants_detailed = _matches(DETAILED_PATTERNS, text)

    if wants_concise and wants_detailed:
        return PreferenceUpdate(should_persist=False, user_preferences=current)

    if _matches(CLEAR_PATTERNS, text):
        if current.is_empty:
            return PreferenceUpdate(
                should_persist=False,
                user_preferences=current,
                acknowledgement=NOTHING_TO_CLEAR_ACK,
            )
        return PreferenceUpdate(
            should_persist=True,
            user_preferences=UserPreferences(),
            acknowledgement=CLEARED_ACK,
        )

    if wants_concise:
        style = ResponseStyle.CONCISE
    elif wants_detailed:
        style = ResponseStyle.DETAILED
    else:
        return PreferenceUpdate(should_persist=False, user_preferences=current)

    if current.response_style == style:
        return PreferenceUpdate(
            should_persist=False,
            user_preferences=current,
            acknowledgement=f"Preference already saved: responses stay {style}.",
        )

    return PreferenceUpdate(
        should_persist=True,
        user_preferences=UserPreferences(response_style=style, updated_at=now()),
        acknowledgement=(
            f"Saved preference: I will keep responses {style} across sessions."
        ),
    )


def is_preference_recall_query(query: str) -> bool:
    return _matches(RECALL_PATTERNS, _normalize(query))


def create_preference_summary_response(
    user_preferences: UserPreferences | None = None,
) -> str:
    prefs = user_preferences or UserPreferences()
    if prefs.response_style is None:
        return NO_PREFERENCES_SUMMARY

    summary = f"Saved cross-session preferences: response style: {prefs.response_style}"
    if prefs.updated_at:
        summary += f" (last updated {prefs.updated_at})"
    return summary + "."


def preference_cache_key(user_id: str) -> str:
    return f"{PREFERENCE_CACHE_KEY_PREFIX}{user_id}"


async def get_user_preferences(
    user_id: str, cache_provider: CacheProvider
) -> UserPreferences:
    try:
        raw = await cache_provider.get(preference_cache_key(user_id))
    except Exception:
        logger.warning("Preference read failed for user %s", user_id)
        return UserPreferences()
    if not raw:
        return UserPreferences()

    try:
        return UserPreferences.model_validate_json(raw)
    except (ValidationError, ValueError):
        logger.debug("Discarding invalid stored preferences for user %s", user_id)
        return UserPreferences()


async def save_user_preferences(
    user_id: str,
    user_preferences: UserPreferences,
    cache_provider: CacheProvider,
    ttl_seconds: int = PREFERENCE_TTL_SECONDS,
) -> None:
    try:
        await cache_provider.set(
            preference_cache_key(user_id), user_preferences.to_json(), ttl_seconds
        )
    except Exception:
        logger.warning("Preference write failed for user %s", user_id)
