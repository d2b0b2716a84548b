import asyncio
import re

import pytest
from conftest import BrokenCacheProvider

from folio_assistant.analysis.preferences import (
    create_preference_summary_response,
    get_user_preferences,
    is_preference_recall_query,
    preference_cache_key,
    resolve_preference_update,
    save_user_preferences,
)
from folio_assistant.models.preferences import ResponseStyle, UserPreferences

SAVED_CONCISE = UserPreferences(
    response_style=ResponseStyle.CONCISE, updated_at="2026-02-24T10:00:00.000Z"
)
SAVED_DETAILED = UserPreferences(
    response_style=ResponseStyle.DETAILED, updated_at="2026-02-24T10:00:00.000Z"
)


class TestResolvePreferenceUpdate:
    @pytest.mark.parametrize(
        "query",
        [
            "keep answers concise",
            "answer briefly",
            "responses concise please",
            "keep replies short",
            "Remember to keep responses concise.",
        ],
    )
    def test_concise_phrases(self, query):
        result = resolve_preference_update(query, UserPreferences())

        assert result.should_persist is True
        assert result.user_preferences.response_style == ResponseStyle.CONCISE
        assert result.acknowledgement == (
            "Saved preference: I will keep responses concise across sessions."
        )

    @pytest.mark.parametrize(
        "query",
        [
            "keep responses detailed",
            "answer in detail",
            "more detail please",
            "responses verbose",
        ],
    )
    def test_detailed_phrases(self, query):
        result = resolve_preference_update(query, UserPreferences())

        assert result.should_persist is True
        assert result.user_preferences.response_style == ResponseStyle.DETAILED
        assert "Saved preference" in result.acknowledgement

    def test_saved_timestamp_is_iso_utc_millis(self):
        result = resolve_preference_update("keep answers concise", UserPreferences())
        assert re.fullmatch(
            r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z",
            result.user_preferences.updated_at,
        )

    def test_injected_clock(self):
        result = resolve_preference_update(
            "answer briefly", SAVED_DETAILED, now=lambda: "2026-03-01T00:00:00.000Z"
        )
        assert result.user_preferences.updated_at == "2026-03-01T00:00:00.000Z"

    def test_ambiguous_is_noop(self):
        result = resolve_preference_update(
            "keep responses concise and add more detail", SAVED_CONCISE
        )

        assert result.should_persist is False
        assert result.user_preferences == SAVED_CONCISE
        assert result.acknowledgement is None

    def test_already_saved(self):
        result = resolve_preference_update("keep answers concise", SAVED_CONCISE)

        assert result.should_persist is False
        assert result.acknowledgement == "Preference already saved: responses stay concise."

    def test_switching_style(self):
        result = resolve_preference_update("answer in detail", SAVED_CONCISE)

        assert result.should_persist is True
        assert result.user_preferences.response_style == ResponseStyle.DETAILED

    def test_clear_populated(self):
        result = resolve_preference_update("clear my saved preferences", SAVED_DETAILED)

        assert result.should_persist is True
        assert result.user_preferences == UserPreferences()
        assert result.acknowledgement == "Cleared your saved cross-session preferences."

    def test_clear_empty_is_distinct_noop(self):
        result = resolve_preference_update("reset preferences", UserPreferences())

        assert result.should_persist is False
        assert result.user_preferences.is_empty
        assert result.acknowledgement == "No saved cross-session preferences to clear."

    @pytest.mark.parametrize(
        "query", ["Show my portfolio risk", "help me diversify", "hello"]
    )
    def test_unrelated_query_is_silent_noop(self, query):
        result = resolve_preference_update(query, SAVED_CONCISE)

        assert result.should_persist is False
        assert result.acknowledgement is None
        assert result.user_preferences == SAVED_CONCISE

    def test_none_preferences_treated_as_empty(self):
        result = resolve_preference_update("reset preferences", None)
        assert result.user_preferences.is_empty


class TestRecallQuery:
    @pytest.mark.parametrize(
        "query",
        [
            "What do you remember about me?",
            "show my preferences",
            "Show preferences",
            "What are my preferences?",
            "which preferences do you remember",
            "which preferences did you save",
        ],
    )
    def test_matches(self, query):
        assert is_preference_recall_query(query) is True

    @pytest.mark.parametrize(
        "query",
        [
            "Show my portfolio risk",
            "Rebalance my holdings",
            "hello",
            "help me diversify",
            "clear my saved preferences",
        ],
    )
    def test_does_not_match(self, query):
        assert is_preference_recall_query(query) is False


class TestSummary:
    def test_empty(self):
        assert (
            create_preference_summary_response(UserPreferences())
            == "I have no saved cross-session preferences yet."
        )

    def test_with_style_and_timestamp(self):
        assert create_preference_summary_response(SAVED_CONCISE) == (
            "Saved cross-session preferences: response style: concise "
            "(last updated 2026-02-24T10:00:00.000Z)."
        )

    def test_without_timestamp(self):
        prefs = UserPreferences(response_style=ResponseStyle.DETAILED)
        assert create_preference_summary_response(prefs) == (
            "Saved cross-session preferences: response style: detailed."
        )

    def test_round_trip_with_update(self):
        update = resolve_preference_update("keep replies short", UserPreferences())
        assert "response style: concise" in create_preference_summary_response(
            update.user_preferences
        )


class TestPersistence:
    def test_malformed_json_yields_empty(self, cache_provider):
        asyncio.run(cache_provider.set(preference_cache_key("user-1"), "{bad-json", 60))
        assert asyncio.run(get_user_preferences("user-1", cache_provider)) == UserPreferences()

    @pytest.mark.parametrize(
        "payload",
        [
            '{"responseStyle": "loud"}',
            '{"responseStyle": "concise", "updatedAt": 12345}',
            '["concise"]',
            "null",
        ],
    )
    def test_schema_violations_yield_empty(self, cache_provider, payload):
        asyncio.run(cache_provider.set(preference_cache_key("u"), payload, 60))
        assert asyncio.run(get_user_preferences("u", cache_provider)).is_empty

    def test_missing_yields_empty(self, cache_provider):
        assert asyncio.run(get_user_preferences("nobody", cache_provider)).is_empty

    def test_unavailable_cache_yields_empty(self):
        assert asyncio.run(get_user_preferences("u", BrokenCacheProvider())).is_empty

    def test_save_then_load(self, cache_provider):
        asyncio.run(save_user_preferences("u", SAVED_CONCISE, cache_provider))
        raw = asyncio.run(cache_provider.get("ai-agent-preferences-u"))

        assert '"responseStyle":"concise"' in raw
        assert asyncio.run(get_user_preferences("u", cache_provider)) == SAVED_CONCISE

    def test_save_cleared_record(self, cache_provider):
        asyncio.run(save_user_preferences("u", SAVED_CONCISE, cache_provider))
        asyncio.run(save_user_preferences("u", UserPreferences(), cache_provider))

        assert asyncio.run(cache_provider.get(preference_cache_key("u"))) == "{}"
        assert asyncio.run(get_user_preferences("u", cache_provider)).is_empty
