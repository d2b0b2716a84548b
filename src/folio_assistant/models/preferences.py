from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ResponseStyle(StrEnum):
    CONCISE = "concise"
    DETAILED = "detailed"


class UserPreferences(BaseModel):
    """Cross-session preferences; an empty record means no preference.

    Persisted as camelCase JSON (``responseStyle``, ``updatedAt``).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    response_style: ResponseStyle | None = None
    updated_at: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.response_style is None and self.updated_at is None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class PreferenceUpdate(BaseModel):
    should_persist: bool
    user_preferences: UserPreferences
    acknowledgement: str | None = None
