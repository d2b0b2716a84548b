from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_DATA_SOURCE = "YAHOO"


class LookupItem(BaseModel):
    """Single instrument returned by the search provider."""

    symbol: str
    name: str | None = None
    currency: str | None = None
    data_source: str = DEFAULT_DATA_SOURCE
    asset_class: str | None = None
    asset_sub_class: str | None = None


class SearchResponse(BaseModel):
    items: list[LookupItem] = []


class ResolvedSymbol(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    data_source: str = DEFAULT_DATA_SOURCE
    confidence: float = Field(ge=0.0, le=1.0)
    cached: bool = False


class CacheEntry(BaseModel):
    """Payload stored by either cache tier; validity is judged at read time.

    Serialized as camelCase JSON so entries written by other services stay readable.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    symbol: str
    name: str
    data_source: str = DEFAULT_DATA_SOURCE
    resolved_at: float | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
