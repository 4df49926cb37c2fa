from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PhraseToken(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word: str
    reading: str = ""
    romaji: str = ""
    part_of_speech: list[str] | None = Field(default=None, alias="partOfSpeech")
    has_kanji: bool | None = Field(default=None, alias="hasKanji")
    is_common: bool | None = Field(default=None, alias="isCommon")


class PhraseData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phrase: str
    romaji: str = ""
    bounding_box: list[float] = Field(default_factory=list, alias="boundingBox")
    tokens: list[PhraseToken] = Field(default_factory=list)


class IdentifyPhrasesResponse(BaseModel):
    phrases: list[PhraseData]


class HealthResponse(BaseModel):
    status: str
    timestamp: int
    uptime: float


class CacheStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    size: int
    max_size: int = Field(alias="maxSize")
    hits: int
    misses: int
    hit_rate: float = Field(alias="hitRate")


class CacheClearResponse(BaseModel):
    cleared: int
