from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AnalysisAction = Literal["translate", "explain", "grammar", "vocabulary", "conjugation"]


class PageMetadata(BaseModel):
    url: str | None = None
    title: str | None = None


class SelectionRegion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    x: float = Field(ge=0)
    y: float = Field(ge=0)
    width: float = Field(ge=1)
    height: float = Field(ge=1)
    device_pixel_ratio: float = Field(alias="devicePixelRatio", ge=0.1)


class IdentifyPhraseRequest(BaseModel):
    image: str
    selection: SelectionRegion
    metadata: PageMetadata | None = None


class IdentifyPhrasesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image: str
    max_phrases: int = Field(default=25, alias="maxPhrases", ge=1, le=100)
    metadata: PageMetadata | None = None


class AnalyzeContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_phrase: str | None = Field(default=None, alias="fullPhrase")
    image: str | None = None


class AnalyzeRequest(BaseModel):
    phrase: str = Field(min_length=1)
    action: AnalysisAction
    context: AnalyzeContext | None = None
