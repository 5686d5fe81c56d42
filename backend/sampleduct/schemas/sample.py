from __future__ import annotations

import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Sample(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    updated_at: str = Field(validation_alias=AliasChoices("updated_at", "updatedAt"))


class SampleRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    name: str
    default_value: Optional[float] = None
    cache_millis: int = Field(default=0, ge=0)

    @property
    def cache_key(self) -> str:
        return f"{self.source}:{self.name}"


class ResultMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    messages: tuple[str, ...] = ()


class ExtractResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: datetime.datetime
    name: str
    value: float
    original_value: float
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)

    def with_message(self, message: str) -> ExtractResult:
        metadata = ResultMetadata(messages=(*self.metadata.messages, message))
        return self.model_copy(update={"metadata": metadata})
