#!/usr/bin/env python
"""
Pydantic request models for the track write path.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError, field_validator

LicenseName = Literal["cc_by", "cc_by_sa", "cc0", "custom"]

# tags.name is VARCHAR(64)
TagName = Annotated[str, StringConstraints(max_length=64)]

# leaves room for the storage endpoint and bucket inside the 500 char url columns
OBJECT_KEY_MAX_LENGTH = 400


class UploadCompleteDTO(BaseModel):
    """Metadata sent once the audio object has landed in storage."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    license: LicenseName
    tags: List[TagName] = Field(default_factory=list, max_length=12)
    audio_key: str = Field(alias="audioKey", min_length=1, max_length=OBJECT_KEY_MAX_LENGTH)
    cover_key: Optional[str] = Field(default=None, alias="coverKey", max_length=OBJECT_KEY_MAX_LENGTH)
    bpm: Optional[int] = Field(default=None, gt=0, le=300)
    key: Optional[str] = Field(default=None, max_length=5)
    duration_sec: int = Field(default=1, alias="durationSec", ge=1)

    @field_validator("tags")
    @classmethod
    def _non_empty_tags(cls, value: List[str]) -> List[str]:
        if any(not tag or not tag.strip() for tag in value):
            raise ValueError("tags must be non-empty strings")
        return value


class TrackUpdateDTO(BaseModel):
    """Editable track fields; omitted fields stay unchanged."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[List[TagName]] = Field(default=None, max_length=12)


def validation_details(exc: ValidationError) -> List[Dict[str, Any]]:
    """JSON-safe summary of a pydantic validation failure."""
    return [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]


__all__ = ["LicenseName", "TagName", "UploadCompleteDTO", "TrackUpdateDTO", "validation_details"]
