"""Types for book metadata lookups."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class BookMetadata:
    """Normalized volume data returned by a metadata source."""

    google_id: str
    title: str
    isbn13: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Upstream payload shapes. Unknown keys are ignored; only the fields read
# below are validated.


class VolumeReference(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)


class VolumeSearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: List[VolumeReference] = Field(min_length=1)


class IndustryIdentifier(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    identifier: str


class VolumeInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str
    authors: List[str] = Field(default_factory=list)
    publisher: Optional[str] = None
    published_date: Optional[str] = Field(default=None, alias="publishedDate")
    description: Optional[str] = None
    industry_identifiers: List[IndustryIdentifier] = Field(
        default_factory=list, alias="industryIdentifiers"
    )

    def isbn13(self) -> Optional[str]:
        for entry in self.industry_identifiers:
            if entry.type == "ISBN_13":
                return entry.identifier
        return None


class VolumeDetailResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    volume_info: VolumeInfo = Field(alias="volumeInfo")


__all__ = [
    "BookMetadata",
    "IndustryIdentifier",
    "VolumeDetailResponse",
    "VolumeInfo",
    "VolumeReference",
    "VolumeSearchResponse",
]
