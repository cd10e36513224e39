"""Data models for listings extracted from Finn.no."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def today_iso() -> str:
    return date.today().isoformat()


class ExtractionResult(BaseModel):
    """Structured fields scraped from a single listing page.

    Every field has a default so the result is fully shaped even when
    nothing could be extracted.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    price: int = Field(0, ge=0)
    description: str = ""
    date: str = Field(default_factory=today_iso)
    location: str = ""
    images: List[str] = Field(default_factory=list)
    seller_name: str = Field("", alias="sellerName")
    source_url: str = Field("", alias="sourceUrl")

    @classmethod
    def empty(cls, source_url: str) -> "ExtractionResult":
        """Default-filled result used when automatic extraction fails."""
        return cls(source_url=source_url)


class ParseUrlResponse(BaseModel):
    """Response envelope for the parse-url endpoint and the CLI."""

    success: bool
    data: Optional[ExtractionResult] = None
    warnings: Optional[List[str]] = None
    error: Optional[str] = None

    def body(self) -> dict:
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not self.warnings:
            data.pop("warnings", None)
        return data
