"""Request and result models for page fetches."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FetchMode(str, Enum):
    """What to extract from a rendered page."""

    SUMMARY = "summary"
    FULL_CONTENT = "full_content"


class FetchRequest(BaseModel):
    """A single fetch call. Discarded once the call completes."""

    model_config = ConfigDict(frozen=True)

    target_url: str
    mode: FetchMode = FetchMode.SUMMARY
    debug: bool = False

    @classmethod
    def from_flags(
        cls, url: str, full_content: bool = False, debug: bool = False
    ) -> "FetchRequest":
        """Build a request from the caller's boolean flags."""
        mode = FetchMode.FULL_CONTENT if full_content else FetchMode.SUMMARY
        return cls(target_url=url, mode=mode, debug=debug)


class PageSummary(BaseModel):
    """Structured fields extracted from a page. Missing elements are None."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str | None = None
    meta_description: str | None = Field(default=None, alias="metaDescription")
    h1: str | None = None

    def to_response(self) -> dict:
        return {**self.model_dump(by_alias=True), "status": 200}


class PageContent(BaseModel):
    """Full rendered HTML of a page."""

    model_config = ConfigDict(frozen=True)

    html: str

    def to_response(self) -> dict:
        return {"html": self.html, "status": 200}


FetchResult = PageSummary | PageContent
