"""Core data models: regions, listing summaries, listing pages, detail records.

Upstream shapes are not versioned, so every model ignores unknown fields and
tolerates missing optional ones. All models are frozen once parsed.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Region(str, Enum):
    """Region filters recognized by the listing API.

    REMOTE is a pseudo-region: it is sent as ``isRemote=true``, never as a
    country code.
    """

    FI = "FI"
    SE = "SE"
    DK = "DK"
    NO = "NO"
    IS = "IS"
    EU = "EU"
    REMOTE = "REMOTE"

    @classmethod
    def parse(cls, value: "str | Region") -> "Region":
        """Coerce a raw value into a Region, rejecting anything unrecognized."""
        if isinstance(value, Region):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            allowed = ", ".join(r.value for r in cls)
            msg = f"Unrecognized region '{value}' (expected one of: {allowed})"
            raise ValueError(msg) from None


ALL_REGIONS: tuple[Region, ...] = tuple(Region)


class UpstreamModel(BaseModel):
    """Base for models parsed from upstream camelCase JSON."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Location(UpstreamModel):
    country: str | None = None
    locality: str | None = None
    address: str | None = None


class Views(UpstreamModel):
    week: int = 0
    total: int = 0


class SalaryRange(UpstreamModel):
    min: float
    max: float


class LogoImage(UpstreamModel):
    path: str | None = None
    filetype: str | None = None
    size: int | None = None


class GalleryImage(UpstreamModel):
    path: str


class CompanySummary(UpstreamModel):
    """Company block embedded in a listing summary."""

    id: str
    key: str = ""
    name: str = ""
    website: str | None = None
    number_of_employees: str | int | None = None
    founded: str | int | None = None
    logo_image: LogoImage | None = None


class ListingSummary(UpstreamModel):
    """A lightweight job reference from one page of the listing API."""

    id: str
    key: str = ""
    title: str = ""
    location: Location = Field(default_factory=Location)
    is_remote: bool = False
    job_position_types: list[str] = Field(default_factory=list)
    is_featured: bool = False
    views: Views = Field(default_factory=Views)
    company: CompanySummary
    saved: bool = False


class ListingSuggestions(UpstreamModel):
    job_position_types: dict[str, int] = Field(default_factory=dict)
    job_roles: dict[str, int] = Field(default_factory=dict)
    remote: int = 0
    paid: int = 0


class JobsBlock(UpstreamModel):
    total: int
    limit: int
    page: int
    pages: int
    suggestions: ListingSuggestions | None = None
    docs: list[ListingSummary] = Field(default_factory=list)


class FeaturedBlock(UpstreamModel):
    total: int = 0
    docs: list[ListingSummary] = Field(default_factory=list)


class ListingPage(UpstreamModel):
    """One response of the ``jobsandfeatured`` endpoint.

    ``featured_jobs`` is only meaningful on page 1.
    """

    jobs: JobsBlock
    featured_jobs: FeaturedBlock = Field(default_factory=FeaturedBlock)


class CompanyFull(CompanySummary):
    """Full company record from the detail page state."""

    id: str | None = None  # type: ignore[assignment]
    video: str | None = None
    what_we_do: str | None = None
    perks: list[Any] = Field(default_factory=list)
    gallery_images: list[GalleryImage] = Field(default_factory=list)


class DetailRecord(UpstreamModel):
    """The full job record extracted from a detail page's embedded state."""

    id: str | None = None
    key: str | None = None
    title: str | None = None
    description: str | None = None
    description_length: int | None = None
    salary: str | None = None
    salary_range: SalaryRange | None = None
    equity: str | None = None
    status: str | None = None
    job_role: str | None = None
    job_position_types: list[str] | None = None
    country_code: str | None = None
    location: Location | None = None
    # Checked strictly at the output boundary, not here.
    is_remote: Any = False
    is_featured: bool | None = None
    scraped: bool | None = None
    link: str | None = None
    expiration_date: str | None = None
    created_at: str | None = None
    approved_at: str | None = None
    published_at: str | None = None
    views: Views | None = None
    social_image_url: str | None = None
    company: CompanyFull | None = None


class DetailRequest(BaseModel):
    """One detail page to crawl."""

    model_config = ConfigDict(frozen=True)

    url: str
    job_id: str
    label: str = "job-detail"
    basic_info: dict[str, str] = Field(default_factory=dict)
