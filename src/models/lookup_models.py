"""Company lookup (Glassdoor employers API) response models."""

from pydantic import BaseModel, ConfigDict, Field


class FeaturedReview(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    attribution_url: str | None = Field(default=None, alias="attributionURL")
    headline: str | None = None


class Employer(BaseModel):
    """One employer record returned by the lookup."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int | None = None
    name: str
    website: str | None = None
    square_logo: str | None = Field(default=None, alias="squareLogo")
    overall_rating: float | str | None = Field(default=None, alias="overallRating")
    featured_review: FeaturedReview | None = Field(default=None, alias="featuredReview")


class EmployerPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    employers: list[Employer] = Field(default_factory=list)


class EmployerSearchResult(BaseModel):
    """Top-level lookup response."""

    model_config = ConfigDict(extra="ignore")

    success: bool = True
    status: str | None = None
    response: EmployerPage = Field(default_factory=EmployerPage)

    @property
    def employers(self) -> list[Employer]:
        return self.response.employers
