from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Product(BaseModel):
    """A validated catalog product. Only instances with public=True are displayed."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(gt=0)
    title: str = Field(min_length=1)
    subtitle: str | None = None
    description: str = Field(min_length=1)
    gallery: list[str] = Field(default_factory=list)
    price: float = Field(gt=0)
    promotional_price: float | None = Field(default=None, gt=0, alias="promotionalPrice")
    public: bool = False
    rating: int | None = None
    order: float = 0

    @property
    def main_image(self) -> str | None:
        return self.gallery[0] if self.gallery else None


class FallbackRecord(BaseModel):
    """Shape check for one entry of the bundled fallback document."""

    model_config = ConfigDict(extra="allow")

    id: Any
    title: str
    description: str
    gallery: list[Any]
    price: float = Field(ge=0)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _require_string(cls, v: object) -> object:
        if not isinstance(v, str):
            raise ValueError("must be a string")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def _require_number(cls, v: object) -> object:
        # bool is an int subclass; neither it nor numeric strings count as a price here
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("must be a number")
        return v


class FallbackDocument(BaseModel):
    products: list[FallbackRecord]


class LoadStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class DataSource(str, Enum):
    API = "api"
    FALLBACK = "fallback"


# ---------------------------------------------------------------------------
# View models
# ---------------------------------------------------------------------------

class PriceView(BaseModel):
    original: str
    promotional: str | None = None
    display: str
    currency: str


class ProductCardView(BaseModel):
    id: int
    title: str
    subtitle: str | None = None
    description: str
    main_image: str
    error_image: str
    image_alt: str
    gallery_badge: str | None = None
    price: PriceView
    contact_url: str
    detail_id: int


class ThumbnailView(BaseModel):
    index: int
    url: str
    alt: str
    active: bool = False


class ProductDetailView(BaseModel):
    id: int
    title: str
    subtitle: str | None = None
    description: str
    main_image: str
    error_image: str
    image_alt: str
    thumbnails: list[ThumbnailView] = Field(default_factory=list)
    price: PriceView
    contact_url: str


class BannerView(BaseModel):
    title: str
    reason: str
    detail: str


class NoResultsView(BaseModel):
    heading: str
    message: str
    action_label: str


class PageView(BaseModel):
    status: LoadStatus
    source: DataSource | None = None
    panels: dict[str, bool]
    error_message: str | None = None
    cards: list[ProductCardView] = Field(default_factory=list)
    search_term: str = ""
    results_info: str | None = None
    show_clear_search: bool = False
    no_results: NoResultsView | None = None
    banner: BannerView | None = None
    focus_target: str | None = None


class ContactLink(BaseModel):
    product_id: int
    url: str
