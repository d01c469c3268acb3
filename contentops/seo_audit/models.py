"""
SEO audit data models.

Plain immutable Pydantic records for the single-page audit: the extracted
PageData snapshot and the Check -> Module -> SEOCheckResult report built
from it. Python attributes are snake_case; JSON output (by_alias=True) uses
the camelCase names the dashboard consumes.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Dict, Optional, Any, Union
from enum import Enum


class CheckStatus(str, Enum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class ArticleType(str, Enum):
    DESTINATION = "destination"
    FOOD = "food"
    GUIDE = "guide"
    REVIEW = "review"
    NEWS = "news"
    PRODUCT = "product"
    FAQ = "faq"
    VIDEO = "video"
    ARTICLE = "article"


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ─── Extracted Page Structure ─────────────────────────────────────────


class ImageData(_Record):
    src: str
    alt: str = ""
    caption: Optional[str] = None
    has_lazy_loading: bool = False


class LinkData(_Record):
    href: str
    text: str = ""
    target: Optional[str] = None
    rel: Optional[str] = None
    position: int = 0


class ListData(_Record):
    type: str  # "ul" | "ol"
    items: List[str] = Field(default_factory=list)


class SchemaData(_Record):
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def types(self) -> List[str]:
        """Individual @type names (a list-valued @type yields several)."""
        raw = self.data.get("@type", self.type)
        if isinstance(raw, list):
            return [str(t) for t in raw if t]
        return [t.strip() for t in str(raw).split(",") if t.strip()]


class PageData(_Record):
    url: str
    html: str = ""
    title: str = ""
    meta_description: str = ""
    h1: List[str] = Field(default_factory=list)
    h2: List[str] = Field(default_factory=list)
    h3: List[str] = Field(default_factory=list)
    h4: List[str] = Field(default_factory=list)
    h5: List[str] = Field(default_factory=list)
    h6: List[str] = Field(default_factory=list)
    paragraphs: List[str] = Field(default_factory=list)
    bold_texts: List[str] = Field(default_factory=list)  # first <strong>/<b> runs in <body>
    body_text: str = ""
    word_count: int = 0
    images: List[ImageData] = Field(default_factory=list)
    internal_links: List[LinkData] = Field(default_factory=list)
    external_links: List[LinkData] = Field(default_factory=list)
    lists: List[ListData] = Field(default_factory=list)
    tables: int = 0
    canonical: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    twitter_card: Optional[str] = None
    twitter_title: Optional[str] = None
    twitter_description: Optional[str] = None
    author: Optional[str] = None
    author_link: Optional[str] = None
    publish_date: Optional[str] = None
    modified_date: Optional[str] = None
    has_lazy_loading: bool = False
    schemas: List[SchemaData] = Field(default_factory=list)
    article_type: ArticleType = ArticleType.ARTICLE

    def headings(self, *levels: int) -> List[str]:
        """Headings of the given levels, level by level (h2s then h3s, ...)."""
        out: List[str] = []
        for level in levels:
            out.extend(getattr(self, f"h{level}"))
        return out


# ─── Audit Report ─────────────────────────────────────────────────────


class Check(_Record):
    id: str
    name: str
    status: CheckStatus
    current: Union[int, str]
    expected: str
    suggestion: str = ""
    score: int = 0
    max_score: int


class Module(_Record):
    id: str
    name: str
    score: int = 0
    max_score: int = 0
    checks: List[Check] = Field(default_factory=list)

    @property
    def failed(self) -> List[Check]:
        return [c for c in self.checks if c.status == CheckStatus.FAIL]

    @property
    def warnings(self) -> List[Check]:
        return [c for c in self.checks if c.status == CheckStatus.WARNING]


class SEOCheckResult(_Record):
    url: str
    title: str = ""
    word_count: int = 0
    article_type: ArticleType = ArticleType.ARTICLE
    total_score: int = 0
    max_score: int = 0
    modules: List[Module] = Field(default_factory=list)

    def module(self, module_id: str) -> Optional[Module]:
        for m in self.modules:
            if m.id == module_id:
                return m
        return None


# ─── Caller Request ───────────────────────────────────────────────────


class CheckRequest(_Record):
    url: str = ""
    keywords: List[str] = Field(default_factory=list)
    brand_name: str = ""
