"""
Static thresholds and vocabularies for the SEO checklist.

Word lists are stored unfolded (readable Vietnamese); callers compare them
through text.fold().
"""

import re

from .models import ArticleType


# ─── Word Count ───────────────────────────────────────────────────────

WORD_COUNT_REQUIREMENTS = {
    ArticleType.DESTINATION: 1500,
    ArticleType.FOOD: 1200,
    ArticleType.GUIDE: 1500,
    ArticleType.REVIEW: 1200,
    ArticleType.NEWS: 600,
    ArticleType.PRODUCT: 800,
    ArticleType.FAQ: 800,
    ArticleType.VIDEO: 500,
    ArticleType.ARTICLE: 1000,
}

# ─── Article Type Detection ───────────────────────────────────────────

# Evaluated in this order; the first type with a matching pattern wins.
ARTICLE_TYPE_PATTERNS = [
    (ArticleType.DESTINATION, [
        "du lịch", "điểm đến", "địa điểm", "check-in", "bãi biển",
        "travel", "destination", "beach", "beaches",
    ]),
    (ArticleType.FOOD, [
        "món ăn", "quán ăn", "nhà hàng", "ẩm thực", "đặc sản", "công thức nấu",
        "food", "restaurant", "recipe",
    ]),
    (ArticleType.GUIDE, [
        "hướng dẫn", "cách làm", "các bước", "từng bước",
        "how to", "guide", "tutorial", "step by step",
    ]),
    (ArticleType.REVIEW, [
        "review", "đánh giá", "trải nghiệm thực tế", "có nên mua",
    ]),
    (ArticleType.NEWS, [
        "tin tức", "bản tin", "thông báo", "mới nhất", "news", "breaking",
    ]),
    (ArticleType.PRODUCT, [
        "bảng giá", "giá bán", "sản phẩm", "mua ngay", "đặt hàng",
        "price", "buy now",
    ]),
    (ArticleType.FAQ, [
        "câu hỏi thường gặp", "hỏi đáp", "giải đáp", "faq",
    ]),
    (ArticleType.VIDEO, [
        "video", "clip", "xem phim",
    ]),
]

SCHEMA_TYPE_HINTS = [
    ("FAQPage", ArticleType.FAQ),
    ("Recipe", ArticleType.FOOD),
    ("HowTo", ArticleType.GUIDE),
    ("Product", ArticleType.PRODUCT),
    ("Review", ArticleType.REVIEW),
    ("VideoObject", ArticleType.VIDEO),
    ("NewsArticle", ArticleType.NEWS),
    ("TouristDestination", ArticleType.DESTINATION),
    ("TouristAttraction", ArticleType.DESTINATION),
]

PRICE_MARKER_RE = re.compile(
    r'itemprop=["\']price["\']|\d[\d.,]*\s?(₫|vnđ|vnd)(?!\w)|\$\s?\d', re.IGNORECASE
)
RATING_MARKER_RE = re.compile(
    r'itemprop=["\']ratingValue["\']|class=["\'][^"\']*\b(star-rating|rating-stars)\b|★{3,}',
    re.IGNORECASE,
)
VIDEO_MARKER_RE = re.compile(
    r"<video\b|youtube\.com/embed/|player\.vimeo\.com", re.IGNORECASE
)

# ─── Title / Meta ─────────────────────────────────────────────────────

POWER_WORDS = [
    "top", "best", "hướng dẫn", "chi tiết", "mới nhất", "tốt nhất", "hay nhất",
    "đầy đủ", "bí quyết", "kinh nghiệm", "cẩm nang", "review", "ultimate",
    "miễn phí", "2024", "2025", "2026",
]

CTA_WORDS = [
    "xem ngay", "tìm hiểu", "khám phá", "liên hệ", "đăng ký", "đặt ngay",
    "mua ngay", "click", "tham khảo", "xem thêm", "gọi ngay", "learn more",
]

TITLE_LENGTH = (50, 60)
TITLE_TOLERANCE = 10
META_LENGTH = (120, 160)
META_TOLERANCE = 20

# ─── URL ──────────────────────────────────────────────────────────────

SLUG_MAX_LENGTH = 60
SLUG_TOLERANCE = 15

STOP_WORDS = [
    "va", "cua", "de", "cho", "voi", "nhung", "cac", "mot", "thi", "ma",
    "the", "and", "of", "a", "an", "to", "in", "for",
]

# ─── Content ──────────────────────────────────────────────────────────

KEYWORD_DENSITY = (0.5, 2.5)
KEYWORD_DENSITY_TOLERANCE = 0.5
LONG_PARAGRAPH_WORDS = 100
LONG_SENTENCE_WORDS = 25
LONG_SENTENCE_RATIO = 0.2

NUMBER_RE = re.compile(
    r"\d+(?:[.,]\d+)?(?:\s*(?:%|triệu|tỷ|nghìn|km|kg|năm|tháng|ngày|giờ|phút|m|g)\b|%)?",
    re.IGNORECASE,
)

CONCLUSION_HEADINGS = [
    "tóm lại", "kết luận", "lời kết", "tổng kết", "kết bài", "conclusion", "summary",
]

# ─── Links ────────────────────────────────────────────────────────────

TRUSTED_DOMAINS = [
    ".gov", ".edu", ".gov.vn", ".edu.vn", "wikipedia.org",
    "vnexpress.net", "tuoitre.vn", "thanhnien.vn", "dantri.com.vn",
    "vietnamnet.vn", "zingnews.vn", "baochinhphu.vn",
    "bbc.com", "reuters.com", "nytimes.com",
]

BAD_ANCHOR_TEXTS = [
    "click đây", "click here", "tại đây", "xem tại đây", "bấm vào đây",
    "here", "link", "đây",
]

NOFOLLOW_RELS = ("nofollow", "sponsored", "ugc")

INTERNAL_LINKS_PER_1000_WORDS = 3
FIRST_LINK_WITHIN_WORDS = 300

# ─── Local SEO ────────────────────────────────────────────────────────

LOCAL_TYPES = (ArticleType.DESTINATION, ArticleType.FOOD)

GEO_KEYWORDS = [
    "tại", "ở", "quận", "huyện", "phường", "đường", "thành phố", "tỉnh", "gần",
]

ADDRESS_RE = re.compile(r"(\d+\s*(/\d+)?\s*(đường|phố|ngõ|hẻm)|số\s*\d+)", re.IGNORECASE)
PHONE_RE = re.compile(r"(\+84|0)[\s.]?\d{2,3}[\s.]?\d{3}[\s.]?\d{3,4}")
MAP_LINK_MARKERS = ("google.com/maps", "goo.gl/maps", "maps.app.goo.gl")

# ─── AI Optimization / Featured Snippet ────────────────────────────────

PAA_PATTERNS = [
    "là gì", "tại sao", "vì sao", "làm sao", "làm thế nào", "như thế nào",
    "có nên", "bao nhiêu", "ở đâu", "khi nào",
    "what is", "why", "how to", "how much",
]

CITATION_RE = re.compile(r"\b(theo|nguồn|source|data from|số liệu từ)\b", re.IGNORECASE)

LIST_HEADING_PATTERNS = [
    re.compile(r"^top\s*\d+", re.IGNORECASE),
    re.compile(r"^\d+\s+\w+", re.IGNORECASE),
    re.compile(r"các bước|những điều|những cách|danh sách|các loại", re.IGNORECASE),
    re.compile(r"bước\s*\d+", re.IGNORECASE),
]

SNIPPET_PARAGRAPH_WORDS = (40, 60)
TOC_MIN_WORDS = 2000

# ─── Schema ───────────────────────────────────────────────────────────

ARTICLE_SCHEMA_TYPES = ("Article", "NewsArticle", "BlogPosting")
ARTICLE_REQUIRED_FIELDS = ("headline", "author", "datePublished", "image")

TYPE_SCHEMA_MAP = {
    ArticleType.FAQ: ["FAQPage"],
    ArticleType.GUIDE: ["HowTo", "Article"],
    ArticleType.FOOD: ["Recipe"],
    ArticleType.REVIEW: ["Review"],
    ArticleType.PRODUCT: ["Product"],
    ArticleType.VIDEO: ["VideoObject"],
    ArticleType.DESTINATION: ["TouristDestination", "Place"],
    ArticleType.NEWS: ["NewsArticle"],
    ArticleType.ARTICLE: ["Article", "BlogPosting"],
}

SCHEMA_REQUIRED_FIELDS = {
    "Article": ("headline", "author", "datePublished", "image"),
    "BlogPosting": ("headline", "author", "datePublished", "image"),
    "NewsArticle": ("headline", "author", "datePublished", "image"),
    "HowTo": ("name", "step"),
    "FAQPage": ("mainEntity",),
    "Recipe": ("name", "image", "recipeIngredient", "recipeInstructions"),
    "Review": ("itemReviewed", "reviewRating", "author"),
    "Product": ("name", "image", "offers"),
    "VideoObject": ("name", "description", "thumbnailUrl", "uploadDate"),
    "TouristDestination": ("name", "description"),
    "Place": ("name", "address"),
}
