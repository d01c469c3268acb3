"""
Per-page SEO rule engine.

Each check is a plain function over an AuditContext that returns one Check.
MODULES lists, in report order, which checks make up which module; evaluate()
runs them all. Checks never read each other's output and never perform I/O,
so evaluate() is a pure function of (page, keywords, brand_name).
"""

import math
import re
from datetime import date
from typing import Callable, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from .constants import (
    ADDRESS_RE,
    ARTICLE_REQUIRED_FIELDS,
    ARTICLE_SCHEMA_TYPES,
    BAD_ANCHOR_TEXTS,
    CITATION_RE,
    CONCLUSION_HEADINGS,
    CTA_WORDS,
    FIRST_LINK_WITHIN_WORDS,
    GEO_KEYWORDS,
    INTERNAL_LINKS_PER_1000_WORDS,
    KEYWORD_DENSITY,
    KEYWORD_DENSITY_TOLERANCE,
    LIST_HEADING_PATTERNS,
    LOCAL_TYPES,
    LONG_PARAGRAPH_WORDS,
    LONG_SENTENCE_RATIO,
    LONG_SENTENCE_WORDS,
    MAP_LINK_MARKERS,
    META_LENGTH,
    META_TOLERANCE,
    NOFOLLOW_RELS,
    NUMBER_RE,
    PAA_PATTERNS,
    PHONE_RE,
    POWER_WORDS,
    SCHEMA_REQUIRED_FIELDS,
    SLUG_MAX_LENGTH,
    SLUG_TOLERANCE,
    SNIPPET_PARAGRAPH_WORDS,
    STOP_WORDS,
    TITLE_LENGTH,
    TITLE_TOLERANCE,
    TOC_MIN_WORDS,
    TRUSTED_DOMAINS,
    TYPE_SCHEMA_MAP,
    WORD_COUNT_REQUIREMENTS,
)
from .models import Check, LinkData, Module, PageData, SchemaData
from .scoring import (
    band_score,
    build_module,
    half,
    linear_score,
    make_check,
    neutral,
    round_half_up,
    unscored,
)
from .text import (
    contains,
    count_occurrences,
    first_words,
    fold,
    last_words,
    similarity,
    to_slug,
    word_count,
)


class AuditContext:
    """The three engine inputs, with keywords split into primary/secondary."""

    def __init__(self, page: PageData, keywords: List[str], brand_name: str = ""):
        cleaned = [k.strip() for k in (keywords or []) if k and k.strip()]
        self.page = page
        self.keyword = cleaned[0] if cleaned else ""
        self.secondary_keywords = cleaned[1:]
        self.all_keywords = cleaned
        self.brand_name = (brand_name or "").strip()


def _yes(flag: bool) -> str:
    return "Có" if flag else "Không"


def _pct(value: float) -> str:
    return f"{round_half_up(value)}%"


# ─── Module: Title Tag ────────────────────────────────────────────────


def check_title_keyword_position(ctx: AuditContext) -> Check:
    name, expected = "Từ khóa trong 10 ký tự đầu", "Từ khóa ở đầu title"
    if not ctx.keyword:
        return unscored("1.1", name, expected, 1)

    idx = fold(ctx.page.title).find(fold(ctx.keyword))
    return make_check(
        "1.1", name,
        0 <= idx < 10,
        f"Vị trí {idx}" if idx >= 0 else "Không có",
        expected,
        "Đưa từ khóa lên đầu title để tăng CTR",
        1,
    )


def check_title_h1_match(ctx: AuditContext) -> Check:
    h1 = ctx.page.h1[0] if ctx.page.h1 else ""
    sim = similarity(ctx.page.title, h1) if ctx.page.title and h1 else 0.0
    return make_check(
        "1.2", "Khớp H1 ≥70%",
        sim >= 0.7,
        _pct(sim * 100),
        "≥70%",
        "Title và H1 nên có nội dung tương tự để SEO tốt hơn",
        1,
    )


def check_title_power_words(ctx: AuditContext) -> Check:
    found = [w for w in POWER_WORDS if contains(ctx.page.title, w)]
    return make_check(
        "1.3", "Có power words",
        bool(found),
        ", ".join(found) if found else "Không",
        "Có power words: Top, Best, Hướng dẫn...",
        "Thêm power words như: Top, Hướng dẫn, Best, Kinh nghiệm...",
        1,
    )


def check_title_keyword_repetition(ctx: AuditContext) -> Check:
    name, expected = "Không lặp keyword", "Tối đa 1 lần"
    if not ctx.keyword:
        return unscored("1.4", name, expected, 1)

    count = count_occurrences(ctx.page.title, ctx.keyword)
    return make_check(
        "1.4", name,
        count <= 1,
        f"{count} lần",
        expected,
        f"Bỏ bớt {count - 1} lần lặp từ khóa trong title",
        1,
    )


# ─── Module: Meta Description ─────────────────────────────────────────


def check_meta_cta(ctx: AuditContext) -> Check:
    found = [w for w in CTA_WORDS if contains(ctx.page.meta_description, w)]
    return make_check(
        "2.1", "Có CTA (Call to Action)",
        bool(found),
        ", ".join(found) if found else "Không",
        "Có CTA: Xem ngay, Tìm hiểu...",
        "Thêm CTA như: Xem ngay, Tìm hiểu, Khám phá...",
        1,
    )


def check_meta_not_title(ctx: AuditContext) -> Check:
    meta = ctx.page.meta_description
    if not meta:
        return make_check(
            "2.2", "Không trùng Title", False, "Không có meta description",
            "<80% giống title", "Thêm meta description khác với title", 1,
        )

    sim = similarity(meta, ctx.page.title)
    return make_check(
        "2.2", "Không trùng Title",
        sim < 0.8,
        f"{_pct(sim * 100)} giống",
        "<80% giống title",
        "Viết lại meta description để mô tả chi tiết hơn thay vì lặp title",
        1,
    )


# ─── Module: URL/Slug ─────────────────────────────────────────────────


def _slug(url: str) -> str:
    try:
        path = urlparse(url).path
    except ValueError:
        path = url
    segments = [s for s in path.split("/") if s]
    return fold(segments[-1]) if segments else ""


def check_slug_length(ctx: AuditContext) -> Check:
    length = len(_slug(ctx.page.url))
    return make_check(
        "3.1", "Độ dài Slug ≤60 ký tự",
        length <= SLUG_MAX_LENGTH,
        length,
        f"≤{SLUG_MAX_LENGTH} ký tự",
        f"Rút ngắn slug đi {length - SLUG_MAX_LENGTH} ký tự",
        1,
        band_score(length, 0, SLUG_MAX_LENGTH, SLUG_TOLERANCE, 1),
    )


def check_slug_keyword(ctx: AuditContext) -> Check:
    name = "Chứa từ khóa (dạng slug)"
    if not ctx.keyword:
        return unscored("3.2", name, "Chứa từ khóa dạng slug", 2)

    slug = _slug(ctx.page.url)
    keyword_slug = to_slug(ctx.keyword)
    parts = [p for p in keyword_slug.split("-") if p]
    tokens = set(re.split(r"[-_.]", slug))
    has_all = bool(keyword_slug) and (
        keyword_slug in slug or all(p in tokens for p in parts)
    )
    return make_check(
        "3.2", name,
        has_all,
        _yes(has_all),
        f"Chứa: {keyword_slug}",
        f'Thêm "{keyword_slug}" vào slug',
        2,
        half(2, any(p in tokens for p in parts)),
    )


def check_slug_stop_words(ctx: AuditContext) -> Check:
    tokens = re.split(r"[-_.]", _slug(ctx.page.url))
    found = [t for t in tokens if t in STOP_WORDS]
    return make_check(
        "3.3", "Không có stop words",
        not found,
        ", ".join(found) if found else "Không có",
        "Không có: và, của, để...",
        f"Loại bỏ stop words: {', '.join(found)}",
        1,
    )


# ─── Module: Heading Structure ────────────────────────────────────────


def check_single_h1(ctx: AuditContext) -> Check:
    count = len(ctx.page.h1)
    if count == 0:
        suggestion = "Thêm 1 thẻ H1"
    else:
        suggestion = f"Chỉ giữ 1 H1, xóa {count - 1} H1 thừa"
    return make_check(
        "4.1", "Đúng 1 H1",
        count == 1,
        count,
        "1 H1",
        suggestion,
        2,
        half(2, count > 1),
    )


def check_h2_count(ctx: AuditContext) -> Check:
    count = len(ctx.page.h2)
    return make_check(
        "4.2", "Có ≥2 H2",
        count >= 2,
        count,
        "≥2 H2",
        f"Thêm {2 - count} thẻ H2",
        1,
    )


def check_h2_keyword(ctx: AuditContext) -> Check:
    name, expected = "≥1 H2 chứa từ khóa/biến thể", "Có từ khóa trong ≥1 H2"
    if not ctx.keyword:
        return unscored("4.3", name, expected, 2)

    found = any(contains(h, kw) for h in ctx.page.h2 for kw in ctx.all_keywords)
    return make_check(
        "4.3", name,
        found,
        _yes(found),
        expected,
        "Thêm từ khóa hoặc biến thể vào ít nhất 1 H2",
        2,
    )


# ─── Module: Content ──────────────────────────────────────────────────


def _first_paragraph(page: PageData) -> str:
    return page.paragraphs[0] if page.paragraphs else first_words(page.body_text, 100)


def check_word_count(ctx: AuditContext) -> Check:
    page = ctx.page
    required = WORD_COUNT_REQUIREMENTS[page.article_type]
    return make_check(
        "5.1", f"Độ dài bài viết ({page.article_type.value})",
        page.word_count >= required,
        page.word_count,
        f"≥{required} từ",
        f"Thêm {required - page.word_count} từ",
        3,
        linear_score(page.word_count, required * 0.5, required, 3),
    )


def check_keyword_in_title(ctx: AuditContext) -> Check:
    name, expected = "Title chứa từ khóa chính", "Có từ khóa chính"
    if not ctx.keyword:
        return unscored("5.2", name, expected, 2)

    found = contains(ctx.page.title, ctx.keyword)
    return make_check(
        "5.2", name, found, _yes(found), expected,
        f'Thêm "{ctx.keyword}" vào title', 2,
    )


def check_keyword_in_h1(ctx: AuditContext) -> Check:
    name, expected = "H1 chứa từ khóa chính", "Có từ khóa trong H1"
    if not ctx.keyword:
        return unscored("5.3", name, expected, 2)

    found = any(contains(h, ctx.keyword) for h in ctx.page.h1)
    return make_check(
        "5.3", name, found, _yes(found), expected,
        f'Thêm "{ctx.keyword}" vào H1', 2,
    )


def check_keyword_in_first_paragraph(ctx: AuditContext) -> Check:
    name, expected = "Đoạn mở đầu chứa từ khóa chính", "Có từ khóa trong đoạn đầu"
    if not ctx.keyword:
        return unscored("5.4", name, expected, 2)

    found = contains(_first_paragraph(ctx.page), ctx.keyword)
    return make_check(
        "5.4", name, found, _yes(found), expected,
        "Thêm từ khóa vào đoạn mở đầu bài viết", 2,
    )


def check_keyword_density(ctx: AuditContext) -> Check:
    low, high = KEYWORD_DENSITY
    name, expected = f"Mật độ từ khóa tự nhiên ({low}-{high}%)", f"{low}-{high}%"
    if not ctx.keyword:
        return unscored("5.5", name, expected, 2)

    wc = ctx.page.word_count
    count = count_occurrences(ctx.page.body_text, ctx.keyword)
    density = (count / wc * 100) if wc else 0.0

    if density < low:
        missing = max(1, math.ceil(low * wc / 100) - count)
        suggestion = f"Thêm khoảng {missing} lần xuất hiện từ khóa vào nội dung"
    else:
        extra = max(1, count - math.floor(high * wc / 100))
        suggestion = f"Bớt khoảng {extra} lần lặp từ khóa, tránh keyword stuffing"
    return make_check(
        "5.5", name,
        low <= density <= high,
        f"{density:.2f}%",
        expected,
        suggestion,
        2,
        band_score(density, low, high, KEYWORD_DENSITY_TOLERANCE, 2),
    )


def check_keyword_in_closing(ctx: AuditContext) -> Check:
    name, expected = "Từ khóa trong 200 từ cuối", "Có từ khóa trong 200 từ cuối"
    if not ctx.keyword:
        return unscored("5.6", name, expected, 1)

    found = contains(last_words(ctx.page.body_text, 200), ctx.keyword)
    return make_check(
        "5.6", name, found, _yes(found), expected,
        "Thêm từ khóa vào phần kết bài", 1,
    )


def check_secondary_coverage(ctx: AuditContext) -> Check:
    name, expected = "≥70% từ khóa phụ xuất hiện", "≥70%"
    secondary = ctx.secondary_keywords
    if not secondary:
        return neutral("5.7", name, expected, 2)

    body = ctx.page.body_text
    missing = [kw for kw in secondary if not contains(body, kw)]
    present = len(secondary) - len(missing)
    coverage = present / len(secondary) * 100
    return make_check(
        "5.7", name,
        coverage >= 70,
        f"{_pct(coverage)} ({present}/{len(secondary)})",
        expected,
        f"Thêm các từ khóa phụ còn thiếu: {', '.join(missing)}",
        2,
        half(2, coverage >= 50),
    )


def check_heading_hierarchy(ctx: AuditContext) -> Check:
    page = ctx.page
    used = [level for level in range(1, 7) if getattr(page, f"h{level}")]
    skipped = sorted({
        gap for level in used for gap in range(1, level) if gap not in used
    })
    return make_check(
        "5.8", "Cấu trúc heading đúng thứ tự",
        not skipped,
        "Đúng" if not skipped else "Thiếu " + ", ".join(f"H{g}" for g in skipped),
        "H1 → H2 → H3",
        "Sửa lại thứ tự heading: "
        + ", ".join(f"thêm H{g}" for g in skipped)
        + " trước các heading cấp dưới",
        1,
    )


def check_paragraph_length(ctx: AuditContext) -> Check:
    long_count = sum(
        1 for p in ctx.page.paragraphs if word_count(p) > LONG_PARAGRAPH_WORDS
    )
    return make_check(
        "5.9", f"Đoạn văn ≤{LONG_PARAGRAPH_WORDS} từ",
        long_count == 0,
        "Tất cả đạt" if long_count == 0 else f"{long_count} đoạn dài",
        f"Tất cả đoạn ≤{LONG_PARAGRAPH_WORDS} từ",
        f"Chia nhỏ {long_count} đoạn dài thành các đoạn ngắn hơn",
        2,
        linear_score(long_count, 3, 0, 2),
    )


def check_lists(ctx: AuditContext) -> Check:
    count = len(ctx.page.lists)
    return make_check(
        "5.10", "Có bullet points/list",
        count > 0,
        f"{count} danh sách" if count else "Không có",
        "Có ≥1 danh sách",
        "Thêm danh sách bullet points để dễ đọc hơn",
        1,
    )


def check_numbers(ctx: AuditContext) -> Check:
    unique = len({m.group(0).strip().lower() for m in NUMBER_RE.finditer(ctx.page.body_text)})
    return make_check(
        "5.11", "Có ≥2 số liệu cụ thể",
        unique >= 2,
        unique,
        "≥2 số liệu",
        f"Thêm {2 - unique} số liệu cụ thể để tăng độ tin cậy",
        2,
        half(2, unique >= 1),
    )


def check_readability(ctx: AuditContext) -> Check:
    sentences = [s for s in re.split(r"[.!?]+", ctx.page.body_text) if s.strip()]
    long_count = sum(1 for s in sentences if word_count(s) > LONG_SENTENCE_WORDS)
    long_ratio = long_count / len(sentences) if sentences else 0.0
    return make_check(
        "5.12", f"Readability: ≤20% câu dài >{LONG_SENTENCE_WORDS} từ",
        long_ratio <= LONG_SENTENCE_RATIO,
        _pct(long_ratio * 100),
        "≤20%",
        f"Chia nhỏ {long_count} câu dài thành câu ngắn hơn",
        1,
    )


# ─── Module: Sapo ─────────────────────────────────────────────────────


def check_sapo_length(ctx: AuditContext) -> Check:
    n = word_count(ctx.page.paragraphs[0]) if ctx.page.paragraphs else 0
    if n < 50:
        suggestion = f"Mở rộng sapo thêm {50 - n} từ"
    else:
        suggestion = f"Rút ngắn sapo bớt {n - 100} từ"
    return make_check(
        "6.1", "Độ dài Sapo 50-100 từ",
        50 <= n <= 100,
        n,
        "50-100 từ",
        suggestion,
        2,
        band_score(n, 50, 100, 20, 2),
    )


def check_sapo_bold(ctx: AuditContext) -> Check:
    name, expected = "In đậm từ khóa/brand", "Có in đậm"
    targets = [t for t in (ctx.keyword, ctx.brand_name) if t]
    if not targets:
        return unscored("6.2", name, expected, 1)

    found = any(contains(text, t) for text in ctx.page.bold_texts for t in targets)
    return make_check(
        "6.2", name, found, _yes(found), expected,
        "In đậm từ khóa hoặc tên thương hiệu trong sapo", 1,
    )


# ─── Module: Conclusion ───────────────────────────────────────────────


def check_conclusion_heading(ctx: AuditContext) -> Check:
    found = any(
        contains(h, ch) for h in ctx.page.headings(2, 3) for ch in CONCLUSION_HEADINGS
    )
    return make_check(
        "7.1", "Có heading kết luận",
        found, _yes(found),
        "Có: Tóm lại, Kết luận...",
        'Thêm heading "Tóm lại" hoặc "Kết luận"',
        1,
    )


def check_closing_cta(ctx: AuditContext) -> Check:
    closing = last_words(ctx.page.body_text, 200)
    last_paragraph = ctx.page.paragraphs[-1] if ctx.page.paragraphs else ""
    found = any(contains(closing, w) or contains(last_paragraph, w) for w in CTA_WORDS)
    return make_check(
        "7.2", "Có CTA cuối bài",
        found, _yes(found),
        "Có CTA: Xem ngay, Liên hệ...",
        "Thêm lời kêu gọi hành động ở cuối bài",
        2,
    )


# ─── Module: Images ───────────────────────────────────────────────────


_BAD_FILENAME_RE = re.compile(
    r"^(?:(?:img|dsc|dscn|image|photo|pic|picture|screenshot)[_-]?\d*|\d+)(?:\.[a-z0-9]+)?$",
    re.IGNORECASE,
)


def check_image_count(ctx: AuditContext) -> Check:
    count = len(ctx.page.images)
    required = max(1, ctx.page.word_count // 500)
    return make_check(
        "8.1", "Số lượng ≥1 ảnh/500 từ",
        count >= required,
        count,
        f"≥{required} ảnh",
        f"Thêm {required - count} hình ảnh",
        2,
        linear_score(count, 0, required, 2),
    )


def check_image_alt(ctx: AuditContext) -> Check:
    name, expected = "100% ảnh có alt ≥10 ký tự", "100%"
    images = ctx.page.images
    if not images:
        return neutral("8.2", name, expected, 2)

    missing = sum(1 for img in images if len(img.alt) < 10)
    coverage = (len(images) - missing) / len(images) * 100
    return make_check(
        "8.2", name,
        missing == 0,
        _pct(coverage),
        expected,
        f"Thêm alt text mô tả (≥10 ký tự) cho {missing} ảnh",
        2,
        linear_score(coverage, 50, 100, 2),
    )


def check_image_alt_keyword(ctx: AuditContext) -> Check:
    name, expected = "≥1 ảnh có từ khóa trong alt", "≥1 ảnh"
    if not ctx.keyword:
        return unscored("8.3", name, expected, 2)

    count = sum(1 for img in ctx.page.images if contains(img.alt, ctx.keyword))
    return make_check(
        "8.3", name,
        count >= 1,
        count,
        expected,
        "Thêm từ khóa vào alt text của ít nhất 1 ảnh",
        2,
    )


def check_image_captions(ctx: AuditContext) -> Check:
    name, expected = "≥50% ảnh có caption", "≥50%"
    images = ctx.page.images
    if not images:
        return neutral("8.4", name, expected, 1)

    coverage = sum(1 for img in images if img.caption) / len(images) * 100
    return make_check(
        "8.4", name,
        coverage >= 50,
        _pct(coverage),
        expected,
        "Thêm caption (figcaption) cho các hình ảnh",
        1,
    )


def check_lazy_loading(ctx: AuditContext) -> Check:
    name, expected = "Lazy loading ≥80% ảnh", "≥80%"
    images = ctx.page.images
    if not images:
        return neutral("8.5", name, expected, 1)

    eager = sum(1 for img in images if not img.has_lazy_loading)
    coverage = (len(images) - eager) / len(images) * 100
    return make_check(
        "8.5", name,
        coverage >= 80,
        _pct(coverage),
        expected,
        f'Thêm loading="lazy" cho {eager} ảnh',
        1,
    )


def check_image_filenames(ctx: AuditContext) -> Check:
    name, expected = "Tên file có ý nghĩa", "Không có IMG_xxx, DSC_xxx"
    images = ctx.page.images
    if not images:
        return neutral("8.6", name, expected, 1)

    bad = [
        img for img in images
        if _BAD_FILENAME_RE.match(img.src.split("?")[0].rstrip("/").rsplit("/", 1)[-1])
    ]
    return make_check(
        "8.6", name,
        not bad,
        "Tất cả tốt" if not bad else f"{len(bad)} ảnh tên xấu",
        expected,
        f"Đổi tên {len(bad)} file ảnh thành tên mô tả nội dung",
        1,
    )


# ─── Module: Internal Links ───────────────────────────────────────────


def _is_bad_anchor(text: str) -> bool:
    folded = fold(text)
    for bad in BAD_ANCHOR_TEXTS:
        bad_folded = fold(bad)
        if folded == bad_folded or (" " in bad_folded and bad_folded in folded):
            return True
    return False


def check_early_internal_link(ctx: AuditContext) -> Check:
    early = [l for l in ctx.page.internal_links if l.position <= FIRST_LINK_WITHIN_WORDS]
    return make_check(
        "9.1", f"Có link trong {FIRST_LINK_WITHIN_WORDS} từ đầu",
        bool(early),
        _yes(bool(early)),
        "Có ≥1 link",
        "Thêm internal link vào phần đầu bài viết",
        1,
    )


def check_anchor_diversity(ctx: AuditContext) -> Check:
    name, expected = "Anchor text đa dạng ≥70%", '≥70%, không "click đây"'
    links = ctx.page.internal_links
    if not links:
        return neutral("9.2", name, expected, 2)

    anchors = [fold(l.text) for l in links]
    diversity = len(set(anchors)) / len(anchors) * 100
    bad = [l for l in links if _is_bad_anchor(l.text)]
    if bad:
        suggestion = f'Thay {len(bad)} anchor text kiểu "click đây" bằng mô tả có ý nghĩa'
    else:
        suggestion = "Đa dạng hóa anchor text của internal links"
    return make_check(
        "9.2", name,
        diversity >= 70 and not bad,
        f"{_pct(diversity)} đa dạng",
        expected,
        suggestion,
        2,
        half(2, diversity >= 50),
    )


# ─── Module: External Links ───────────────────────────────────────────


def _web_links(links: List[LinkData]) -> List[LinkData]:
    return [l for l in links if re.match(r"^(https?:)?//", l.href, re.IGNORECASE)]


def _link_host(href: str) -> str:
    try:
        return (urlparse(href if "//" in href else "//" + href).hostname or "").lower()
    except ValueError:
        return ""


def _is_trusted(link: LinkData) -> bool:
    host = _link_host(link.href)
    return any(
        host.endswith(domain) if domain.startswith(".") else (host == domain or host.endswith("." + domain))
        for domain in TRUSTED_DOMAINS
    )


def check_has_external_link(ctx: AuditContext) -> Check:
    count = len(_web_links(ctx.page.external_links))
    return make_check(
        "10.1", "Có ≥1 external link",
        count >= 1,
        count,
        "≥1 link",
        "Thêm external link đến nguồn uy tín",
        1,
    )


def check_trusted_sources(ctx: AuditContext) -> Check:
    count = sum(1 for l in _web_links(ctx.page.external_links) if _is_trusted(l))
    return make_check(
        "10.2", "Nguồn uy tín: .gov, .edu, báo lớn",
        count >= 1,
        count,
        "≥1 nguồn uy tín",
        "Thêm link đến nguồn uy tín như Wikipedia, báo lớn, .gov, .edu",
        2,
    )


# ─── Module: E-E-A-T ──────────────────────────────────────────────────


def check_author(ctx: AuditContext) -> Check:
    author = ctx.page.author
    return make_check(
        "11.1", "Có tên tác giả", bool(author), author or "Không có",
        "Có tên tác giả", "Thêm tên tác giả vào bài viết", 2,
    )


def check_author_link(ctx: AuditContext) -> Check:
    link = ctx.page.author_link
    return make_check(
        "11.2", "Có link tác giả", bool(link), _yes(bool(link)),
        "Có link profile tác giả", "Thêm link đến trang tác giả", 1,
    )


def check_publish_date(ctx: AuditContext) -> Check:
    value = ctx.page.publish_date
    return make_check(
        "11.3", "Có ngày xuất bản", bool(value), value or "Không có",
        "Có ngày xuất bản", "Thêm ngày xuất bản bài viết", 2,
    )


def check_modified_date(ctx: AuditContext) -> Check:
    value = ctx.page.modified_date
    return make_check(
        "11.4", "Có ngày cập nhật", bool(value), value or "Không có",
        "Có ngày cập nhật", "Thêm ngày cập nhật gần nhất", 1,
    )


# ─── Module: Schema Markup ────────────────────────────────────────────


def _find_schema(schemas: List[SchemaData], wanted) -> Optional[Tuple[SchemaData, str]]:
    for schema in schemas:
        for t in schema.types:
            if t in wanted:
                return schema, t
    return None


def check_article_schema(ctx: AuditContext) -> Check:
    match = _find_schema(ctx.page.schemas, ARTICLE_SCHEMA_TYPES)
    return make_check(
        "12.1", "Có Article Schema",
        match is not None,
        match[1] if match else "Không có",
        "Có Article/BlogPosting",
        "Thêm Article Schema JSON-LD",
        2,
    )


def check_article_schema_fields(ctx: AuditContext) -> Check:
    match = _find_schema(ctx.page.schemas, ARTICLE_SCHEMA_TYPES)
    data = match[0].data if match else {}
    present = [f for f in ARTICLE_REQUIRED_FIELDS if data.get(f)]
    missing = [f for f in ARTICLE_REQUIRED_FIELDS if f not in present]
    return make_check(
        "12.2", "Article đủ fields quan trọng",
        not missing,
        f"{len(present)}/{len(ARTICLE_REQUIRED_FIELDS)}",
        ", ".join(ARTICLE_REQUIRED_FIELDS),
        f"Thêm fields: {', '.join(missing)}",
        2,
        half(2, len(present) >= 2),
    )


def check_breadcrumb_schema(ctx: AuditContext) -> Check:
    found = _find_schema(ctx.page.schemas, ("BreadcrumbList",)) is not None
    return make_check(
        "12.3", "Có BreadcrumbList Schema", found, _yes(found),
        "Có BreadcrumbList", "Thêm BreadcrumbList Schema", 1,
    )


def check_type_schema(ctx: AuditContext) -> Check:
    article_type = ctx.page.article_type
    expected_types = TYPE_SCHEMA_MAP[article_type]
    match = _find_schema(ctx.page.schemas, expected_types)
    return make_check(
        "12.4", f"Schema theo loại bài ({article_type.value})",
        match is not None,
        match[1] if match else "Không có",
        " hoặc ".join(expected_types),
        f"Thêm {expected_types[0]} Schema",
        2,
    )


def check_type_schema_fields(ctx: AuditContext) -> Check:
    expected_types = TYPE_SCHEMA_MAP[ctx.page.article_type]
    name = "Schema theo loại bài đủ fields bắt buộc"
    match = _find_schema(ctx.page.schemas, expected_types)
    if match is None:
        return make_check(
            "12.5", name, False, "Không có schema phù hợp",
            "Đủ fields bắt buộc",
            f"Thêm {expected_types[0]} Schema với đủ fields bắt buộc",
            2,
        )

    schema, schema_type = match
    required = SCHEMA_REQUIRED_FIELDS.get(schema_type, ("name",))
    missing = [f for f in required if not schema.data.get(f)]
    present = len(required) - len(missing)
    return make_check(
        "12.5", name,
        not missing,
        f"{present}/{len(required)}",
        ", ".join(required),
        f"Thêm fields cho {schema_type}: {', '.join(missing)}",
        2,
        linear_score(present, 0, len(required), 2),
    )


def check_valid_json_ld(ctx: AuditContext) -> Check:
    count = len(ctx.page.schemas)
    return make_check(
        "12.6", "Schema hợp lệ",
        count > 0,
        f"{count} schema" if count else "Không có schema",
        "≥1 schema hợp lệ",
        "Thêm schema JSON-LD hợp lệ",
        1,
    )


# ─── Module: Brand ────────────────────────────────────────────────────


def check_brand_mentioned(ctx: AuditContext) -> Check:
    name, expected = "Brand xuất hiện trong bài", "≥1 lần"
    if not ctx.brand_name:
        return neutral("13.1", name, expected, 2)

    count = count_occurrences(ctx.page.body_text, ctx.brand_name)
    return make_check(
        "13.1", name, count >= 1, count, expected,
        f'Thêm tên thương hiệu "{ctx.brand_name}" vào bài viết', 2,
    )


def check_brand_spelling(ctx: AuditContext) -> Check:
    name, expected = "Viết đúng chính tả brand", f'"{ctx.brand_name}"'
    if not ctx.brand_name:
        return neutral("13.2", name, expected, 1)

    body = ctx.page.body_text
    exact = ctx.brand_name.lower() in body.lower()
    mentioned = count_occurrences(body, ctx.brand_name) > 0
    return make_check(
        "13.2", name,
        exact or not mentioned,
        "Đúng" if exact else ("Sai chính tả" if mentioned else "Không tìm thấy"),
        expected,
        f'Đảm bảo viết đúng "{ctx.brand_name}" (đủ dấu)',
        1,
    )


# ─── Module: Local SEO ────────────────────────────────────────────────


def _local_check(ctx: AuditContext, check_id: str, name: str, expected: str,
                 found: bool, suggestion: str, max_score: int) -> Check:
    if ctx.page.article_type not in LOCAL_TYPES:
        return neutral(check_id, name, "N/A (không phải local content)", max_score)
    return make_check(check_id, name, found, _yes(found), expected, suggestion, max_score)


def check_geo_keywords(ctx: AuditContext) -> Check:
    body = ctx.page.body_text.lower()
    found = any(re.search(r"(?<!\w)" + re.escape(kw) + r"(?!\w)", body) for kw in GEO_KEYWORDS)
    return _local_check(
        ctx, "14.1", "Có geo keywords: tại, ở, quận...", "Có từ khóa địa lý",
        found, "Thêm từ khóa địa lý: tại, ở, quận, đường...", 2,
    )


def check_address(ctx: AuditContext) -> Check:
    found = bool(ADDRESS_RE.search(ctx.page.body_text))
    return _local_check(
        ctx, "14.2", "Có địa chỉ cụ thể", "Có địa chỉ số",
        found, "Thêm địa chỉ cụ thể với số nhà, đường", 2,
    )


def check_phone(ctx: AuditContext) -> Check:
    found = bool(PHONE_RE.search(ctx.page.body_text))
    return _local_check(
        ctx, "14.3", "Có số điện thoại", "Có số điện thoại",
        found, "Thêm số điện thoại liên hệ", 1,
    )


def check_map_link(ctx: AuditContext) -> Check:
    links = ctx.page.internal_links + ctx.page.external_links
    found = any(marker in l.href for l in links for marker in MAP_LINK_MARKERS)
    return _local_check(
        ctx, "14.4", "Có Google Maps link", "Có link Maps",
        found, "Thêm link Google Maps đến địa điểm", 1,
    )


# ─── Module: Technical Onpage ─────────────────────────────────────────


def _same_document(url: str, other: str) -> bool:
    """Host (case/www-insensitive) and path (trailing slash) equality."""
    try:
        a, b = urlparse(url), urlparse(urljoin(url, other))
        hosts = [(p.hostname or "").lower() for p in (a, b)]
    except ValueError:
        return False
    hosts = [h[4:] if h.startswith("www.") else h for h in hosts]
    return hosts[0] == hosts[1] and a.path.rstrip("/") == b.path.rstrip("/")


def check_title_length(ctx: AuditContext) -> Check:
    low, high = TITLE_LENGTH
    length = len(ctx.page.title)
    if length == 0:
        suggestion = "Thêm thẻ title cho trang"
    elif length < low:
        suggestion = f"Thêm {low - length} ký tự vào title"
    else:
        suggestion = f"Giảm {length - high} ký tự khỏi title"
    return make_check(
        "15.1", f"Độ dài Title {low}-{high} ký tự",
        low <= length <= high,
        length,
        f"{low}-{high} ký tự",
        suggestion,
        2,
        band_score(length, low, high, TITLE_TOLERANCE, 2),
    )


def check_meta_exists(ctx: AuditContext) -> Check:
    exists = bool(ctx.page.meta_description)
    return make_check(
        "15.2", "Tồn tại Meta Description", exists, _yes(exists),
        "Có meta description", "Thêm meta description cho trang", 1,
    )


def check_meta_length(ctx: AuditContext) -> Check:
    low, high = META_LENGTH
    length = len(ctx.page.meta_description)
    if length < low:
        suggestion = f"Thêm {low - length} ký tự vào meta description"
    else:
        suggestion = f"Giảm {length - high} ký tự khỏi meta description"
    return make_check(
        "15.3", f"Độ dài Meta Description {low}-{high} ký tự",
        low <= length <= high,
        length,
        f"{low}-{high} ký tự",
        suggestion,
        2,
        band_score(length, low, high, META_TOLERANCE, 2),
    )


def check_meta_keyword(ctx: AuditContext) -> Check:
    name, expected = "Meta Description chứa từ khóa chính", "Có từ khóa chính"
    if not ctx.keyword:
        return unscored("15.4", name, expected, 2)

    found = contains(ctx.page.meta_description, ctx.keyword)
    return make_check(
        "15.4", name, found, _yes(found), expected,
        f'Thêm "{ctx.keyword}" vào meta description', 2,
    )


def check_canonical_present(ctx: AuditContext) -> Check:
    canonical = ctx.page.canonical
    return make_check(
        "15.5", "Có Canonical URL", bool(canonical), canonical or "Không có",
        "Có canonical", "Thêm thẻ canonical để tránh duplicate content", 2,
    )


def check_canonical_self(ctx: AuditContext) -> Check:
    name, expected = "Canonical trỏ về chính trang", "Canonical = URL trang"
    canonical = ctx.page.canonical
    if not canonical:
        return make_check(
            "15.6", name, False, "Không có", expected,
            "Thêm canonical trỏ về chính URL của trang", 1,
        )

    consistent = _same_document(ctx.page.url, canonical)
    return make_check(
        "15.6", name, consistent, canonical, expected,
        f"Canonical đang trỏ sang {canonical}, kiểm tra lại nếu đây không phải bản gốc",
        1,
    )


def check_open_graph(ctx: AuditContext) -> Check:
    page = ctx.page
    tags = {"og:title": page.og_title, "og:description": page.og_description,
            "og:image": page.og_image}
    missing = [k for k, v in tags.items() if not v]
    present = len(tags) - len(missing)
    return make_check(
        "15.7", "Open Graph đầy đủ",
        not missing,
        f"{present}/{len(tags)}",
        ", ".join(tags),
        f"Thêm: {', '.join(missing)}",
        2,
        linear_score(present, 0, len(tags), 2),
    )


def check_twitter_card(ctx: AuditContext) -> Check:
    page = ctx.page
    tags = {"twitter:card": page.twitter_card, "twitter:title": page.twitter_title,
            "twitter:description": page.twitter_description}
    missing = [k for k, v in tags.items() if not v]
    return make_check(
        "15.8", "Twitter Cards đầy đủ",
        not missing,
        page.twitter_card or "Không có",
        ", ".join(tags),
        f"Thêm: {', '.join(missing)}",
        1,
    )


def check_internal_link_floor(ctx: AuditContext) -> Check:
    count = len(ctx.page.internal_links)
    required = max(3, math.floor(ctx.page.word_count / 1000 * INTERNAL_LINKS_PER_1000_WORDS))
    return make_check(
        "15.9", "Số lượng ≥3 internal links/1000 từ",
        count >= required,
        count,
        f"≥{required} links",
        f"Thêm {required - count} internal links",
        2,
        linear_score(count, 0, required, 2),
    )


def check_external_target(ctx: AuditContext) -> Check:
    name, expected = 'External links có target="_blank"', "100%"
    links = _web_links(ctx.page.external_links)
    if not links:
        return neutral("15.10", name, expected, 1)

    missing = sum(1 for l in links if (l.target or "").lower() != "_blank")
    return make_check(
        "15.10", name,
        missing == 0,
        f"{len(links) - missing}/{len(links)}",
        expected,
        f'Thêm target="_blank" cho {missing} external links',
        1,
    )


def check_external_nofollow(ctx: AuditContext) -> Check:
    name, expected = "Link ngoài không uy tín có nofollow", 'rel="nofollow"'
    untrusted = [l for l in _web_links(ctx.page.external_links) if not _is_trusted(l)]
    if not untrusted:
        return neutral("15.11", name, expected, 1)

    missing = sum(
        1 for l in untrusted
        if not any(r in (l.rel or "").lower().split() for r in NOFOLLOW_RELS)
    )
    return make_check(
        "15.11", name,
        missing == 0,
        f"{len(untrusted) - missing}/{len(untrusted)}",
        expected,
        f'Thêm rel="nofollow" cho {missing} link ngoài không uy tín',
        1,
    )


# ─── Module: AI Optimization ──────────────────────────────────────────


def _question_headings(page: PageData) -> List[str]:
    return [
        h for h in page.headings(2, 3)
        if "?" in h or any(contains(h, p) for p in PAA_PATTERNS)
    ]


def check_definition_box(ctx: AuditContext) -> Check:
    name, expected = "Definition box trong 60 từ đầu", '"[Keyword] là..."'
    if not ctx.keyword:
        return unscored("16.1", name, expected, 2)

    lead = fold(first_words(ctx.page.body_text, 60))
    pattern = re.escape(fold(ctx.keyword)) + r"\s+(la|duoc dinh nghia|co nghia)\b"
    found = re.search(pattern, lead) is not None
    return make_check(
        "16.1", name, found, _yes(found), expected,
        f'Thêm định nghĩa "{ctx.keyword} là..." trong 60 từ đầu', 2,
    )


def check_faq_section(ctx: AuditContext) -> Check:
    count = len(_question_headings(ctx.page))
    return make_check(
        "16.2", "FAQ section ≥3 câu hỏi H2/H3",
        count >= 3,
        count,
        "≥3 câu hỏi",
        f"Thêm {3 - count} câu hỏi thường gặp dạng H2/H3",
        2,
        half(2, count >= 1),
    )


def check_citations(ctx: AuditContext) -> Check:
    found = CITATION_RE.search(ctx.page.body_text) is not None
    return make_check(
        "16.3", "Số liệu có trích nguồn", found, _yes(found),
        "Có trích nguồn", "Thêm nguồn cho các số liệu thống kê", 1,
    )


def check_ordered_list(ctx: AuditContext) -> Check:
    found = any(l.type == "ol" for l in ctx.page.lists)
    return make_check(
        "16.4", "Có danh sách đánh số", found, _yes(found),
        "Có ordered list", "Thêm danh sách đánh số cho các bước/tips", 1,
    )


def check_paa_headings(ctx: AuditContext) -> Check:
    count = sum(
        1 for h in ctx.page.headings(2, 3) if any(contains(h, p) for p in PAA_PATTERNS)
    )
    return make_check(
        "16.5", "Câu hỏi PAA-ready",
        count >= 1,
        count,
        "≥1 câu hỏi",
        'Thêm heading dạng: "Làm sao...", "Tại sao...", "...là gì?"',
        1,
    )


# ─── Module: Freshness ────────────────────────────────────────────────


_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_YEAR_RE = re.compile(r"\b(19|20)\d{2}\b")


def _iso_date(value: Optional[str]) -> Optional[date]:
    m = _ISO_DATE_RE.search(value or "")
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def _year_of(value: Optional[str]) -> Optional[int]:
    parsed = _iso_date(value)
    if parsed:
        return parsed.year
    m = _YEAR_RE.search(value or "")
    return int(m.group(0)) if m else None


def check_machine_publish_date(ctx: AuditContext) -> Check:
    value = ctx.page.publish_date
    parsed = _iso_date(value)
    if not value:
        suggestion = "Thêm datePublished (ISO 8601) cho bài viết"
    else:
        suggestion = "Dùng định dạng ISO 8601 (YYYY-MM-DD) cho ngày xuất bản"
    return make_check(
        "17.1", "Ngày xuất bản dạng máy đọc được",
        parsed is not None,
        value or "Không có",
        "datePublished ISO 8601",
        suggestion,
        2,
        half(2, bool(value)),
    )


def check_modified_after_publish(ctx: AuditContext) -> Check:
    published = _iso_date(ctx.page.publish_date)
    modified = _iso_date(ctx.page.modified_date)
    if modified is None:
        ok, suggestion = False, "Thêm dateModified (ISO 8601) khi cập nhật bài viết"
    elif published is not None and modified < published:
        ok, suggestion = False, "Ngày cập nhật đang sớm hơn ngày xuất bản, sửa lại dateModified"
    else:
        ok, suggestion = True, ""
    return make_check(
        "17.2", "Ngày cập nhật hợp lệ",
        ok,
        ctx.page.modified_date or "Không có",
        "dateModified ≥ datePublished",
        suggestion,
        1,
    )


def check_year_in_headline(ctx: AuditContext) -> Check:
    page = ctx.page
    years = [y for y in (_year_of(page.publish_date), _year_of(page.modified_date)) if y]
    if not years:
        return make_check(
            "17.3", "Có năm trong title/heading", False, "Không xác định",
            "Năm của lần cập nhật gần nhất",
            "Thêm ngày xuất bản/cập nhật để xác định năm của bài viết", 1,
        )

    year = max(years)
    text = " ".join([page.title] + page.h1 + page.h2)
    found = str(year) in text
    return make_check(
        "17.3", f"Có năm {year} trong title/heading",
        found, _yes(found),
        f"Có {year}",
        f"Thêm năm {year} vào title hoặc heading",
        1,
    )


# ─── Module: Featured Snippet ─────────────────────────────────────────


def check_snippet_paragraph(ctx: AuditContext) -> Check:
    low, high = SNIPPET_PARAGRAPH_WORDS
    lengths = [word_count(p) for p in ctx.page.paragraphs]
    count = sum(1 for n in lengths if low <= n <= high)
    return make_check(
        "18.1", f"Có đoạn {low}-{high} từ (Featured Snippet)",
        count >= 1,
        count,
        "≥1 đoạn",
        f"Thêm 1 đoạn {low}-{high} từ trả lời trực tiếp câu hỏi chính",
        2,
        half(2, any(30 <= n <= 80 for n in lengths)),
    )


def check_list_heading(ctx: AuditContext) -> Check:
    count = sum(
        1 for h in ctx.page.headings(2, 3)
        if any(p.search(h) for p in LIST_HEADING_PATTERNS)
    )
    return make_check(
        "18.2", "Có list heading: Top X, Các bước...",
        count >= 1,
        count,
        "≥1 heading",
        'Thêm heading như "Top 10...", "Các bước...", "Những điều..."',
        2,
    )


def check_table_of_contents(ctx: AuditContext) -> Check:
    name = f"Table of Contents (bài >{TOC_MIN_WORDS} từ)"
    page = ctx.page
    if page.word_count <= TOC_MIN_WORDS:
        return neutral("18.3", name, "Không yêu cầu", 1)

    heads = [fold(h)[:20] for h in page.headings(2, 3) if h]
    has_toc = any(
        len(l.items) >= 3
        and sum(1 for item in l.items if any(h and h in fold(item) for h in heads)) >= 3
        for l in page.lists
    )
    return make_check(
        "18.3", name, has_toc, _yes(has_toc), "Có TOC",
        "Thêm Table of Contents cho bài viết dài", 1,
    )


# ─── Module Registry ──────────────────────────────────────────────────


CheckFn = Callable[[AuditContext], Check]

MODULES: List[Tuple[str, str, List[CheckFn]]] = [
    ("title", "Title Tag", [
        check_title_keyword_position,
        check_title_h1_match,
        check_title_power_words,
        check_title_keyword_repetition,
    ]),
    ("meta-description", "Meta Description", [
        check_meta_cta,
        check_meta_not_title,
    ]),
    ("url", "URL/Slug", [
        check_slug_length,
        check_slug_keyword,
        check_slug_stop_words,
    ]),
    ("heading-structure", "Heading Structure", [
        check_single_h1,
        check_h2_count,
        check_h2_keyword,
    ]),
    ("content", "Nội dung", [
        check_word_count,
        check_keyword_in_title,
        check_keyword_in_h1,
        check_keyword_in_first_paragraph,
        check_keyword_density,
        check_keyword_in_closing,
        check_secondary_coverage,
        check_heading_hierarchy,
        check_paragraph_length,
        check_lists,
        check_numbers,
        check_readability,
    ]),
    ("sapo", "Sapo/Mở bài", [
        check_sapo_length,
        check_sapo_bold,
    ]),
    ("conclusion", "Kết bài", [
        check_conclusion_heading,
        check_closing_cta,
    ]),
    ("images", "Hình ảnh", [
        check_image_count,
        check_image_alt,
        check_image_alt_keyword,
        check_image_captions,
        check_lazy_loading,
        check_image_filenames,
    ]),
    ("internal-links", "Link nội bộ", [
        check_early_internal_link,
        check_anchor_diversity,
    ]),
    ("external-links", "Link ngoài", [
        check_has_external_link,
        check_trusted_sources,
    ]),
    ("eeat", "E-E-A-T", [
        check_author,
        check_author_link,
        check_publish_date,
        check_modified_date,
    ]),
    ("schema", "Schema Markup", [
        check_article_schema,
        check_article_schema_fields,
        check_breadcrumb_schema,
        check_type_schema,
        check_type_schema_fields,
        check_valid_json_ld,
    ]),
    ("brand", "Brand", [
        check_brand_mentioned,
        check_brand_spelling,
    ]),
    ("local-seo", "Local SEO", [
        check_geo_keywords,
        check_address,
        check_phone,
        check_map_link,
    ]),
    ("technical", "Technical Onpage", [
        check_title_length,
        check_meta_exists,
        check_meta_length,
        check_meta_keyword,
        check_canonical_present,
        check_canonical_self,
        check_open_graph,
        check_twitter_card,
        check_internal_link_floor,
        check_external_target,
        check_external_nofollow,
    ]),
    ("ai-optimization", "AI Optimization", [
        check_definition_box,
        check_faq_section,
        check_citations,
        check_ordered_list,
        check_paa_headings,
    ]),
    ("freshness", "Freshness", [
        check_machine_publish_date,
        check_modified_after_publish,
        check_year_in_headline,
    ]),
    ("featured-snippet", "Featured Snippet", [
        check_snippet_paragraph,
        check_list_heading,
        check_table_of_contents,
    ]),
]


def run_module(module_id: str, ctx: AuditContext) -> Module:
    """Run a single registered module (useful for isolated testing)."""
    for mid, name, checks in MODULES:
        if mid == module_id:
            return build_module(mid, name, [check(ctx) for check in checks])
    raise KeyError(module_id)


def evaluate(page: PageData, keywords: List[str], brand_name: str = "") -> List[Module]:
    """
    Run every registered module against one page.

    Args:
        page: The extracted page snapshot.
        keywords: Target keywords; the first non-blank one is primary.
        brand_name: Brand to look for; empty disables brand checks.

    Returns:
        Modules in registry order.
    """
    ctx = AuditContext(page, keywords, brand_name)
    return [
        build_module(mid, name, [check(ctx) for check in checks])
        for mid, name, checks in MODULES
    ]
