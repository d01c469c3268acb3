"""
HTML extractor: raw HTML + source URL -> PageData.

Pure markup parsing with lxml; no scripts are executed and no subresources
are fetched. Missing or malformed structures degrade to empty values, so
extract() never raises for a page that was fetched successfully.
"""

import re
import json
import logging
from typing import Optional, List, Dict, Any, Callable, Tuple
from urllib.parse import urlparse, urljoin

from lxml import etree
from lxml import html as lxml_html
from lxml.html import HtmlElement

from .constants import (
    ARTICLE_TYPE_PATTERNS,
    SCHEMA_TYPE_HINTS,
    PRICE_MARKER_RE,
    RATING_MARKER_RE,
    VIDEO_MARKER_RE,
)
from .models import (
    ArticleType,
    ImageData,
    LinkData,
    ListData,
    PageData,
    SchemaData,
)
from .text import fold, normalize_ws, to_slug

logger = logging.getLogger(__name__)


CONTENT_AREA_XPATH = (
    "//article | //main"
    " | //*[contains(concat(' ', normalize-space(@class), ' '), ' content ')]"
    " | //*[contains(concat(' ', normalize-space(@class), ' '), ' entry-content ')]"
    " | //*[contains(concat(' ', normalize-space(@class), ' '), ' post-content ')]"
)

BOILERPLATE_TAGS = frozenset({
    "head", "nav", "header", "footer", "aside", "script", "style",
    "noscript", "iframe", "template",
})

BOILERPLATE_CLASSES = frozenset({
    "sidebar", "navigation", "menu", "nav", "header", "footer", "comments",
    "comment", "advertisement", "ads", "social-share", "related-posts",
    "widget", "breadcrumb",
})

LAZY_CLASSES = frozenset({"lazyload", "lazy"})

BOLD_TEXT_LIMIT = 10

_URL_PROPS = {"a": "href", "link": "href", "img": "src", "audio": "src",
              "video": "src", "source": "src", "iframe": "src", "time": "datetime"}


def _parse_html(raw_html: str) -> Optional[HtmlElement]:
    """Parse HTML string into an lxml document, returning None on failure."""
    if not raw_html or not raw_html.strip():
        return None
    try:
        return lxml_html.document_fromstring(
            raw_html, parser=lxml_html.HTMLParser(huge_tree=True)
        )
    except ValueError:
        # str input carrying an XML encoding declaration
        parser = lxml_html.HTMLParser(encoding="utf-8", huge_tree=True)
        try:
            return lxml_html.document_fromstring(raw_html.encode("utf-8"), parser=parser)
        except (etree.ParserError, ValueError):
            return None
    except etree.ParserError:
        return None


# ─── Main Extraction ──────────────────────────────────────────────────


def extract(html: str, url: str) -> PageData:
    """
    Parse raw HTML into a PageData snapshot.

    Args:
        html: The fetched response body.
        url: The absolute URL the body was fetched from.

    Returns:
        PageData with every field populated, empty where the markup
        had nothing to offer.
    """
    tree = _parse_html(html)
    if tree is None:
        logger.debug(f"Nothing to parse for {url}")
        return PageData(url=url, html=html or "")

    headings = {level: _texts(tree, f"//h{level}") for level in range(1, 7)}

    content_root = _content_area(tree)
    walker = _BodyWalker(content_root, url)
    walker.walk(tree)
    body_text = " ".join(walker.tokens)

    images = _images(tree)
    schemas = _json_ld(tree) + _microdata(tree)

    article_type = detect_article_type(
        url=url,
        body_text=body_text,
        headings=headings[1] + headings[2],
        schemas=schemas,
        html=html,
    )

    return PageData(
        url=url,
        html=html,
        title=_first_text(tree, "//title") or "",
        meta_description=(
            _meta(tree, "name", "description")
            or _meta(tree, "property", "og:description")
            or ""
        ),
        h1=headings[1],
        h2=headings[2],
        h3=headings[3],
        h4=headings[4],
        h5=headings[5],
        h6=headings[6],
        paragraphs=[p for p in _texts(tree, "//p") if p],
        bold_texts=[
            normalize_ws(el.text_content())
            for el in tree.xpath("//body//strong | //body//b")[:BOLD_TEXT_LIMIT]
        ],
        body_text=body_text,
        word_count=len(walker.tokens),
        images=images,
        internal_links=walker.internal_links,
        external_links=walker.external_links,
        lists=_lists(tree),
        tables=len(tree.xpath("//table")),
        canonical=_first_attr(tree, '//link[@rel="canonical"]/@href'),
        og_title=_meta(tree, "property", "og:title"),
        og_description=_meta(tree, "property", "og:description"),
        og_image=_meta(tree, "property", "og:image"),
        twitter_card=_twitter(tree, "twitter:card"),
        twitter_title=_twitter(tree, "twitter:title"),
        twitter_description=_twitter(tree, "twitter:description"),
        author=_author(tree, schemas),
        author_link=(
            _first_attr(tree, '//*[@rel="author"]/@href')
            or _first_attr(tree, '//*[contains(@class, "author")]//a/@href')
        ),
        publish_date=(
            _first_attr(tree, "//time[@datetime]/@datetime")
            or _meta(tree, "property", "article:published_time")
            or _first_text(tree, '//*[contains(@class, "publish")]')
            or _schema_value(schemas, "datePublished")
        ),
        modified_date=(
            _meta(tree, "property", "article:modified_time")
            or _first_text(
                tree, '//*[contains(@class, "update") or contains(@class, "modified")]'
            )
            or _schema_value(schemas, "dateModified")
        ),
        has_lazy_loading=any(img.has_lazy_loading for img in images),
        schemas=schemas,
        article_type=article_type,
    )


# ─── Body Text & Links ────────────────────────────────────────────────


class _BodyWalker:
    """
    Single document-order walk that collects body words from the content
    area and classifies every anchor, recording how many body words precede
    it.
    """

    def __init__(self, content_root: HtmlElement, page_url: str):
        self.content_root = content_root
        self.page_url = page_url
        self.page_host = _host(page_url)
        self.tokens: List[str] = []
        self.internal_links: List[LinkData] = []
        self.external_links: List[LinkData] = []

    def walk(self, root: HtmlElement) -> None:
        # Explicit stack: documents can nest far deeper than the recursion limit.
        # A child's tail is counted in its parent's context, after its subtree.
        stack: List[Tuple[bool, HtmlElement, bool]] = [(False, root, False)]
        while stack:
            is_tail, el, counting = stack.pop()
            if is_tail:
                if counting and el.tail:
                    self.tokens.extend(el.tail.split())
                continue
            if not isinstance(el.tag, str):
                continue  # comment / processing instruction

            if el is self.content_root:
                counting = True
            elif counting and _is_boilerplate(el):
                counting = False

            if el.tag.lower() == "a" and el.get("href") is not None:
                self._add_link(el)

            if counting and el.text:
                self.tokens.extend(el.text.split())
            for child in reversed(el):
                stack.append((True, child, counting))
                stack.append((False, child, counting))

    def _add_link(self, a: HtmlElement) -> None:
        href = (a.get("href") or "").strip()
        if not href or href.startswith("#"):
            return

        link = LinkData(
            href=href,
            text=normalize_ws(a.text_content()),
            target=a.get("target") or None,
            rel=a.get("rel") or None,
            position=len(self.tokens),
        )
        if self._is_internal(href):
            self.internal_links.append(link)
        else:
            self.external_links.append(link)

    def _is_internal(self, href: str) -> bool:
        try:
            absolute = urljoin(self.page_url, href)
        except ValueError:
            return href.startswith("/")
        link_host = _host(absolute)
        return bool(link_host) and link_host == self.page_host


def _content_area(tree: HtmlElement) -> HtmlElement:
    candidates = tree.xpath(CONTENT_AREA_XPATH)
    if candidates:
        return candidates[0]
    body = tree.xpath("//body")
    return body[0] if body else tree


def _is_boilerplate(el: HtmlElement) -> bool:
    if el.tag.lower() in BOILERPLATE_TAGS:
        return True
    classes = (el.get("class") or "").lower().split()
    return any(c in BOILERPLATE_CLASSES for c in classes)


def _host(url: str) -> str:
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


# ─── Images & Lists ───────────────────────────────────────────────────


def _images(tree: HtmlElement) -> List[ImageData]:
    images: List[ImageData] = []
    for img in tree.xpath("//img"):
        src = (img.get("src") or img.get("data-src") or "").strip()
        if not src:
            continue

        caption = None
        for figure in img.iterancestors("figure"):
            caption = _first_text(figure, ".//figcaption")
            break

        classes = set((img.get("class") or "").lower().split())
        is_lazy = bool(
            (img.get("loading") or "").lower() == "lazy"
            or img.get("data-src")
            or img.get("data-lazy")
            or img.get("data-lazy-src")
            or img.get("data-srcset")
            or classes & LAZY_CLASSES
        )
        images.append(
            ImageData(
                src=src,
                alt=(img.get("alt") or "").strip(),
                caption=caption,
                has_lazy_loading=is_lazy,
            )
        )
    return images


def _lists(tree: HtmlElement) -> List[ListData]:
    lists: List[ListData] = []
    for el in tree.xpath("//ul | //ol"):
        items = [normalize_ws(li.text_content()) for li in el.xpath("./li")]
        if items:
            lists.append(ListData(type=el.tag.lower(), items=items))
    return lists


# ─── Structured Data ──────────────────────────────────────────────────


def _json_ld(tree: HtmlElement) -> List[SchemaData]:
    schemas: List[SchemaData] = []
    for script in tree.xpath('//script[@type="application/ld+json"]'):
        raw = (script.text or "").strip()
        if not raw:
            continue
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.debug(f"Skipping malformed JSON-LD block: {type(e).__name__}")
            continue
        _collect_schema_items(data, schemas)
    return schemas


def _collect_schema_items(data: Any, out: List[SchemaData]) -> None:
    """Typed items from top-level lists and @graph arrays, in document order."""
    pending = [data]
    while pending:
        item = pending.pop()
        if isinstance(item, list):
            pending.extend(reversed(item))
            continue
        if not isinstance(item, dict):
            continue
        if item.get("@type"):
            out.append(SchemaData(type=_type_label(item["@type"]), data=item))
        graph = item.get("@graph")
        if isinstance(graph, list):
            pending.extend(reversed(graph))


def _type_label(raw: Any) -> str:
    if isinstance(raw, list):
        return ", ".join(str(t) for t in raw)
    return str(raw)


def _microdata(tree: HtmlElement) -> List[SchemaData]:
    schemas: List[SchemaData] = []
    for item in tree.xpath("//*[@itemscope][@itemtype][not(ancestor::*[@itemscope])]"):
        try:
            data = _microdata_item(item)
        except RecursionError:
            logger.debug("Skipping microdata item nested too deeply")
            continue
        schemas.append(SchemaData(type=data["@type"], data=data))
    return schemas


def _microdata_item(item: HtmlElement) -> Dict[str, Any]:
    itemtype = (item.get("itemtype") or "").split()
    schema_type = itemtype[0].rstrip("/").rsplit("/", 1)[-1] if itemtype else "Thing"
    data: Dict[str, Any] = {"@type": schema_type}

    for prop in item.xpath(".//*[@itemprop]"):
        owner = prop.xpath("ancestor::*[@itemscope][1]")
        if not owner or owner[0] is not item:
            continue
        name = prop.get("itemprop").strip()
        if prop.get("itemscope") is not None:
            value: Any = _microdata_item(prop)
        else:
            value = _microdata_value(prop)
        if name in data:
            existing = data[name]
            data[name] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            data[name] = value
    return data


def _microdata_value(el: HtmlElement) -> str:
    if el.get("content") is not None:
        return el.get("content").strip()
    attr = _URL_PROPS.get(el.tag.lower())
    if attr and el.get(attr):
        return el.get(attr).strip()
    return normalize_ws(el.text_content())


def _schema_value(schemas: List[SchemaData], key: str) -> Optional[str]:
    for schema in schemas:
        value = schema.data.get(key)
        if value:
            return str(value)
    return None


# ─── Metadata ─────────────────────────────────────────────────────────


def _author(tree: HtmlElement, schemas: List[SchemaData]) -> Optional[str]:
    found = (
        _first_text(tree, '//*[@rel="author"]')
        or _first_text(tree, '//*[contains(@class, "author")]//*[contains(@class, "name")]')
        or _first_text(tree, '//*[contains(@class, "author-name")]')
        or _meta(tree, "name", "author")
    )
    if found:
        return found

    for schema in schemas:
        author = schema.data.get("author")
        if isinstance(author, list) and author:
            author = author[0]
        if isinstance(author, dict) and author.get("name"):
            return str(author["name"])
        if isinstance(author, str) and author.strip():
            return author.strip()
    return None


def _meta(tree: HtmlElement, attr: str, key: str) -> Optional[str]:
    return _first_attr(tree, f'//meta[@{attr}="{key}"]/@content')


def _twitter(tree: HtmlElement, key: str) -> Optional[str]:
    return _meta(tree, "name", key) or _meta(tree, "property", key)


def _first_attr(tree: HtmlElement, xpath: str) -> Optional[str]:
    for value in tree.xpath(xpath):
        value = str(value).strip()
        if value:
            return value
    return None


def _first_text(tree: HtmlElement, xpath: str) -> Optional[str]:
    for el in tree.xpath(xpath):
        text = normalize_ws(el.text_content())
        if text:
            return text
    return None


def _texts(tree: HtmlElement, xpath: str) -> List[str]:
    return [normalize_ws(el.text_content()) for el in tree.xpath(xpath)]


# ─── Article Type Detection ───────────────────────────────────────────


class _Signals:
    """Folded views of the page that the classification rules read."""

    def __init__(self, url, body_text, headings, schemas, html):
        try:
            path = urlparse(url).path
        except ValueError:
            path = ""
        self.slug = fold(path)
        self.headings = fold(" ".join(headings))
        self.lead = fold(body_text[:500])
        self.schema_types = {t for s in schemas for t in s.types}
        self.html = html or ""


def _schema_rule(schema_type: str) -> Callable[[_Signals], bool]:
    return lambda s: schema_type in s.schema_types


def _pattern_rule(patterns: List[str]) -> Callable[[_Signals], bool]:
    text_res = [
        re.compile(r"(?<!\w)" + re.escape(fold(p)) + r"(?!\w)") for p in patterns
    ]
    slug_res = [
        re.compile(r"(?<![a-z0-9])" + re.escape(to_slug(p)) + r"(?![a-z0-9])")
        for p in patterns
        if to_slug(p)
    ]

    def matches(s: _Signals) -> bool:
        return (
            any(rx.search(s.slug) for rx in slug_res)
            or any(rx.search(s.headings) or rx.search(s.lead) for rx in text_res)
        )

    return matches


def _marker_rule(pattern: "re.Pattern[str]") -> Callable[[_Signals], bool]:
    return lambda s: bool(pattern.search(s.html))


# Evaluated top to bottom; the first matching rule decides the type.
ARTICLE_TYPE_RULES: List[Tuple[Callable[[_Signals], bool], ArticleType]] = (
    [(_schema_rule(schema_type), article_type) for schema_type, article_type in SCHEMA_TYPE_HINTS]
    + [(_pattern_rule(patterns), article_type) for article_type, patterns in ARTICLE_TYPE_PATTERNS]
    + [
        (_marker_rule(PRICE_MARKER_RE), ArticleType.PRODUCT),
        (_marker_rule(RATING_MARKER_RE), ArticleType.REVIEW),
        (_marker_rule(VIDEO_MARKER_RE), ArticleType.VIDEO),
    ]
)


def detect_article_type(
    url: str,
    body_text: str,
    headings: List[str],
    schemas: List[SchemaData],
    html: str = "",
) -> ArticleType:
    signals = _Signals(url, body_text, headings, schemas, html)
    for predicate, article_type in ARTICLE_TYPE_RULES:
        if predicate(signals):
            return article_type
    return ArticleType.ARTICLE
