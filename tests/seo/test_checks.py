"""
Tests for the rule engine, one module family at a time.

Pages are built directly as PageData so each check can be exercised in
isolation, without going through the extractor.
"""

import time

import pytest

from contentops.seo_audit import checks
from contentops.seo_audit.checks import MODULES, AuditContext, evaluate, run_module
from contentops.seo_audit.parser import extract
from contentops.seo_audit.models import (
    ArticleType,
    CheckStatus,
    ImageData,
    LinkData,
    PageData,
    SchemaData,
)

URL = "https://example.com/bai-viet"


def ctx(keywords=("đà nẵng",), brand="", **fields):
    fields.setdefault("url", URL)
    return AuditContext(PageData(**fields), list(keywords), brand)


# ===========================================================================
# Registry & missing inputs
# ===========================================================================


KEYWORD_CHECK_IDS = {
    "1.1", "1.4", "3.2", "4.3", "5.2", "5.3", "5.4", "5.5", "5.6",
    "6.2", "8.3", "15.4", "16.1",
}


class TestRegistry:
    def test_module_order(self):
        assert [m.id for m in evaluate(PageData(url=URL), ["x"])] == [
            "title", "meta-description", "url", "heading-structure", "content",
            "sapo", "conclusion", "images", "internal-links", "external-links",
            "eeat", "schema", "brand", "local-seo", "technical",
            "ai-optimization", "freshness", "featured-snippet",
        ]

    def test_check_ids_unique(self):
        ids = [c.id for m in evaluate(PageData(url=URL), ["x"]) for c in m.checks]
        assert len(ids) == len(set(ids))

    def test_run_module(self):
        module = run_module("brand", ctx(brand=""))
        assert module.id == "brand"
        assert module.score == module.max_score

    def test_run_unknown_module(self):
        with pytest.raises(KeyError):
            run_module("nope", ctx())

    def test_every_registered_check_is_callable(self):
        for _, _, fns in MODULES:
            for fn in fns:
                assert callable(fn)


class TestMissingInputs:
    def test_no_keywords_marks_keyword_checks_unscored(self):
        modules = evaluate(PageData(url=URL, title="Some title"), [])
        by_id = {c.id: c for m in modules for c in m.checks}
        for check_id in KEYWORD_CHECK_IDS:
            check = by_id[check_id]
            assert check.status == CheckStatus.WARNING, check_id
            assert check.score == 0
            assert check.current == "N/A"

    def test_blank_keywords_are_ignored(self):
        context = ctx(keywords=["  ", "", " Đà Nẵng "])
        assert context.keyword == "Đà Nẵng"
        assert context.secondary_keywords == []

    def test_empty_brand_is_neutral(self):
        module = run_module("brand", ctx(brand=""))
        assert all(c.status == CheckStatus.PASS and c.current == "N/A" for c in module.checks)


# ===========================================================================
# Title / Meta / URL / Headings
# ===========================================================================


class TestTitle:
    def test_keyword_at_start(self):
        check = checks.check_title_keyword_position(ctx(title="Đà Nẵng: Top 10 bãi biển"))
        assert check.status == CheckStatus.PASS

    def test_keyword_late(self):
        check = checks.check_title_keyword_position(ctx(title="Top 10 bãi biển đẹp nhất Đà Nẵng"))
        assert check.status == CheckStatus.FAIL

    def test_keyword_repetition(self):
        check = checks.check_title_keyword_repetition(ctx(title="Đà Nẵng đà nẵng Da Nang"))
        assert check.status == CheckStatus.FAIL
        assert check.current == "3 lần"
        assert "Bỏ bớt 2 lần" in check.suggestion

    def test_power_words(self):
        assert checks.check_title_power_words(ctx(title="Hướng dẫn du lịch")).status == CheckStatus.PASS
        assert checks.check_title_power_words(ctx(title="Du lịch")).status == CheckStatus.FAIL

    def test_h1_match(self):
        context = ctx(title="Du lịch Đà Nẵng", h1=["Du lịch Đà Nẵng"])
        assert checks.check_title_h1_match(context).status == CheckStatus.PASS


class TestMetaDescription:
    def test_missing_meta_is_not_a_pass(self):
        check = checks.check_meta_not_title(ctx(title="Tiêu đề"))
        assert check.status == CheckStatus.FAIL

    def test_duplicate_of_title(self):
        check = checks.check_meta_not_title(ctx(title="Du lịch Đà Nẵng", meta_description="Du lịch Đà Nẵng"))
        assert check.status == CheckStatus.FAIL

    def test_cta(self):
        check = checks.check_meta_cta(ctx(meta_description="Xem ngay kinh nghiệm du lịch"))
        assert check.status == CheckStatus.PASS


class TestSlug:
    def test_keyword_in_slug(self):
        check = checks.check_slug_keyword(ctx(url="https://x.com/bai-bien-da-nang"))
        assert check.status == CheckStatus.PASS

    def test_partial_keyword_in_slug(self):
        check = checks.check_slug_keyword(ctx(url="https://x.com/da-lat"))
        assert check.status == CheckStatus.WARNING
        assert check.score == 1

    def test_stop_words(self):
        check = checks.check_slug_stop_words(ctx(url="https://x.com/an-va-choi"))
        assert check.status == CheckStatus.FAIL
        assert "va" in check.current

    def test_long_slug(self):
        check = checks.check_slug_length(ctx(url="https://x.com/" + "a" * 80))
        assert check.status == CheckStatus.FAIL
        assert check.current == 80


class TestHeadings:
    def test_multiple_h1_is_warning(self):
        check = checks.check_single_h1(ctx(h1=["a", "b"]))
        assert check.status == CheckStatus.WARNING
        assert check.score == 1

    def test_missing_h1_is_fail(self):
        check = checks.check_single_h1(ctx())
        assert check.status == CheckStatus.FAIL
        assert check.current == 0

    def test_h2_keyword_matches_secondary(self):
        context = ctx(keywords=["đà nẵng", "hải sản"], h2=["Ăn hải sản ở đâu"])
        assert checks.check_h2_keyword(context).status == CheckStatus.PASS


# ===========================================================================
# Content
# ===========================================================================


class TestContent:
    def test_word_count_short(self):
        check = checks.check_word_count(ctx(word_count=500))
        assert check.status == CheckStatus.FAIL
        assert check.expected == "≥1000 từ"
        assert check.suggestion == "Thêm 500 từ"

    def test_word_count_partial(self):
        check = checks.check_word_count(ctx(word_count=750))
        assert check.status == CheckStatus.WARNING
        assert check.score == 2

    def test_word_count_uses_article_type(self):
        check = checks.check_word_count(ctx(word_count=700, article_type=ArticleType.NEWS))
        assert check.status == CheckStatus.PASS

    def test_density_in_range(self):
        body = "du lịch " + "x " * 98
        check = checks.check_keyword_density(ctx(keywords=["du lịch"], body_text=body, word_count=100))
        assert check.status == CheckStatus.PASS
        assert check.current == "1.00%"

    def test_density_stuffing(self):
        body = "du lịch " * 10 + "x " * 80
        check = checks.check_keyword_density(ctx(keywords=["du lịch"], body_text=body, word_count=100))
        assert check.status == CheckStatus.FAIL
        assert check.current == "10.00%"

    def test_density_low_suggests_exact_shortfall(self):
        body = "du lịch " + "x " * 998
        check = checks.check_keyword_density(ctx(keywords=["du lịch"], body_text=body, word_count=1000))
        assert check.status == CheckStatus.FAIL
        assert "Thêm khoảng 4 lần" in check.suggestion

    def test_secondary_coverage(self):
        context = ctx(
            keywords=["đà nẵng", "bãi biển", "hải sản", "cầu rồng"],
            body_text="bai bien va hai san",
        )
        check = checks.check_secondary_coverage(context)
        assert check.status == CheckStatus.WARNING
        assert check.current == "67% (2/3)"
        assert "cầu rồng" in check.suggestion

    def test_no_secondary_is_neutral(self):
        check = checks.check_secondary_coverage(ctx())
        assert check.status == CheckStatus.PASS
        assert check.current == "N/A"

    def test_heading_hierarchy_gap(self):
        check = checks.check_heading_hierarchy(ctx(h1=["a"], h3=["b"]))
        assert check.status == CheckStatus.FAIL
        assert check.current == "Thiếu H2"

    def test_long_paragraphs(self):
        check = checks.check_paragraph_length(ctx(paragraphs=["x " * 120, "short"]))
        assert check.status == CheckStatus.WARNING
        assert check.current == "1 đoạn dài"

    def test_numbers(self):
        check = checks.check_numbers(ctx(body_text="Có 3 bãi biển, dài 20 km"))
        assert check.status == CheckStatus.PASS

    def test_keyword_presence(self):
        context = ctx(
            title="Đà Nẵng có gì",
            h1=["Best Beaches in Da Nang"],
            paragraphs=["Da Nang là thành phố biển."],
        )
        assert checks.check_keyword_in_title(context).status == CheckStatus.PASS
        assert checks.check_keyword_in_h1(context).status == CheckStatus.PASS
        assert checks.check_keyword_in_first_paragraph(context).status == CheckStatus.PASS


class TestSapoAndConclusion:
    def test_sapo_short(self):
        check = checks.check_sapo_length(ctx(paragraphs=["x " * 20]))
        assert check.status == CheckStatus.FAIL
        assert check.suggestion == "Mở rộng sapo thêm 30 từ"

    def test_sapo_in_range(self):
        assert checks.check_sapo_length(ctx(paragraphs=["x " * 60])).status == CheckStatus.PASS

    def test_sapo_bold(self):
        html = "<html><body><p><strong>Đà Nẵng</strong> là thành phố</p></body></html>"
        page = extract(html, URL)
        assert checks.check_sapo_bold(AuditContext(page, ["đà nẵng"])).status == CheckStatus.PASS

    def test_sapo_bold_ignores_head(self):
        html = "<html><head><title><b>Đà Nẵng</b></title></head><body><p>Đà Nẵng</p></body></html>"
        page = extract(html, URL)
        assert checks.check_sapo_bold(AuditContext(page, ["đà nẵng"])).status == CheckStatus.FAIL

    def test_sapo_bold_brand(self):
        check = checks.check_sapo_bold(ctx(keywords=[], brand="BanPham", bold_texts=["Đặt tour BanPham"]))
        assert check.status == CheckStatus.PASS

    def test_sapo_bold_unclosed_tags_stay_fast(self):
        """Thousands of unclosed <b> tags must not make the check blow up."""
        html = "<html><body><p>" + "<b>x " * 20000 + "</p></body></html>"
        started = time.perf_counter()
        page = extract(html, URL)
        check = checks.check_sapo_bold(AuditContext(page, ["đà nẵng"]))
        assert time.perf_counter() - started < 5.0
        assert check.status == CheckStatus.FAIL
        assert len(page.bold_texts) <= 10

    def test_conclusion_heading(self):
        assert checks.check_conclusion_heading(ctx(h2=["Tóm lại"])).status == CheckStatus.PASS

    def test_closing_cta(self):
        context = ctx(body_text="nội dung dài ... Liên hệ ngay để đặt tour")
        assert checks.check_closing_cta(context).status == CheckStatus.PASS


# ===========================================================================
# Images & Links
# ===========================================================================


class TestImages:
    def test_no_images_fails_count(self):
        check = checks.check_image_count(ctx(word_count=1200))
        assert check.status == CheckStatus.FAIL
        assert check.current == 0
        assert check.expected == "≥2 ảnh"

    def test_ratio_checks_neutral_without_images(self):
        context = ctx()
        for fn in (checks.check_image_alt, checks.check_image_captions,
                   checks.check_lazy_loading, checks.check_image_filenames):
            assert fn(context).status == CheckStatus.PASS

    def test_bad_filenames(self):
        images = [
            ImageData(src="/uploads/IMG_1234.jpg", alt="x"),
            ImageData(src="/uploads/bai-bien-my-khe.jpg", alt="x"),
            ImageData(src="/uploads/image-of-beach.jpg", alt="x"),
        ]
        check = checks.check_image_filenames(ctx(images=images))
        assert check.status == CheckStatus.FAIL
        assert check.current == "1 ảnh tên xấu"

    def test_alt_keyword(self):
        images = [ImageData(src="/a.jpg", alt="Bãi biển Đà Nẵng")]
        assert checks.check_image_alt_keyword(ctx(images=images)).status == CheckStatus.PASS

    def test_lazy_coverage(self):
        images = [ImageData(src=f"/{i}.jpg", has_lazy_loading=i < 4) for i in range(5)]
        check = checks.check_lazy_loading(ctx(images=images))
        assert check.status == CheckStatus.PASS
        assert check.current == "80%"

    def test_percentages_round_half_up(self):
        """12.5% is reported as 13%, the same rounding the scores use."""
        images = [ImageData(src=f"/{i}.jpg", has_lazy_loading=i == 0) for i in range(8)]
        check = checks.check_lazy_loading(ctx(images=images))
        assert check.current == "13%"

    def test_pct_helper(self):
        assert checks._pct(0.5) == "1%"
        assert checks._pct(2.5) == "3%"
        assert checks._pct(66.6) == "67%"


class TestInternalLinks:
    def test_bad_anchor_matching(self):
        assert checks._is_bad_anchor("đây")
        assert checks._is_bad_anchor("Xem tại đây")
        assert not checks._is_bad_anchor("Đà Nẵng đây rồi")
        assert not checks._is_bad_anchor("where")

    def test_bad_anchor_caps_diversity(self):
        links = [
            LinkData(href="/a", text="click đây"),
            LinkData(href="/b", text="bãi biển"),
            LinkData(href="/c", text="hải sản"),
        ]
        check = checks.check_anchor_diversity(ctx(internal_links=links))
        assert check.status == CheckStatus.WARNING

    def test_early_link(self):
        links = [LinkData(href="/a", text="x", position=500)]
        assert checks.check_early_internal_link(ctx(internal_links=links)).status == CheckStatus.FAIL


class TestExternalLinks:
    def test_trusted_source(self):
        links = [LinkData(href="https://vi.wikipedia.org/wiki/Da_Nang", text="wiki")]
        assert checks.check_trusted_sources(ctx(external_links=links)).status == CheckStatus.PASS

    def test_non_web_links_ignored(self):
        links = [LinkData(href="mailto:a@b.com", text="mail")]
        assert checks.check_has_external_link(ctx(external_links=links)).status == CheckStatus.FAIL

    def test_untrusted_needs_nofollow(self):
        links = [LinkData(href="https://random.com/x", text="x", target="_blank")]
        assert checks.check_external_nofollow(ctx(external_links=links)).status == CheckStatus.FAIL

        links = [LinkData(href="https://random.com/x", text="x", rel="nofollow noopener")]
        assert checks.check_external_nofollow(ctx(external_links=links)).status == CheckStatus.PASS

    def test_only_trusted_links_is_neutral(self):
        links = [LinkData(href="https://www.chinhphu.gov.vn/x", text="x")]
        check = checks.check_external_nofollow(ctx(external_links=links))
        assert check.current == "N/A"


# ===========================================================================
# E-E-A-T / Schema / Brand / Local
# ===========================================================================


class TestSchema:
    def test_article_fields_partial(self):
        schema = SchemaData(type="Article", data={"@type": "Article", "headline": "x", "author": {"name": "a"}})
        check = checks.check_article_schema_fields(ctx(schemas=[schema]))
        assert check.status == CheckStatus.WARNING
        assert check.current == "2/4"
        assert check.suggestion == "Thêm fields: datePublished, image"

    def test_type_matched_schema(self):
        schema = SchemaData(type="HowTo", data={"@type": "HowTo", "name": "x"})
        context = ctx(schemas=[schema], article_type=ArticleType.GUIDE)
        assert checks.check_type_schema(context).status == CheckStatus.PASS

        completeness = checks.check_type_schema_fields(context)
        assert completeness.status == CheckStatus.WARNING
        assert completeness.current == "1/2"

    def test_no_schema(self):
        context = ctx()
        assert checks.check_valid_json_ld(context).status == CheckStatus.FAIL
        assert checks.check_type_schema_fields(context).status == CheckStatus.FAIL


class TestBrand:
    def test_misspelled_brand(self):
        check = checks.check_brand_spelling(ctx(brand="Bản Phẩm", body_text="ban pham rất tốt"))
        assert check.status == CheckStatus.FAIL
        assert check.current == "Sai chính tả"

    def test_brand_present(self):
        context = ctx(brand="BanPham", body_text="Đặt tour tại banpham hôm nay")
        assert checks.check_brand_mentioned(context).status == CheckStatus.PASS
        assert checks.check_brand_spelling(context).status == CheckStatus.PASS


class TestLocalSEO:
    def test_non_local_type_is_neutral(self):
        module = run_module("local-seo", ctx())
        assert module.score == module.max_score

    def test_destination_signals(self):
        context = ctx(
            article_type=ArticleType.DESTINATION,
            body_text="Quán nằm tại số 12 đường Trần Phú, gọi 0905 123 456",
        )
        assert checks.check_geo_keywords(context).status == CheckStatus.PASS
        assert checks.check_address(context).status == CheckStatus.PASS
        assert checks.check_phone(context).status == CheckStatus.PASS
        assert checks.check_map_link(context).status == CheckStatus.FAIL


# ===========================================================================
# Technical / AI / Freshness / Snippet
# ===========================================================================


class TestTechnical:
    def test_title_length_partial(self):
        check = checks.check_title_length(ctx(title="x" * 45))
        assert check.status == CheckStatus.WARNING
        assert check.suggestion == "Thêm 5 ký tự vào title"

    def test_canonical_ignores_query_and_www(self):
        context = ctx(url="https://x.com/a?utm=1", canonical="https://x.com/a")
        assert checks.check_canonical_self(context).status == CheckStatus.PASS

        context = ctx(url="https://example.com/bai-viet/", canonical="https://www.example.com/bai-viet")
        assert checks.check_canonical_self(context).status == CheckStatus.PASS

    def test_canonical_relative(self):
        context = ctx(url="https://x.com/a", canonical="/a")
        assert checks.check_canonical_self(context).status == CheckStatus.PASS

    def test_canonical_elsewhere(self):
        context = ctx(url="https://x.com/a", canonical="https://x.com/b")
        assert checks.check_canonical_self(context).status == CheckStatus.FAIL

    def test_open_graph_partial(self):
        check = checks.check_open_graph(ctx(og_title="t", og_description="d"))
        assert check.status == CheckStatus.WARNING
        assert check.current == "2/3"

    def test_internal_link_floor(self):
        links = [LinkData(href=f"/{i}", text=str(i)) for i in range(3)]
        assert checks.check_internal_link_floor(ctx(internal_links=links, word_count=900)).status == CheckStatus.PASS

        check = checks.check_internal_link_floor(ctx(internal_links=links, word_count=2000))
        assert check.status == CheckStatus.WARNING
        assert check.expected == "≥6 links"


class TestAIOptimization:
    def test_definition_box(self):
        context = ctx(body_text="Đà Nẵng là thành phố biển miền Trung")
        assert checks.check_definition_box(context).status == CheckStatus.PASS

    def test_faq_section(self):
        context = ctx(h2=["Đi đâu?", "Ăn gì?", "Ở đâu?"])
        assert checks.check_faq_section(context).status == CheckStatus.PASS

    def test_paa_heading(self):
        assert checks.check_paa_headings(ctx(h3=["Đà Nẵng là gì"])).status == CheckStatus.PASS


class TestFreshness:
    def test_modified_before_published(self):
        context = ctx(publish_date="2024-03-01", modified_date="2024-02-01")
        assert checks.check_modified_after_publish(context).status == CheckStatus.FAIL

    def test_year_in_headline(self):
        context = ctx(
            title="Top 10 bãi biển Đà Nẵng 2025",
            publish_date="2024-03-01T08:00:00+07:00",
            modified_date="2025-01-10",
        )
        assert checks.check_machine_publish_date(context).status == CheckStatus.PASS
        assert checks.check_modified_after_publish(context).status == CheckStatus.PASS
        assert checks.check_year_in_headline(context).status == CheckStatus.PASS

    def test_human_date_is_partial(self):
        check = checks.check_machine_publish_date(ctx(publish_date="March 2024"))
        assert check.status == CheckStatus.WARNING
        assert check.score == 1


class TestFeaturedSnippet:
    def test_snippet_paragraph(self):
        assert checks.check_snippet_paragraph(ctx(paragraphs=["x " * 50])).status == CheckStatus.PASS

    def test_list_heading(self):
        assert checks.check_list_heading(ctx(h2=["Top 10 bãi biển"])).status == CheckStatus.PASS

    def test_toc_not_required_for_short_posts(self):
        check = checks.check_table_of_contents(ctx(word_count=1500))
        assert check.status == CheckStatus.PASS
        assert check.current == "N/A"
