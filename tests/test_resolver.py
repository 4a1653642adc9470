"""Tests for essay resolution and template construction."""

from fakes import EDITOR, VIEWER, make_essay
from green_essays.domains.essays.entities import (
    EssayKind, EssayStatus, classify, estimate_reading_time, template_id,
)
from green_essays.domains.essays.resolver import build_template, resolve


class TestResolveLoading:
    """Nothing is decided while the collection is still loading."""

    def test_loading_returns_loading_marker(self):
        resolved = resolve("future", "new-essay", [], loading=True, acting_user=EDITOR)

        assert resolved.is_loading is True
        assert resolved.essay is None
        assert resolved.is_not_found is False

    def test_loading_never_builds_template(self):
        resolved = resolve("future", "new-essay", [], loading=True)

        assert resolved.is_template is False


class TestResolveExisting:
    """A slug present in the collection wins over any template."""

    def test_real_essay_is_returned(self):
        essay = make_essay(slug="economy")

        resolved = resolve("future", "economy", [essay], loading=False)

        assert resolved.essay is essay
        assert resolved.kind == EssayKind.REAL
        assert resolved.is_real is True

    def test_dummy_essay_is_classified(self):
        essay = make_essay(id="dummy-1-future", slug="sample")

        resolved = resolve("future", "sample", [essay], loading=False)

        assert resolved.kind == EssayKind.DUMMY
        assert resolved.is_dummy is True

    def test_existing_match_ignores_missing_section(self):
        essay = make_essay(slug="economy")

        resolved = resolve(None, "economy", [essay], loading=False)

        assert resolved.essay is essay


class TestResolveNotFound:
    """Missing route segments mean "not found", not "template"."""

    def test_missing_slug(self):
        resolved = resolve("future", None, [make_essay()], loading=False)

        assert resolved.is_not_found is True

    def test_missing_section(self):
        resolved = resolve(None, "new-essay", [], loading=False)

        assert resolved.is_not_found is True
        assert resolved.kind is None


class TestResolveTemplate:
    """Unknown slugs in a known section resolve to an unsaved template."""

    def test_template_fields(self):
        resolved = resolve("future", "new-essay", [], loading=False, acting_user=EDITOR)
        essay = resolved.essay

        assert resolved.is_template is True
        assert essay.id == "template-new-essay"
        assert essay.slug == "new-essay"
        assert essay.section == "future"
        assert essay.title == "New Essay"
        assert essay.subtitle == ""
        assert essay.author_name == "ed"
        assert essay.status == EssayStatus.DRAFT
        assert essay.version == 1
        assert essay.content_html == "<h1>New Essay</h1><p>Start writing your essay...</p>"

    def test_template_seed_document(self):
        essay = build_template("future", "new-essay", EDITOR)

        heading, paragraph = essay.content_json["content"]
        assert essay.content_json["type"] == "doc"
        assert heading["type"] == "heading"
        assert heading["attrs"] == {"level": 1}
        assert heading["content"][0]["text"] == "New Essay"
        assert paragraph["content"][0]["text"] == "Start writing your essay..."

    def test_anonymous_template_uses_default_author(self):
        essay = build_template("future", "new-essay", VIEWER)

        assert essay.author_name == "Author"

    def test_resolution_is_pure(self):
        collection = [make_essay(slug="other")]

        first = resolve("future", "new-essay", collection, loading=False, acting_user=EDITOR)
        second = resolve("future", "new-essay", collection, loading=False, acting_user=EDITOR)

        assert first == second
        assert len(collection) == 1
        assert first.essay.content_json is not second.essay.content_json


class TestHelpers:
    """Identifier namespaces and reading time."""

    def test_classify(self):
        assert classify(template_id("x")) == EssayKind.TEMPLATE
        assert classify("dummy-2-future") == EssayKind.DUMMY
        assert classify("5b0e1c9e-8d7f-4f43-9d83-3a3c1bd6e2f1") == EssayKind.REAL

    def test_reading_time_rounds_up(self):
        html = "<p>" + " ".join(["word"] * 201) + "</p>"

        assert estimate_reading_time(html, words_per_minute=200) == 2

    def test_reading_time_ignores_markup(self):
        html = "<h1>Title</h1>" + "<p><strong>bold</strong> text</p>" * 200

        assert estimate_reading_time(html, words_per_minute=200) == 3

    def test_reading_time_minimum(self):
        assert estimate_reading_time(None) == 1
        assert estimate_reading_time("<p></p>") == 1
