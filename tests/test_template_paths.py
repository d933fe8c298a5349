"""Tests for the template path grammar and derived path helpers."""

from __future__ import annotations

import os

import pytest
from hypothesis import given, settings

from tessera import ExtensionRegistry, MalformedPathError, StringTemplateHandler
from tessera.template import TemplatePath, parse_template_path
from tessera.template.paths import (
    cache_key_for,
    format_and_extension,
    is_partial_name,
    join_path,
)

from .strategies import REGISTERED_EXTENSIONS, template_paths


@pytest.fixture
def registry() -> ExtensionRegistry:
    handler = StringTemplateHandler()
    return ExtensionRegistry({ext: handler for ext in REGISTERED_EXTENSIONS}, default="tmpl")


class TestParse:
    """Right-to-left split into directory, name, format and extension."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("foo", (None, "foo", None, None)),
            ("foo.html", (None, "foo", "html", None)),
            ("foo.tmpl", (None, "foo", None, "tmpl")),
            ("foo.html.tmpl", (None, "foo", "html", "tmpl")),
            ("foo.html.iphone.tmpl", (None, "foo", "html.iphone", "tmpl")),
            ("dir/sub/_item.html.tmpl", ("dir/sub", "_item", "html", "tmpl")),
            ("/abs/_item.tmpl", ("/abs", "_item", None, "tmpl")),
        ],
    )
    def test_split(self, registry, raw, expected):
        assert parse_template_path(raw, registry) == TemplatePath(*expected)

    def test_two_segments_never_consult_registry(self, registry):
        """With two trailing segments the last one is the extension, registered or not."""
        assert parse_template_path("foo.html.xyz", registry) == TemplatePath(
            None, "foo", "html", "xyz"
        )

    def test_single_segment_depends_on_registry(self, registry):
        """The same token flips between format and extension with registration."""
        assert parse_template_path("foo.md", registry).format == "md"
        registry.register("md", StringTemplateHandler())
        assert parse_template_path("foo.md", registry).extension == "md"

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "dir/.hidden",
            "dir/sub/",
            "foo.a.b.c.d",
            "foo.html-mobile",
        ],
    )
    def test_malformed(self, registry, raw):
        with pytest.raises(MalformedPathError) as exc_info:
            parse_template_path(raw, registry)
        assert exc_info.value.path == raw

    def test_malformed_is_value_error(self, registry):
        with pytest.raises(ValueError):
            parse_template_path("a.b.c.d.e", registry)


class TestParseProperties:
    """Property-based invariants of the grammar."""

    @given(case=template_paths())
    @settings(max_examples=300)
    def test_recovers_parts(self, case):
        """Parsing returns exactly the parts the path was built from."""
        raw, expected = case
        registry = ExtensionRegistry(
            {ext: StringTemplateHandler() for ext in REGISTERED_EXTENSIONS}
        )
        assert parse_template_path(raw, registry) == expected

    @given(case=template_paths())
    @settings(max_examples=300)
    def test_name_and_tokens_are_clean(self, case):
        """Names carry no dot; format and extension carry no separator."""
        raw, _ = case
        registry = ExtensionRegistry(
            {ext: StringTemplateHandler() for ext in REGISTERED_EXTENSIONS}
        )
        parsed = parse_template_path(raw, registry)
        assert "." not in parsed.name
        assert "/" not in (parsed.format or "")
        assert "/" not in (parsed.extension or "")
        assert join_path(parsed.directory, parsed.name, parsed.format, parsed.extension) == raw


class TestDerivedPaths:
    def test_join_path(self):
        assert join_path("ads", "_ad", "html", "tmpl") == "ads/_ad.html.tmpl"
        assert join_path("ads", "_ad", None, "tmpl") == "ads/_ad.tmpl"
        assert join_path(None, "_ad", "html") == "_ad.html"
        assert join_path("", "index") == "/index"

    def test_format_and_extension(self):
        assert format_and_extension("html", "tmpl") == "html.tmpl"
        assert format_and_extension(None, "tmpl") == "tmpl"
        assert format_and_extension("html.iphone", None) == "html.iphone"
        assert format_and_extension(None, None) is None

    def test_partial_marker(self):
        assert is_partial_name("_ad")
        assert not is_partial_name("index")


class TestCacheKey:
    def test_only_safe_characters(self, tmp_path):
        key = cache_key_for(str(tmp_path / "ads" / "_ad.html.tmpl"))
        assert key.replace("_", "").isalnum()

    def test_project_root_is_stripped(self):
        assert cache_key_for("/srv/app/views/ads/_ad.tmpl", "/srv/app") == (
            "47views47ads47_ad46tmpl"
        )

    def test_relative_path_is_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert cache_key_for("ads/_ad.tmpl") == cache_key_for(
            os.path.join(os.getcwd(), "ads/_ad.tmpl")
        )
