"""Tests for partial nesting chains in render errors."""

from __future__ import annotations

import pytest

from tessera import (
    Environment,
    ErrorCode,
    PartialDepthError,
    TemplateNotFoundError,
    TemplateRenderError,
    ViewContext,
)
from tessera.environment import terminal
from tessera.environment.exceptions import format_template_stack

from .helpers import write_template


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.setattr(terminal, "_USE_COLORS", False)


def fail_with_key_error(local_assigns, view):
    return local_assigns["price"]


class TestTemplateStack:
    """The chain of resolved files from outermost partial inward."""

    def test_single_partial_has_no_stack_in_message(self, view, views_dir, callbacks):
        path = write_template(views_dir, "_item.html.cb", "item")
        callbacks.callbacks["item"] = fail_with_key_error

        with pytest.raises(TemplateRenderError) as exc_info:
            view.render("item")

        error = exc_info.value
        assert error.template_stack == [str(path)]
        assert isinstance(error.cause, KeyError)
        assert "Template stack:" not in str(error)

    def test_nested_partial_shows_stack(self, view, views_dir, callbacks):
        outer = write_template(views_dir, "outer/_page.html.cb", "page")
        inner = write_template(views_dir, "inner/_item.html.cb", "item")
        callbacks.callbacks["page"] = lambda assigns, v: f"<{v.render('inner/item')}>"
        callbacks.callbacks["item"] = fail_with_key_error

        with pytest.raises(TemplateRenderError) as exc_info:
            view.render("outer/page")

        error = exc_info.value
        assert error.filename == str(inner)
        assert error.template_stack == [str(outer), str(inner)]
        assert "Template stack:" in str(error)
        assert str(error).startswith("KeyError: 'price'")

    def test_three_levels(self, view, views_dir, callbacks):
        files = [
            write_template(views_dir, "_page.html.cb", "page"),
            write_template(views_dir, "_list.html.cb", "list"),
            write_template(views_dir, "_row.html.cb", "row"),
        ]
        callbacks.callbacks["page"] = lambda assigns, v: v.render("list")
        callbacks.callbacks["list"] = lambda assigns, v: v.render("row")
        callbacks.callbacks["row"] = fail_with_key_error

        with pytest.raises(TemplateRenderError) as exc_info:
            view.render("page")

        assert exc_info.value.template_stack == [str(f) for f in files]

    def test_error_is_not_wrapped_twice(self, view, views_dir, callbacks):
        write_template(views_dir, "_page.html.cb", "page")
        write_template(views_dir, "_row.html.cb", "row")
        callbacks.callbacks["page"] = lambda assigns, v: v.render("row")
        callbacks.callbacks["row"] = fail_with_key_error

        with pytest.raises(TemplateRenderError) as exc_info:
            view.render("page")

        assert not isinstance(exc_info.value.cause, TemplateRenderError)

    def test_full_template_starts_chain(self, view, views_dir, callbacks):
        index = write_template(views_dir, "advertiser/index.html.cb", "index")
        row = write_template(views_dir, "_row.html.cb", "row")
        callbacks.callbacks["index"] = lambda assigns, v: v.render("row")
        callbacks.callbacks["row"] = fail_with_key_error

        with pytest.raises(TemplateRenderError) as exc_info:
            view.render_template("advertiser/index")

        assert exc_info.value.template_stack == [str(index), str(row)]


class TestLookupFailures:
    def test_top_level_missing_partial_is_not_wrapped(self, view):
        with pytest.raises(TemplateNotFoundError):
            view.render("missing")

    def test_nested_missing_partial_is_wrapped(self, view, views_dir, callbacks):
        outer = write_template(views_dir, "_page.html.cb", "page")
        callbacks.callbacks["page"] = lambda assigns, v: v.render("missing")

        with pytest.raises(TemplateRenderError) as exc_info:
            view.render("page")

        error = exc_info.value
        assert isinstance(error.cause, TemplateNotFoundError)
        assert error.template_stack == [str(outer)]


class TestPartialDepth:
    def test_self_rendering_partial_stops(self, views_dir, extensions, callbacks):
        env = Environment(search_paths=[views_dir], extensions=extensions, max_partial_depth=5)
        path = write_template(views_dir, "_loop.html.cb", "loop")
        callbacks.callbacks["loop"] = lambda assigns, v: v.render("loop")

        with pytest.raises(TemplateRenderError) as exc_info:
            ViewContext(env).render("loop")

        error = exc_info.value
        assert isinstance(error.cause, PartialDepthError)
        assert error.cause.max_depth == 5
        assert error.template_stack == [str(path)] * 6

    def test_depth_error_code(self):
        assert PartialDepthError("_loop.tmpl", 5).code is ErrorCode.PARTIAL_DEPTH


class TestFormatting:
    def test_format_compact_carries_code(self, view, views_dir, callbacks):
        outer = write_template(views_dir, "_page.html.cb", "page")
        write_template(views_dir, "_row.html.cb", "row")
        callbacks.callbacks["page"] = lambda assigns, v: v.render("row")
        callbacks.callbacks["row"] = fail_with_key_error

        with pytest.raises(TemplateRenderError) as exc_info:
            view.render("page")

        compact = exc_info.value.format_compact()
        assert compact.startswith("T-RUN-001: KeyError: 'price'")
        assert f"  • {outer}" in compact

    def test_empty_cause_message(self):
        error = TemplateRenderError("_ad.tmpl", RuntimeError())
        assert error.message == "RuntimeError (no details available)"

    def test_format_template_stack(self):
        assert format_template_stack([]) == ""
        assert format_template_stack(["a.tmpl", "b.tmpl"]) == (
            "Template stack:\n  • a.tmpl\n  • b.tmpl"
        )

    def test_not_found_compact(self):
        error = TemplateNotFoundError(["views"], "ads/_ad")
        assert error.format_compact() == "T-TPL-001: Missing template ads/_ad in view path views"

    def test_error_categories(self):
        assert ErrorCode.RENDER_ERROR.category == "runtime"
        assert ErrorCode.MALFORMED_PATH.category == "path"
        assert ErrorCode.UNSUPPORTED_REFERENCE.category == "reference"


class TestTerminalColors:
    def test_colorize_plain_when_disabled(self):
        assert terminal.colorize("Error", "bright_red") == "Error"

    def test_colorize_when_enabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.error_code("T-RUN-001")
        assert "\033[91m" in result
        assert terminal.strip_colors(result) == "T-RUN-001"
