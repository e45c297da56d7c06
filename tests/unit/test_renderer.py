"""Unit tests for the placeholder template renderer."""

import random
import re

import pytest

from sopgen.templates.renderer import (
    RAW_MARKUP_FIELDS,
    TemplateRenderer,
    escape_html,
    is_truthy,
    render,
)

RESIDUAL_RE = re.compile(r"\{\{[A-Za-z0-9_]+\}\}")


class TestIsTruthy:
    """Tests for conditional truthiness."""

    @pytest.mark.parametrize(
        "value",
        ["a", "  x  ", ["step"], 1, -2, 0.5, True, {"k": "v"}],
    )
    def test_truthy_values(self, value: object) -> None:
        """Test values that keep a conditional block."""
        assert is_truthy(value) is True

    @pytest.mark.parametrize(
        "value",
        [None, "", "   \n\t", [], (), 0, 0.0, False, {}],
    )
    def test_falsy_values(self, value: object) -> None:
        """Test values that drop a conditional block."""
        assert is_truthy(value) is False


class TestEscapeHtml:
    """Tests for HTML escaping."""

    def test_escapes_special_characters(self) -> None:
        """Test that all five special characters are escaped."""
        escaped = escape_html("""<a href="x">Tom's & Jerry</a>""")

        assert "<" not in escaped
        assert ">" not in escaped
        assert '"' not in escaped
        assert "'" not in escaped
        assert "&amp;" in escaped
        assert escaped.startswith("&lt;a href=")


class TestConditionals:
    """Tests for {{#if}} block resolution."""

    def test_truthy_keeps_body(self) -> None:
        """Test a truthy key keeps the block body."""
        assert render("{{#if x}}YES{{/if}}", {"x": "a"}) == "YES"

    def test_missing_key_drops_block(self) -> None:
        """Test a missing key drops the block."""
        assert render("{{#if x}}YES{{/if}}", {}) == ""

    def test_empty_string_drops_block(self) -> None:
        """Test an empty string drops the block."""
        assert render("{{#if x}}YES{{/if}}", {"x": ""}) == ""

    def test_empty_list_drops_block(self) -> None:
        """Test an empty list drops the block."""
        assert render("{{#if x}}YES{{/if}}", {"x": []}) == ""

    def test_zero_and_false_drop_block(self) -> None:
        """Test zero and False are falsy."""
        assert render("{{#if x}}YES{{/if}}", {"x": 0}) == ""
        assert render("{{#if x}}YES{{/if}}", {"x": False}) == ""

    def test_body_placeholders_are_substituted(self) -> None:
        """Test placeholders inside a kept block are resolved."""
        template = "{{#if notes}}<p>{{notes}}</p>{{/if}}"

        assert render(template, {"notes": "Wear gloves"}) == "<p>Wear gloves</p>"

    def test_multiline_body(self) -> None:
        """Test block bodies may span lines."""
        template = "<div>\n{{#if x}}\n<p>line</p>\n{{/if}}\n</div>"

        assert render(template, {"x": True}) == "<div>\n\n<p>line</p>\n\n</div>"
        assert render(template, {}) == "<div>\n\n</div>"

    def test_multiple_blocks_evaluated_independently(self) -> None:
        """Test sibling blocks are evaluated on their own keys."""
        template = "{{#if a}}A{{/if}}-{{#if b}}B{{/if}}-{{#if a}}A2{{/if}}"

        assert render(template, {"a": "1", "b": ""}) == "A--A2"

    def test_nested_block_closes_on_first_endif(self) -> None:
        """Test nested blocks are not supported: the first {{/if}} closes."""
        template = "{{#if a}}1{{#if b}}2{{/if}}3{{/if}}"

        # Outer block body is "1{{#if b}}2"; the trailing {{/if}} is residual
        assert render(template, {"a": "x", "b": "y"}) == "123"
        assert render(template, {"b": "y"}) == "3"

    def test_unterminated_if_tag_is_removed(self) -> None:
        """Test an unterminated {{#if}} tag is dropped, its text kept."""
        assert render("{{#if x}}<p>body</p>", {"x": ""}) == "<p>body</p>"


class TestSubstitution:
    """Tests for {{key}} substitution."""

    def test_string_is_escaped(self) -> None:
        """Test string values are HTML-escaped."""
        assert render("{{x}}", {"x": "<b>hi</b>"}) == "&lt;b&gt;hi&lt;/b&gt;"

    def test_raw_field_bypasses_escaping(self) -> None:
        """Test pre-rendered markup fields are inserted verbatim."""
        assert render("{{procedure}}", {"procedure": "<li>step1</li>"}) == "<li>step1</li>"

    def test_default_raw_fields(self) -> None:
        """Test the declared raw markup fields."""
        assert "procedure" in RAW_MARKUP_FIELDS
        assert "change_history_rows" in RAW_MARKUP_FIELDS
        assert "title" not in RAW_MARKUP_FIELDS

    def test_unknown_key_removed(self) -> None:
        """Test placeholders without data are removed."""
        assert render("Hello {{name}}", {}) == "Hello "

    def test_none_value_renders_empty(self) -> None:
        """Test None substitutes as empty string."""
        assert render("[{{x}}]", {"x": None}) == "[]"

    def test_numbers_are_stringified(self) -> None:
        """Test numeric values."""
        assert render("{{a}}/{{b}}/{{c}}", {"a": 3, "b": 2.5, "c": 4.0}) == "3/2.5/4"

    def test_booleans_render_lowercase(self) -> None:
        """Test boolean values use JSON spelling."""
        assert render("{{a}} {{b}}", {"a": True, "b": False}) == "true false"

    def test_list_joined_with_newlines(self) -> None:
        """Test list values are escaped per item and newline-joined."""
        assert render("{{items}}", {"items": ["a", "<b>"]}) == "a\n&lt;b&gt;"

    def test_prefix_keys_do_not_collide(self) -> None:
        """Test {{title}} never consumes part of {{title2}}."""
        template = "{{title}}|{{title2}}"

        assert render(template, {"title": "A", "title2": "B"}) == "A|B"
        assert render(template, {"title": "A"}) == "A|"

    def test_repeated_placeholder(self) -> None:
        """Test every occurrence of a key is replaced."""
        assert render("{{x}} and {{x}}", {"x": "y"}) == "y and y"

    def test_substituted_value_not_reprocessed(self) -> None:
        """Test placeholder-like text in values does not survive."""
        result = render("{{a}}", {"a": "{{b}}", "b": "leak"})

        assert "leak" not in result
        assert "{{" not in result

    def test_whitespace_inside_braces_is_not_a_placeholder(self) -> None:
        """Test {{ key }} is not substituted and gets cleaned up."""
        assert render("[{{ x }}]", {"x": "y"}) == "[]"


class TestCleanup:
    """Tests for residual and stray-brace cleanup."""

    def test_empty_braces_removed(self) -> None:
        """Test a leftover { } collapses to nothing."""
        assert render("{ }", {}) == ""

    def test_wrapped_text_unwrapped(self) -> None:
        """Test a leftover { orphan } becomes bare text."""
        assert render("{ orphan }", {}) == "orphan"

    def test_triple_braces_unwrapped(self) -> None:
        """Test {{{key}}} leaves the bare value."""
        assert render("<p>{{{x}}}</p>", {"x": "v"}) == "<p>v</p>"

    def test_style_blocks_preserved(self) -> None:
        """Test CSS rules survive the stray-brace pass."""
        template = "<style>p { margin: 0 }</style><p>{ x }</p>"

        assert render(template, {}) == "<style>p { margin: 0 }</style><p>x</p>"


class TestRendererProperties:
    """Tests for renderer-wide guarantees."""

    @pytest.mark.parametrize(
        "template",
        [
            "",
            "<p>plain</p>",
            "<table><tr><td>a</td></tr></table>\n",
        ],
    )
    def test_literal_html_passes_through(self, template: str) -> None:
        """Test templates without placeholders are returned unchanged."""
        assert render(template, {"x": "unused"}) == template

    @pytest.mark.parametrize(
        "template,data",
        [
            ("{{a}}{{b}}{{#if c}}{{d}}{{/if}}", {"a": "1"}),
            ("{{#if a}}{{b}}", {"a": "x"}),
            ("{{a}}", {"a": "{{b}}"}),
            ("{{{{a}}}}", {"a": "x"}),
            ("<p>{{title}}</p>", {"title": "{{a{a }}}"}),
            ("{{{a}{{b}}{{a}}}", {"a": "}"}),
            ("{{a{{b}}}}", {"b": "{"}),
            ("{ {{a}} }", {"a": "{{b}}"}),
        ],
    )
    def test_output_is_residual_free(self, template: str, data: dict) -> None:
        """Test no {{identifier}} token survives rendering."""
        assert not RESIDUAL_RE.search(render(template, data))

    def test_brace_heavy_inputs_are_residual_free(self) -> None:
        """Test random brace-heavy templates and values never leave tokens."""
        rng = random.Random(20240115)
        pieces = ["{", "}", "{{", "}}", "a", "b", " ", "{{a}}", "{{#if a}}", "{{/if}}"]

        for _ in range(2000):
            template = "".join(rng.choice(pieces) for _ in range(rng.randint(1, 12)))
            data = {
                "a": "".join(rng.choice(pieces) for _ in range(rng.randint(0, 4))),
                "b": "".join(rng.choice("{}ab ") for _ in range(rng.randint(0, 4))),
            }

            html = render(template, data)

            assert not RESIDUAL_RE.search(html), (template, data, html)

    def test_rendering_is_deterministic(self) -> None:
        """Test identical inputs give identical output."""
        template = "<h1>{{title}}</h1>{{#if notes}}<p>{{notes}}</p>{{/if}}"
        data = {"title": "A & B", "notes": "n"}

        assert render(template, data) == render(template, data)

    def test_combined_scenario(self) -> None:
        """Test escaping, conditional dropping and cleanup together."""
        template = "<h1>{{title}}</h1>{{#if notes}}<p>{{notes}}</p>{{/if}}"

        assert render(template, {"title": "A & B", "notes": ""}) == "<h1>A &amp; B</h1>"

    def test_none_template_returns_empty(self) -> None:
        """Test a missing template renders as empty string."""
        assert render(None, {"x": "y"}) == ""

    def test_none_data_only_cleans_up(self) -> None:
        """Test missing data leaves literal HTML and removes placeholders."""
        assert render("<p>{{x}}</p>{{#if y}}Y{{/if}}", None) == "<p></p>"

    def test_data_is_not_mutated(self) -> None:
        """Test rendering leaves the data record untouched."""
        data = {"x": "<b>", "items": ["a"]}
        render("{{x}}{{items}}", data)

        assert data == {"x": "<b>", "items": ["a"]}


class TestTemplateRendererOptions:
    """Tests for configurable escaping."""

    def test_custom_raw_fields(self) -> None:
        """Test raw fields can be replaced."""
        renderer = TemplateRenderer(raw_fields=["body"])

        assert renderer.render("{{body}}", {"body": "<i>x</i>"}) == "<i>x</i>"
        assert renderer.render("{{procedure}}", {"procedure": "<li>"}) == "&lt;li&gt;"

    def test_sniff_markup_skips_escaping_for_markup(self) -> None:
        """Test the markup heuristic when enabled."""
        renderer = TemplateRenderer(sniff_markup=True)

        assert renderer.render("{{x}}", {"x": "  <b>hi</b>"}) == "  <b>hi</b>"
        assert renderer.render("{{x}}", {"x": "Fish &amp; Chips"}) == "Fish &amp; Chips"
        assert renderer.render("{{x}}", {"x": "A & B"}) == "A &amp; B"

    def test_sniff_markup_disabled_by_default(self) -> None:
        """Test already-escaped text is escaped again without sniffing."""
        assert render("{{x}}", {"x": "&amp;"}) == "&amp;amp;"

    def test_stringify_object(self) -> None:
        """Test arbitrary objects are stringified and escaped."""

        class Thing:
            def __str__(self) -> str:
                return "<thing>"

        assert TemplateRenderer().stringify("x", Thing()) == "&lt;thing&gt;"
