"""Tests for the two template engines and the helper registry."""

import pytest

from rendera.context import RenderContext
from rendera.engine import (
    EjsEngine,
    EngineVariant,
    HandlebarsEngine,
    HelperRegistry,
    create_engine,
    render,
)
from rendera.errors import NotFoundError, TemplateError, UnsupportedEngineError
from rendera.helpers import builtin_helpers


@pytest.fixture
def context(tmp_path):
    return RenderContext(
        values={"foo": "bar", "n": 21, "nothing": None, "html": "<a & b>"},
        env={"HOME": "/home/test"},
        helpers=builtin_helpers(tmp_path),
        working_dir=tmp_path,
    )


class TestEngineVariant:
    def test_parse(self):
        assert EngineVariant.parse("ejs") is EngineVariant.EJS
        assert EngineVariant.parse("handlebars") is EngineVariant.HANDLEBARS
        assert EngineVariant.parse(EngineVariant.HANDLEBARS) is EngineVariant.HANDLEBARS

    def test_unset_is_ejs(self):
        assert EngineVariant.parse(None) is EngineVariant.EJS

    def test_unsupported(self):
        with pytest.raises(UnsupportedEngineError, match="mustache") as exc_info:
            EngineVariant.parse("mustache")
        assert exc_info.value.variant == "mustache"

    def test_create_engine(self):
        assert isinstance(create_engine("ejs"), EjsEngine)
        registry = HelperRegistry()
        engine = create_engine("handlebars", registry)
        assert isinstance(engine, HandlebarsEngine)
        assert engine.registry is registry


class TestHelperRegistry:
    def test_register_overwrites(self):
        registry = HelperRegistry()
        registry.register("a", len)
        registry.register("a", str)
        assert registry["a"] is str
        assert len(registry) == 1

    def test_unregister(self):
        registry = HelperRegistry()
        registry.register("a", len)
        registry.unregister("a")
        registry.unregister("never-registered")
        assert "a" not in registry

    def test_replace_drops_everything_else(self):
        registry = HelperRegistry()
        registry.register("stale", len)
        registry.replace({"fresh": str})
        assert list(registry) == ["fresh"]

    def test_as_dict_is_a_copy(self):
        registry = HelperRegistry()
        registry.register("a", len)
        registry.as_dict()["b"] = str
        assert "b" not in registry


class TestEjs:
    def test_values_and_env(self, context):
        out = render("foo: <%= values.foo %> home: <%= env.HOME %>", context, "ejs")
        assert out == "foo: bar home: /home/test"

    def test_helpers_are_top_level_names(self, context):
        assert render("<%= toBase64(values.foo) %>", context, "ejs") == "YmFy"

    def test_undefined_renders_empty(self, context):
        assert render("[<%= values.missing %>]", context, "ejs") == "[]"

    def test_none_renders_empty(self, context):
        assert render("[<%= values.nothing %>]", context, "ejs") == "[]"

    def test_no_escaping(self, context):
        assert render("<%= values.html %>", context, "ejs") == "<a & b>"

    def test_raw_output_tag(self, context):
        assert render("<%- values.html %>", context, "ejs") == "<a & b>"

    def test_statements_and_comments(self, context):
        template = "<%# note %><% for i in range(3) %><%= i %><% endfor %>"
        assert render(template, context, "ejs") == "012"

    def test_keeps_trailing_newline(self, context):
        assert render("<%= values.foo %>\n", context, "ejs") == "bar\n"

    def test_helpers_not_visible_as_engine_globals(self, context):
        engine = EjsEngine()
        assert "toBase64" not in engine.environment().globals

    def test_booleans_render_lowercase(self, context):
        context.values["on"] = True
        assert render("<%= values.on %>", context, "ejs") == "true"

    def test_dash_close_swallows_only_the_newline(self, context):
        template = "<% if values.foo -%>\n  x: 1\n<% endif -%>\ny: 2\n"
        assert render(template, context, "ejs") == "  x: 1\ny: 2\n"

    def test_dash_close_on_output_tag(self, context):
        assert render("<%= values.foo -%>\n  next", context, "ejs") == "bar  next"


class TestHandlebars:
    def test_values_and_env(self, context):
        out = render("foo: {{values.foo}} home: {{ env.HOME }}", context, "handlebars")
        assert out == "foo: bar home: /home/test"

    def test_helper_call(self, context):
        out = render("{{quote values.foo}} {{trunc values.foo 2}}", context, "handlebars")
        assert out == '"bar" "ba"'

    def test_string_and_keyword_arguments(self, context, monkeypatch):
        monkeypatch.setattr(
            "rendera.aws.get_parameter_value", lambda name, query=None: f"{name}|{query}"
        )
        out = render('{{getParameter "/p" query="Parameter.ARN"}}', context, "handlebars")
        assert out == "/p|Parameter.ARN"

    def test_subexpression(self, context):
        context.values["conf"] = {"a": 1, "b": 2}
        out = render("conf:\n{{indent (toYaml values.conf) 2}}", context, "handlebars")
        assert out == "conf:\n  a: 1\n  b: 2"

    def test_each(self, context):
        context.values["names"] = ["a", "b"]
        out = render("{{#each values.names}}{{this}},{{/each}}", context, "handlebars")
        assert out == "a,b,"

    def test_each_with_helpers_inside(self, context):
        context.values["names"] = ["a", "b"]
        out = render(
            "{{#each values.names}}{{quote this}} {{/each}}", context, "handlebars"
        )
        assert out == '"a" "b" '

    @pytest.mark.parametrize("on,expected", [(True, "yes"), (False, "no")])
    def test_if_else(self, context, on, expected):
        context.values["on"] = on
        out = render("{{#if values.on}}yes{{else}}no{{/if}}", context, "handlebars")
        assert out == expected

    def test_standalone_block_lines_removed(self, context):
        context.values["names"] = ["a", "b"]
        template = "list:\n{{#each values.names}}\n- {{this}}\n{{/each}}\ndone"
        assert render(template, context, "handlebars") == "list:\n- a\n- b\ndone"

    def test_no_escaping(self, context):
        assert render("{{ values.html }}", context, "handlebars") == "<a & b>"

    def test_triple_stash(self, context):
        assert render("{{{values.html}}}", context, "handlebars") == "<a & b>"

    def test_none_and_undefined_render_empty(self, context):
        out = render("[{{ values.nothing }}|{{ values.missing }}]", context, "handlebars")
        assert out == "[|]"

    def test_booleans_render_lowercase(self, context):
        context.values["on"] = True
        assert render("{{values.on}}", context, "handlebars") == "true"

    def test_registry_replaced_on_render(self, context):
        registry = HelperRegistry()
        registry.register("stale", lambda: "stale")
        render("{{ values.foo }}", context, "handlebars", registry)
        assert "stale" not in registry
        assert set(registry) == set(context.helpers)

    def test_helpers_reach_template_through_registry(self, context):
        registry = HelperRegistry()
        context.helpers["double"] = lambda x: x * 2
        assert render("{{double values.n}}", context, "handlebars", registry) == "42"
        assert registry["double"](1) == 2

    def test_directory_bound_helpers_follow_latest_render(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        for d, text in ((first, "one"), (second, "two")):
            d.mkdir()
            (d / "f.txt").write_text(text)

        registry = HelperRegistry()
        outputs = [
            render(
                '{{getFile "f.txt"}}',
                RenderContext(helpers=builtin_helpers(d), working_dir=d),
                "handlebars",
                registry,
            )
            for d in (first, second)
        ]
        assert outputs == ["one", "two"]


class TestErrors:
    def test_syntax_error(self, context):
        with pytest.raises(TemplateError) as exc_info:
            render("line one\n<% if %>", context, "ejs")
        assert exc_info.value.lineno == 2
        assert exc_info.value.message.startswith("line 2:")

    def test_undefined_attribute_chain(self, context):
        with pytest.raises(TemplateError):
            render("<%= values.missing.deeper %>", context, "ejs")

    def test_unclosed_handlebars_block(self, context):
        with pytest.raises(TemplateError):
            render("{{#if values.foo}}x", context, "handlebars")

    def test_unknown_handlebars_helper(self, context):
        with pytest.raises(TemplateError, match="nope"):
            render("{{nope values.foo}}", context, "handlebars")

    @pytest.mark.parametrize(
        "template,variant",
        [
            ('<%= getFile("absent.txt") %>', "ejs"),
            ('{{getFile "absent.txt"}}', "handlebars"),
        ],
    )
    def test_helper_errors_propagate_unchanged(self, context, template, variant):
        with pytest.raises(NotFoundError):
            render(template, context, variant)

    def test_unsupported_variant(self, context):
        with pytest.raises(UnsupportedEngineError):
            render("x", context, "jade")
