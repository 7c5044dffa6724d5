import pytest

from rest_parser.errors import MalformedTemplateError
from rest_parser.parser.template import Template, Text, Variable


class TestTemplateParse:
    def test_text_and_variables(self):
        template = Template.parse("hello {{name}}! swag")
        assert template.parts == [Text("hello "), Variable("name"), Text("! swag")]

    def test_single_variable(self):
        assert Template.parse("{{name}}").parts == [Variable("name")]

    def test_whitespace_inside_placeholder(self):
        template = Template.parse("{{first }} {{ last }}")
        assert template.parts == [Variable("first"), Text(" "), Variable("last")]

    def test_identifier_characters(self):
        template = Template.parse("{{api.host-v2_x}}")
        assert template.parts == [Variable("api.host-v2_x")]

    def test_empty_template(self):
        template = Template.parse("")
        assert template.parts == []
        assert template.render({}) == ""

    def test_closing_braces_alone_are_text(self):
        assert Template.parse("a }} b").parts == [Text("a }} b")]

    def test_non_identifier_placeholder_is_text(self):
        template = Template.parse("id={{$uuid}}&n={{n}}")
        assert template.parts == [Text("id={{$uuid}}&n="), Variable("n")]

    def test_unclosed_placeholder_is_malformed(self):
        with pytest.raises(MalformedTemplateError):
            Template.parse("hello {{name")

    def test_lenient_keeps_unclosed_remainder(self):
        template = Template.parse("{{a}} and {{b", strict=False)
        assert template.parts == [Variable("a"), Text(" and {{b")]

    def test_from_text_falls_back_to_literal(self):
        template = Template.from_text("hello {{name")
        assert template.parts == [Text("hello {{name")]
        assert template.raw == "hello {{name"


class TestTemplateRoundTrip:
    @pytest.mark.parametrize("source", [
        "plain",
        "{{ HOST }}/get?x={{b}}",
        "{{a}}{{ b }}c",
        "}} {{$x}} {{ y}}",
    ])
    def test_literal_form_rebuilds_raw(self, source):
        template = Template.parse(source)
        assert template.as_literal() == source
        assert str(template) == source

    def test_render_with_no_variables_blanks_placeholders(self):
        template = Template.parse("{{ HOST }}/get?x={{b}}")
        assert template.render({}) == "/get?x="


class TestTemplateRender:
    def test_render_string_values(self):
        template = Template.parse("hello {{name}}!")
        assert template.render({"name": "Joe"}) == "hello Joe!"

    def test_render_template_values_uses_raw(self):
        template = Template.parse("{{HOST}}/get")
        variables = {"HOST": Template.parse("http://x.com")}
        assert template.render(variables) == "http://x.com/get"

    def test_render_does_not_mutate(self):
        template = Template.parse("{{a}}")
        variables = {"a": "1"}
        template.render(variables)
        assert variables == {"a": "1"}
        assert template.parts == [Variable("a")]

    def test_variables_and_is_static(self):
        template = Template.parse("{{a}}/{{b}}/{{a}}")
        assert template.variables() == ["a", "b", "a"]
        assert not template.is_static
        assert Template.parse("static").is_static


class TestTemplateModel:
    def test_string_coerces_to_template(self):
        template = Template.model_validate("{{x}}")
        assert template.parts == [Variable("x")]

    def test_serializes_to_raw(self):
        assert Template.parse("{{ x }}/y").model_dump() == "{{ x }}/y"
