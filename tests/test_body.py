import pytest

from rest_parser.errors import MalformedTemplateError
from rest_parser.parser.base import LoadFromFileBody, SaveToFileBody, TextBody
from rest_parser.parser.body import FORM_CONTENT_TYPE, parse_body
from rest_parser.parser.template import Template, Variable


class TestLoadFromFile:
    def test_plain_load(self):
        body = parse_body("< file.txt", "unknown")
        assert body == LoadFromFileBody(
            process_variables=False,
            encoding=None,
            filepath=Template.parse("file.txt"),
        )

    def test_process_variables_with_encoding(self):
        body = parse_body("<@latin1 file.txt", "unknown")
        assert body == LoadFromFileBody(
            process_variables=True,
            encoding="latin1",
            filepath=Template.parse("file.txt"),
        )

    def test_process_variables_without_encoding(self):
        body = parse_body("<@ ./data/{{name}}.json", "application/json")
        assert body.process_variables is True
        assert body.encoding is None
        assert body.filepath.parts[1] == Variable("name")

    def test_missing_space_is_text(self):
        assert isinstance(parse_body("<file.txt", "unknown"), TextBody)

    def test_html_is_text(self):
        assert isinstance(parse_body("<html><body></body></html>", "text/html"), TextBody)


class TestSaveToFile:
    def test_text_then_save(self):
        body = parse_body('{"a":1}\n\n>> out.json', "application/json")
        assert body == SaveToFileBody(
            text=Template.parse('{"a":1}'),
            filepath=Template.parse("out.json"),
        )

    def test_save_without_text(self):
        body = parse_body(">> ./response.json", "unknown")
        assert body.text.raw == ""
        assert body.filepath.raw == "./response.json"

    def test_marker_needs_space_and_path(self):
        assert isinstance(parse_body("data\n>>out.json", "unknown"), TextBody)
        assert isinstance(parse_body("data\n>> ", "unknown"), TextBody)

    def test_save_on_the_same_line(self):
        body = parse_body('{"a":1} >> out.json', "application/json")
        assert body == SaveToFileBody(
            text=Template.parse('{"a":1}'),
            filepath=Template.parse("out.json"),
        )

    def test_first_marker_splits(self):
        body = parse_body("a >> b >> c", "text/plain")
        assert body.text.raw == "a"
        assert body.filepath.raw == "b >> c"

    def test_shift_operator_without_space_is_text(self):
        assert isinstance(parse_body("x = a>>2", "text/plain"), TextBody)


class TestTextBody:
    def test_json_body(self):
        body = parse_body('{\r\n  "user": "{{user}}"\r\n}', "application/json")
        assert isinstance(body, TextBody)
        assert body.text.variables() == ["user"]

    def test_form_body_is_collapsed(self):
        body = parse_body("name=rest&\r\nlang=python&\r\nv={{v}}", FORM_CONTENT_TYPE)
        assert body.text.raw == "name=rest&lang=python&v={{v}}"

    def test_non_form_keeps_newlines(self):
        body = parse_body("line one\r\nline two", "text/plain")
        assert body.text.raw == "line one\r\nline two"

    def test_form_with_charset_is_not_collapsed(self):
        body = parse_body("a=1&\r\nb=2", FORM_CONTENT_TYPE + "; charset=utf-8")
        assert body.text.raw == "a=1&\r\nb=2"

    def test_unclosed_placeholder_fails(self):
        with pytest.raises(MalformedTemplateError):
            parse_body('{"a": "{{oops"}', "application/json")
