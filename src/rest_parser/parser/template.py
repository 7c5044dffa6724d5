"""Template engine for `{{ variable }}` placeholders.

A Template keeps its original source text in `raw` and a parsed list of
parts, each either literal Text or a Variable reference. Rendering
substitutes bound variables and blanks out unbound ones.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator

from rest_parser.errors import MalformedTemplateError

VARIABLE_START = "{{"
VARIABLE_END = "}}"

IDENTIFIER_PATTERN = r"[A-Za-z][A-Za-z0-9_.\-]*"

_VARIABLE_RE = re.compile(r"\{\{[ \t]*(" + IDENTIFIER_PATTERN + r")[ \t]*\}\}")


@dataclass(frozen=True)
class Text:
    """A literal run of text."""

    text: str

    def as_literal(self) -> str:
        return self.text


@dataclass(frozen=True)
class Variable:
    """A `{{ name }}` reference. `source` keeps the exact placeholder text."""

    name: str
    source: str = field(default="", compare=False, repr=False)

    def as_literal(self) -> str:
        return self.source or f"{VARIABLE_START}{self.name}{VARIABLE_END}"


TemplatePart = Union[Text, Variable]


def _split(source: str, strict: bool) -> list[TemplatePart]:
    parts: list[TemplatePart] = []
    pos = 0
    while pos < len(source):
        match = _VARIABLE_RE.match(source, pos)
        if match:
            parts.append(Variable(match.group(1), match.group(0)))
            pos = match.end()
            continue

        if source.startswith(VARIABLE_START, pos):
            if VARIABLE_END not in source[pos + len(VARIABLE_START):]:
                if strict:
                    raise MalformedTemplateError(source)
                parts.append(Text(source[pos:]))
                break
            # `{{` that is not a reference (e.g. `{{$uuid}}`) stays literal
            next_start = source.find(VARIABLE_START, pos + 1)
        else:
            next_start = source.find(VARIABLE_START, pos)

        end = len(source) if next_start == -1 else next_start
        parts.append(Text(source[pos:end]))
        pos = end

    return _merge_text(parts)


def _merge_text(parts: list[TemplatePart]) -> list[TemplatePart]:
    merged: list[TemplatePart] = []
    for part in parts:
        if merged and isinstance(part, Text) and isinstance(merged[-1], Text):
            merged[-1] = Text(merged[-1].text + part.text)
        else:
            merged.append(part)
    return merged


def _split_or_literal(source: str) -> list[TemplatePart]:
    try:
        return _split(source, strict=True)
    except MalformedTemplateError:
        return [Text(source)] if source else []


class Template(BaseModel):
    """A string value made of literal text and variable placeholders."""

    model_config = ConfigDict(frozen=True)

    raw: str
    parts: list[TemplatePart] = []

    @classmethod
    def parse(cls, source: str, strict: bool = True) -> Template:
        """Parse `source` into a Template.

        In strict mode an unclosed `{{` raises MalformedTemplateError. In
        lenient mode the unclosed remainder is kept as literal text.
        """
        return cls(raw=source, parts=_split(source, strict))

    @classmethod
    def from_text(cls, source: str) -> Template:
        """Parse strictly, falling back to a single literal part on failure."""
        return cls(raw=source, parts=_split_or_literal(source))

    @model_validator(mode="before")
    @classmethod
    def _coerce_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"raw": data, "parts": _split_or_literal(data)}
        return data

    @model_serializer
    def _serialize(self) -> str:
        return self.raw

    def render(self, variables: Mapping[str, Template | str]) -> str:
        """Render against `variables`. Unbound names render as empty text."""
        rendered = []
        for part in self.parts:
            if isinstance(part, Text):
                rendered.append(part.text)
                continue
            value = variables.get(part.name)
            if value is None:
                continue
            rendered.append(value.raw if isinstance(value, Template) else value)
        return "".join(rendered)

    def variables(self) -> list[str]:
        """Names referenced by this template, in order of appearance."""
        return [p.name for p in self.parts if isinstance(p, Variable)]

    @property
    def is_static(self) -> bool:
        return not any(isinstance(p, Variable) for p in self.parts)

    def as_literal(self) -> str:
        """Rebuild the source text from the parsed parts."""
        return "".join(p.as_literal() for p in self.parts)

    def __str__(self) -> str:
        return self.raw
