"""Request body parsing: inline text, load-from-file, save-to-file."""

from __future__ import annotations

import re

from .base import LoadFromFileBody, SaveToFileBody, TextBody
from .template import Template

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# `< path`, `<@ path`, `<@latin1 path`
_LOAD_RE = re.compile(r"<(@)?([A-Za-z0-9]+)? (.+)", re.DOTALL)
SAVE_MARKER = ">>"


def _load_from_file(body: str) -> LoadFromFileBody | None:
    match = _LOAD_RE.fullmatch(body)
    if not match:
        return None
    return LoadFromFileBody(
        process_variables=match.group(1) is not None,
        encoding=match.group(2),
        filepath=Template.parse(match.group(3)),
    )


def _save_to_file(body: str) -> SaveToFileBody | None:
    # `text >> path`: the first marker splits text from path
    index = body.find(SAVE_MARKER)
    if index < 0:
        return None
    rest = body[index + len(SAVE_MARKER):]
    if not rest.startswith(" ") or len(rest) == 1:
        return None
    return SaveToFileBody(
        text=Template.parse(body[:index].rstrip()),
        filepath=Template.parse(rest[1:]),
    )


def parse_body(raw_body: str, content_type: str) -> TextBody | LoadFromFileBody | SaveToFileBody:
    """Classify a body block.

    Form-encoded bodies have their line breaks removed first, so a form
    wrapped across several lines becomes one encoded line.

    Raises:
        MalformedTemplateError: If the body or a file path has an unclosed `{{`.
    """
    body = raw_body.strip()
    if content_type == FORM_CONTENT_TYPE:
        body = body.replace("\r", "").replace("\n", "")

    return _load_from_file(body) or _save_to_file(body) or TextBody(text=Template.parse(body))
