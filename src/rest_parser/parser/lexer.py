"""Line classifier for REST client files.

Each physical line is classified on its own. The matchers in MATCHERS are
tried in order and the first one that recognizes the line wins; anything
left over is part of a request.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional, Union

from .template import IDENTIFIER_PATTERN, Template

logger = logging.getLogger(__name__)

REQUEST_DELIMITER = "###"
COMMENT_MARKERS = ("//", "#")

_SEPARATOR_RE = re.compile(r"^###(?:[ \t]+([^ \t]*))?")
_NAME_RE = re.compile(r"^(?://|#)[ \t]*@name[= ][ \t]*([^ \t]+)")
_COMMAND_RE = re.compile(r"^(?://|#)[ \t]*@([^ \t]+)[ \t]*(.*)$")
_ASSIGNMENT_RE = re.compile(r"^@(" + IDENTIFIER_PATTERN + r")[ \t]*=[ \t]*(.*)$")
_NEWLINE_RE = re.compile(r"\r?\n")


@dataclass(frozen=True)
class Separator:
    """`###` or `### RequestName`"""

    name: str | None = None


@dataclass(frozen=True)
class Name:
    """`# @name RequestName` or `// @name=RequestName`"""

    name: str


@dataclass(frozen=True)
class Command:
    """`# @no-log` or `# @timeout 300`"""

    name: str
    params: str | None = None


@dataclass(frozen=True)
class Comment:
    pass


@dataclass(frozen=True)
class Assignment:
    """`@HOST = https://example.com`"""

    name: str
    value: str


@dataclass(frozen=True)
class RequestLine:
    """A line of the request itself: request line, header or body."""

    text: str


Line = Union[Separator, Name, Command, RequestLine]
Token = Union[Separator, Name, Command, Comment, Assignment, RequestLine]


def _match_separator(line: str) -> Optional[Token]:
    match = _SEPARATOR_RE.match(line)
    if not match:
        return None
    return Separator(match.group(1) or None)


def _match_name(line: str) -> Optional[Token]:
    match = _NAME_RE.match(line)
    return Name(match.group(1)) if match else None


def _match_command(line: str) -> Optional[Token]:
    match = _COMMAND_RE.match(line)
    if not match:
        return None
    params = match.group(2).rstrip()
    return Command(match.group(1), params or None)


def _match_comment(line: str) -> Optional[Token]:
    # Comments are whole-line only, `//` inside a URL is not a comment
    return Comment() if line.startswith(COMMENT_MARKERS) else None


def _match_assignment(line: str) -> Optional[Token]:
    match = _ASSIGNMENT_RE.match(line)
    return Assignment(match.group(1), match.group(2)) if match else None


MATCHERS: tuple[Callable[[str], Optional[Token]], ...] = (
    _match_separator,
    _match_name,
    _match_command,
    _match_comment,
    _match_assignment,
)


def classify_line(line: str) -> Token:
    """Classify a single line (without its line terminator)."""
    for matcher in MATCHERS:
        token = matcher(line)
        if token is not None:
            return token
    return RequestLine(line if line.strip() else "")


def parse_lines(text: str) -> tuple[list[Line], dict[str, Template]]:
    """Classify every line of `text`.

    Returns the line tokens in document order plus the variable table.
    Comments are dropped. Variable assignments go straight into the table,
    where a later assignment of the same name replaces the earlier value.

    Raises:
        MalformedTemplateError: If a variable value has an unclosed `{{`.
    """
    lines: list[Line] = []
    variables: dict[str, Template] = {}

    # Only `\n` and `\r\n` end a line, other breaks are body content
    stripped = text.strip()
    raw_lines = _NEWLINE_RE.split(stripped) if stripped else []

    for raw_line in raw_lines:
        token = classify_line(raw_line)
        if isinstance(token, Comment):
            continue
        if isinstance(token, Assignment):
            variables[token.name] = Template.parse(token.value)
            continue
        lines.append(token)

    logger.debug("Classified %d lines, %d variables", len(lines), len(variables))
    return lines, variables
