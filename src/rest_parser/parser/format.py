"""Assemble classified lines into requests.

Entry points: `parse` for text already in memory, `parse_file` for a path
on disk (flavor inferred from the extension).
"""

from __future__ import annotations

import logging
from pathlib import Path

from rest_parser.errors import RestFileError

from .base import RestFlavor, RestFormat, RestRequest
from .detect import detect_flavor
from .lexer import Command, Line, Name, RequestLine, Separator, parse_lines
from .request import REQUEST_NEWLINE, decode_request

logger = logging.getLogger(__name__)


class _RequestBuilder:
    """Accumulates the name, commands and text of the request being read."""

    def __init__(self):
        self.requests: list[RestRequest] = []
        self._reset()

    def _reset(self, name: str | None = None) -> None:
        self.name = name
        self.commands: dict[str, str | None] = {}
        self.text = ""

    def flush(self) -> None:
        if self.text.strip():
            self.requests.append(decode_request(self.text, self.name, self.commands))

    def feed(self, line: Line) -> None:
        if isinstance(line, Separator):
            self.flush()
            self._reset(line.name)
        elif isinstance(line, Name):
            self.name = line.name
        elif isinstance(line, Command):
            self.commands[line.name] = line.params
        elif isinstance(line, RequestLine):
            self.text += line.text + REQUEST_NEWLINE


def build_requests(lines: list[Line]) -> list[RestRequest]:
    """Group line tokens into requests, splitting at every separator."""
    builder = _RequestBuilder()
    for line in lines:
        builder.feed(line)
    builder.flush()
    return builder.requests


def parse(text: str, flavor: RestFlavor) -> RestFormat:
    """Parse REST client text.

    Raises:
        RestParseError: If any part of the document cannot be parsed. There is
            no partial result.
    """
    lines, variables = parse_lines(text)
    requests = build_requests(lines)
    logger.debug("Parsed %d requests (%s)", len(requests), flavor.value)
    return RestFormat(requests=requests, variables=variables, flavor=flavor)


def parse_file(file_path: Path | str, flavor: RestFlavor | None = None) -> RestFormat:
    """Read a `.http` / `.rest` file and parse it.

    The flavor is inferred from the file extension unless `flavor` is given.

    Raises:
        RestFileError: If the file cannot be opened or read.
        RestParseError: If the contents cannot be parsed.
    """
    file_path = Path(file_path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RestFileError(file_path, str(exc)) from exc

    logger.debug("Loaded %s (%d chars)", file_path, len(text))
    return parse(text, flavor or detect_flavor(file_path))

