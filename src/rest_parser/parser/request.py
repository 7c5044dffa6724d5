"""Decode the raw text of one request into a RestRequest.

The request line and headers are run through a strict HTTP/1.x parser
(httptools). Placeholders on the request line are swapped for inert path
tokens first, since `{{ name }}` may contain spaces and would otherwise
break the request-line grammar.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import parse_qsl

import httptools

from rest_parser.errors import QueryStringError, RequestGrammarError

from .base import RestRequest
from .body import SAVE_MARKER, parse_body
from .headers import decode_headers
from .template import Template

logger = logging.getLogger(__name__)

REQUEST_NEWLINE = "\r\n"
BODY_DELIMITER = REQUEST_NEWLINE * 2

MAX_HEADERS = 64
DEFAULT_METHOD = "GET"
DEFAULT_VERSION = "HTTP/1.1"
UNKNOWN_CONTENT_TYPE = "unknown"

_PLACEHOLDER_RE = re.compile(r"\{\{.*?\}\}")
_BAD_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


# -- placeholder escaping -----------------------------------------------------

@dataclass(frozen=True)
class PlaceholderEscape:
    """Maps escape tokens in a request line back to the original placeholders."""

    marker: str
    originals: tuple[str, ...]

    def token(self, index: int) -> str:
        # Leading slash keeps the token valid at the start of a request target
        return f"/{self.marker}{index}{self.marker}"

    def unescape(self, text: str) -> str:
        if not self.originals:
            return text
        pattern = re.escape(f"/{self.marker}") + r"(\d+)" + re.escape(self.marker)
        return re.sub(pattern, lambda m: self.originals[int(m.group(1))], text)


def escape_placeholders(line: str) -> tuple[str, PlaceholderEscape]:
    """Replace every `{{...}}` in `line` with a token that cannot occur in it."""
    marker = "tpl"
    while marker in line:
        marker += "_"

    originals = tuple(_PLACEHOLDER_RE.findall(line))
    escape = PlaceholderEscape(marker, originals)

    counter = iter(range(len(originals)))
    escaped = _PLACEHOLDER_RE.sub(lambda _: escape.token(next(counter)), line)
    return escaped, escape


# -- head / body split --------------------------------------------------------

def split_request_and_body(raw_request: str) -> tuple[str, str | None]:
    """Split a request into its head (request line + headers) and body.

    The head ends at the first blank line. A `>>` save directive written
    directly under the headers also ends the head, and belongs to the body.
    The returned head always ends with a line terminator.
    """
    head, delimiter, body = raw_request.partition(BODY_DELIMITER)

    head_lines = head.split(REQUEST_NEWLINE)
    for index, line in enumerate(head_lines[1:], start=1):
        if line.lstrip().startswith(SAVE_MARKER):
            body = REQUEST_NEWLINE.join(head_lines[index:]) + delimiter + body
            head = REQUEST_NEWLINE.join(head_lines[:index])
            break

    body = body.strip()
    return head + REQUEST_NEWLINE, body or None


# -- strict request-line + header parsing -------------------------------------

class _HeadCollector:
    """Callback target for httptools.HttpRequestParser."""

    def __init__(self):
        self.url = b""
        self.headers: list[tuple[bytes, bytes]] = []

    def on_url(self, url: bytes) -> None:
        self.url += url

    def on_header(self, name: bytes, value: bytes) -> None:
        self.headers.append((name, value))


def _normalize_request_line(line: str) -> str:
    """Fill in the method and HTTP version when the line leaves them out."""
    parts = line.split()
    if len(parts) == 1:
        return f"{DEFAULT_METHOD} {parts[0]} {DEFAULT_VERSION}"
    if len(parts) == 2:
        if parts[1].startswith("HTTP/"):
            return f"{DEFAULT_METHOD} {parts[0]} {parts[1]}"
        return f"{parts[0]} {parts[1]} {DEFAULT_VERSION}"
    return " ".join(parts)


def parse_request_head(head: str) -> tuple[str, str, list[tuple[bytes, bytes]]]:
    """Parse the request line and headers.

    Returns the method, the request target with placeholders restored, and
    the raw header pairs in order.

    Raises:
        RequestGrammarError: If the head is rejected by the HTTP parser, has
            no path, or has more than MAX_HEADERS headers.
    """
    request_line, newline, header_block = head.partition(REQUEST_NEWLINE)
    # Indentation in front of a header is not part of it
    header_block = REQUEST_NEWLINE.join(
        line.lstrip() for line in header_block.split(REQUEST_NEWLINE)
    )
    escaped_line, escape = escape_placeholders(request_line)
    escaped_head = _normalize_request_line(escaped_line) + newline + header_block

    collector = _HeadCollector()
    parser = httptools.HttpRequestParser(collector)
    try:
        parser.feed_data((escaped_head + REQUEST_NEWLINE).encode("utf-8"))
    except httptools.HttpParserUpgrade:
        # Upgrade/CONNECT requests stop after the headers, which is all we need
        pass
    except httptools.HttpParserError as exc:
        raise RequestGrammarError(f"Failed to parse request! {exc}") from exc

    if not collector.url:
        raise RequestGrammarError("There is no path for this request!")
    if len(collector.headers) > MAX_HEADERS:
        raise RequestGrammarError(
            f"Too many headers: {len(collector.headers)} (max {MAX_HEADERS})"
        )

    method = parser.get_method().decode("ascii")
    path = escape.unescape(collector.url.decode("utf-8"))
    return method, path, collector.headers


# -- url / query --------------------------------------------------------------

def parse_query(query_string: str) -> dict[str, Template]:
    """Decode `a=1&b={{x}}` into an ordered mapping of Templates.

    Raises:
        QueryStringError: On invalid percent-encoding.
    """
    if _BAD_PERCENT_RE.search(query_string):
        raise QueryStringError(query_string, "invalid percent-encoding")
    try:
        pairs = parse_qsl(query_string, keep_blank_values=True, errors="strict")
    except UnicodeDecodeError as exc:
        raise QueryStringError(query_string, str(exc)) from exc

    return {key: Template.from_text(value) for key, value in pairs}


def split_url(path: str) -> tuple[Template, dict[str, Template]]:
    """Split a request target at the first `?` into URL and query."""
    url, question_mark, query_string = path.partition("?")
    if not question_mark:
        return Template.from_text(path), {}
    return Template.from_text(url), parse_query(query_string)


def _content_type(headers: Mapping[str, Template]) -> str:
    for name, value in headers.items():
        if name.lower() == "content-type":
            return value.raw
    return UNKNOWN_CONTENT_TYPE


def decode_request(
    raw_request: str,
    name: str | None = None,
    commands: Mapping[str, str | None] | None = None,
) -> RestRequest:
    """Convert the raw text of one request into a RestRequest.

    Raises:
        RequestGrammarError: If the request line or headers are invalid.
        QueryStringError: If the query string is malformed.
        MalformedTemplateError: If the body has an unclosed `{{`.
    """
    head, raw_body = split_request_and_body(raw_request.strip())
    method, path, raw_headers = parse_request_head(head)
    url, query = split_url(path)
    decoded = decode_headers(raw_headers)

    body = None
    if raw_body is not None:
        body = parse_body(raw_body, _content_type(decoded.headers))

    logger.debug("Decoded request %s %s (name=%r)", method, path, name)
    return RestRequest(
        name=name,
        method=Template.from_text(method),
        url=url,
        query=query,
        headers=decoded.headers,
        authorization=decoded.authorization,
        body=body,
        commands=dict(commands or {}),
    )
