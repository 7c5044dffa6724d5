"""Exceptions raised while parsing REST client files."""

from __future__ import annotations

from pathlib import Path


class RestParseError(ValueError):
    """Base exception for all parse failures."""

    pass


class RequestGrammarError(RestParseError):
    """Raised when a request block does not conform to the HTTP grammar."""

    pass


class QueryStringError(RestParseError):
    """Raised when the query portion of a URL cannot be decoded."""

    def __init__(self, query: str, reason: str):
        self.query = query
        super().__init__(f"Invalid query (Query: {query}): {reason}")


class MalformedTemplateError(RestParseError):
    """Raised when a `{{` placeholder is never closed."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Malformed template: {source!r}")


class AuthorizationError(RestParseError):
    """Raised when an Authorization header value cannot be decoded."""

    pass


class RestFileError(RestParseError):
    """Raised when a REST file cannot be opened or read."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Error reading REST file {str(path)!r}: {reason}")
