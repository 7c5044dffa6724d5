"""Header decoding, including the Authorization header."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field

from rest_parser.errors import AuthorizationError, RequestGrammarError

from .base import BasicAuth, BearerAuth
from .template import Template

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "
BASIC_PREFIX = "Basic "


@dataclass
class DecodedHeaders:
    headers: dict[str, Template] = field(default_factory=dict)
    authorization: BearerAuth | BasicAuth | None = None


def decode_authorization(value: str) -> BearerAuth | BasicAuth:
    """Decode the value of an Authorization header.

    `Bearer <token>` yields the token as-is. `Basic <base64>` is decoded and
    split on the first colon into username and password; with no colon the
    whole text is the username.

    Raises:
        AuthorizationError: For any other scheme, or invalid base64/UTF-8.
    """
    if value.startswith(BEARER_PREFIX):
        return BearerAuth(token=value[len(BEARER_PREFIX):])

    if value.startswith(BASIC_PREFIX):
        encoded = value[len(BASIC_PREFIX):]
        try:
            decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise AuthorizationError(f"Invalid Basic credentials: {exc}") from exc

        username, colon, password = decoded.partition(":")
        return BasicAuth(username=username, password=password if colon else None)

    raise AuthorizationError(f"Failed to parse auth header: {value!r}")


def decode_headers(raw_headers: list[tuple[bytes, bytes]]) -> DecodedHeaders:
    """Turn raw header pairs into Template values.

    A decodable Authorization header is pulled out into `authorization`; one
    that cannot be decoded is kept as an ordinary header. For duplicate names
    the last value wins.

    Raises:
        RequestGrammarError: If a header value is not valid UTF-8.
    """
    decoded = DecodedHeaders()
    for raw_name, raw_value in raw_headers:
        name = raw_name.decode("ascii")
        try:
            value = raw_value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise RequestGrammarError(f"Cannot parse header {name} as UTF8") from exc

        if name.lower() == AUTHORIZATION_HEADER.lower():
            try:
                decoded.authorization = decode_authorization(value)
                continue
            except AuthorizationError:
                pass

        decoded.headers[name] = Template.from_text(value)
    return decoded
