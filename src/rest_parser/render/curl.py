"""Curl renderer: converts parsed requests into curl command lines."""

import re
from collections.abc import Mapping

from rest_parser.parser.base import (
    BasicAuth,
    BearerAuth,
    LoadFromFileBody,
    RestRequest,
    SaveToFileBody,
    TextBody,
)
from rest_parser.parser.template import Template, Text

# request command -> curl option, for commands that take a number of seconds
COMMAND_OPTIONS = {
    "timeout": "--max-time",
    "connection-timeout": "--connect-timeout",
}


def _shell_escape(text: str) -> str:
    """Escape text for use inside a double-quoted shell string."""
    return re.sub(r'([\\"$`])', r"\\\1", text)


def shell_name(name: str) -> str:
    """Variable names may contain `.` and `-`, shell names may not."""
    return re.sub(r"[^A-Za-z0-9_]", "_", name)


class CurlRenderer:
    """Renders RestRequests as curl commands.

    By default placeholders become shell variables (`${HOST}`) and the
    variable table is emitted as shell assignments in front of each command.
    With `inline=True` placeholders are substituted with their values.
    """

    def __init__(self, variables: Mapping[str, Template] | None = None, inline: bool = False):
        self.variables = dict(variables or {})
        self.inline = inline

    def _render_template(self, template: Template) -> str:
        if self.inline:
            return _shell_escape(template.render(self.variables))
        return "".join(
            _shell_escape(part.text) if isinstance(part, Text) else f"${{{shell_name(part.name)}}}"
            for part in template.parts
        )

    def _render_variables(self) -> str:
        if self.inline or not self.variables:
            return ""
        assignments = [
            f'{shell_name(name)}="{self._render_template(value)}"'
            for name, value in self.variables.items()
        ]
        return "; ".join(assignments) + "; "

    def _render_url(self, request: RestRequest) -> str:
        url = self._render_template(request.url)
        params = "&".join(
            f"{key}={self._render_template(value)}" for key, value in request.query.items()
        )
        return f'"{url}?{params}"' if params else f'"{url}"'

    def _render_headers(self, request: RestRequest) -> list[str]:
        options = []
        for name, value in request.headers.items():
            options.append(f'-H "{name}: {self._render_template(value)}"')

        auth = request.authorization
        if isinstance(auth, BearerAuth):
            options.append(f'-H "Authorization: Bearer {_shell_escape(auth.token)}"')
        elif isinstance(auth, BasicAuth):
            credentials = auth.username if auth.password is None else f"{auth.username}:{auth.password}"
            options.append(f'-u "{_shell_escape(credentials)}"')
        return options

    def _render_body(self, request: RestRequest) -> list[str]:
        body = request.body
        if isinstance(body, TextBody):
            return [f'--data-raw "{self._render_body_text(body.text)}"']
        if isinstance(body, LoadFromFileBody):
            return [f'--data-binary "@{self._render_template(body.filepath)}"']
        if isinstance(body, SaveToFileBody):
            options = [f'-o "{self._render_template(body.filepath)}"']
            if body.text.raw:
                options.append(f'--data-raw "{self._render_body_text(body.text)}"')
            return options
        return []

    def _render_body_text(self, text: Template) -> str:
        return self._render_template(text).replace("\r\n", "\n")

    def _render_commands(self, request: RestRequest) -> list[str]:
        options = []
        for name, params in request.commands.items():
            option = COMMAND_OPTIONS.get(name)
            if option and params and params.isdigit():
                options.append(f"{option} {params}")
        return options

    def render_request(self, request: RestRequest) -> str:
        """Render a single request as one curl command line."""
        method = self._render_template(request.method)
        parts = ["curl", self._render_url(request), "-X", method]
        parts.extend(self._render_commands(request))
        parts.extend(self._render_headers(request))
        parts.extend(self._render_body(request))
        return self._render_variables() + " ".join(parts)
