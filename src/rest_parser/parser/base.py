"""Data models for parsed REST client files.

The parser turns `.http` / `.rest` text into these models. Every string
field that may hold `{{ variable }}` placeholders is a Template.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .template import Template


class RestFlavor(str, Enum):
    """Dialect of the REST file format."""

    JETBRAINS = "jetbrains"  # .http
    VSCODE = "vscode"  # .rest
    GENERIC = "generic"


class BearerAuth(BaseModel):
    """`Authorization: Bearer <token>`"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bearer"] = "bearer"
    token: str


class BasicAuth(BaseModel):
    """`Authorization: Basic <base64(username[:password])>`"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["basic"] = "basic"
    username: str
    password: str | None = None


Authorization = Annotated[Union[BearerAuth, BasicAuth], Field(discriminator="kind")]


class TextBody(BaseModel):
    """A literal request body."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: Template


class LoadFromFileBody(BaseModel):
    """`< [@][encoding] path`: the body is read from a file when rendered."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["load_from_file"] = "load_from_file"
    process_variables: bool = False
    encoding: str | None = None
    filepath: Template


class SaveToFileBody(BaseModel):
    """`text >> path`: the response is also written to a file."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["save_to_file"] = "save_to_file"
    text: Template
    filepath: Template


Body = Annotated[
    Union[TextBody, LoadFromFileBody, SaveToFileBody],
    Field(discriminator="kind"),
]


class RestRequest(BaseModel):
    """A single request from a REST file."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    method: Template = Field(default_factory=lambda: Template.from_text("GET"))
    url: Template
    query: dict[str, Template] = {}
    headers: dict[str, Template] = {}
    authorization: Authorization | None = None
    body: Body | None = None
    commands: dict[str, str | None] = {}  # `# @no-log`, `# @timeout 300`


class RestFormat(BaseModel):
    """A whole parsed REST file: requests plus the variable table."""

    model_config = ConfigDict(frozen=True)

    requests: list[RestRequest]
    variables: dict[str, Template] = {}
    flavor: RestFlavor = RestFlavor.GENERIC

    def get_request(self, name: str) -> RestRequest | None:
        """Return the first request named `name`, if any."""
        for request in self.requests:
            if request.name == name:
                return request
        return None
