"""CLI entry point for rest-parser."""

import json
import logging
from pathlib import Path

import click
import yaml

from rest_parser.errors import RestParseError
from rest_parser.parser.base import RestFlavor, RestFormat, RestRequest
from rest_parser.parser.format import parse_file
from rest_parser.render.curl import CurlRenderer

FLAVOR_CHOICES = ["auto"] + [f.value for f in RestFlavor]


def _load(file_path: Path, flavor: str) -> RestFormat:
    """Parse a REST file, turning parse failures into CLI errors."""
    try:
        return parse_file(file_path, None if flavor == "auto" else RestFlavor(flavor))
    except RestParseError as exc:
        raise click.ClickException(str(exc)) from exc


def _describe(request: RestRequest, number: int) -> str:
    url = request.url.raw
    if request.query:
        url += "?" + "&".join(f"{k}={v.raw}" for k, v in request.query.items())

    lines = [
        f"{number}. {request.name or 'Request'}",
        f"   {request.method.raw} {url}",
        f"   Headers: {len(request.headers)}",
    ]
    if request.authorization:
        lines.append(f"   Auth   : {request.authorization.kind}")
    if request.body:
        lines.append(f"   Body   : {request.body.kind}")
    if request.commands:
        lines.append(f"   Commands: {', '.join(request.commands)}")
    return "\n".join(lines)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Inspect `.http` and `.rest` request files."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--flavor", default="auto", type=click.Choice(FLAVOR_CHOICES), help="File flavor (default: from extension).")
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "json", "yaml"]), help="Output format.")
def show(file_path: Path, flavor: str, fmt: str):
    """Show the requests parsed from a REST file."""
    rest_format = _load(file_path, flavor)

    if fmt == "json":
        click.echo(json.dumps(rest_format.model_dump(mode="json"), indent=2))
        return
    if fmt == "yaml":
        click.echo(yaml.safe_dump(rest_format.model_dump(mode="json"), sort_keys=False, allow_unicode=True))
        return

    click.echo(f"Flavor: {rest_format.flavor.value}")
    click.echo(f"Found {len(rest_format.requests)} requests.\n")
    for number, request in enumerate(rest_format.requests, start=1):
        click.echo(_describe(request, number) + "\n")


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--request", "names", multiple=True, help="Only render requests with this name (repeatable).")
@click.option("--inline", is_flag=True, help="Substitute variable values instead of emitting shell variables.")
def curl(file_path: Path, names: tuple[str, ...], inline: bool):
    """Print a curl command for each request."""
    rest_format = _load(file_path, "auto")

    requests = rest_format.requests
    if names:
        requests = [r for r in requests if r.name in names]
        if not requests:
            raise click.ClickException(f"No request named: {', '.join(names)}")

    renderer = CurlRenderer(rest_format.variables, inline=inline)
    for request in requests:
        click.echo(f"# {request.name or 'Request'}")
        click.echo(renderer.render_request(request) + "\n")


@main.command(name="vars")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show_vars(file_path: Path):
    """Print the variable table of a REST file."""
    rest_format = _load(file_path, "auto")
    for name, value in rest_format.variables.items():
        click.echo(f"{name} = {value.raw}")
