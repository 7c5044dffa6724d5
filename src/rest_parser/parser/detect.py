"""Infer the REST file flavor from its extension."""

from pathlib import Path

from .base import RestFlavor

EXTENSION_FLAVORS = {
    ".http": RestFlavor.JETBRAINS,
    ".rest": RestFlavor.VSCODE,
}


def detect_flavor(file_path: Path) -> RestFlavor:
    """Detect the flavor of a REST file.

    `.http` is Jetbrains, `.rest` is VSCode, anything else is Generic.
    """
    return EXTENSION_FLAVORS.get(Path(file_path).suffix.lower(), RestFlavor.GENERIC)
