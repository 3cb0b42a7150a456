"""Name-field rewrites for the template's JSON manifests.

``package.json`` is required: the template always ships one, so its absence
means the fetch produced something unexpected and the run must stop.
``app.json`` is optional and skipped with a warning.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.markup import escape

from .utils import console, load_json, print_warning, save_json


class ManifestError(Exception):
    """Raised when a required manifest is missing or malformed."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


def _read_object(path: Path) -> dict[str, Any]:
    try:
        data = load_json(path)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"{path} is not valid JSON: {exc}", path=path) from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{path} must contain a JSON object", path=path)
    return data


async def update_package_manifest(path: Path, project_name: str) -> dict[str, Any]:
    """Set ``name`` in ``package.json`` and write it back.

    Returns:
        The updated manifest.

    Raises:
        ManifestError: If the file is missing or not a JSON object.
    """
    if not path.is_file():
        raise ManifestError(f"package.json not found: {path}", path=path)

    manifest = _read_object(path)
    manifest["name"] = project_name
    await save_json(manifest, path)
    console.print(f"  [green]+[/green] Updated name in {escape(str(path))}")
    return manifest


async def update_app_manifest(path: Path, project_name: str) -> bool:
    """Set ``name`` and ``displayName`` in ``app.json`` if the file exists.

    Returns:
        ``True`` if the file was rewritten, ``False`` if it was missing.
    """
    if not path.is_file():
        print_warning(f"  app.json not found: {escape(str(path))}. Skipping...")
        return False

    manifest = _read_object(path)
    manifest["name"] = project_name
    manifest["displayName"] = project_name
    await save_json(manifest, path)
    console.print(f"  [green]+[/green] Updated name and displayName in {escape(str(path))}")
    return True
