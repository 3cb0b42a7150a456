"""Literal identifier substitution and directory renames for native projects.

The template bakes two identifiers into its native projects: the iOS target
name (``reactNativeBoilerPlate``) and the lower-cased Android package segment
(``reactnativeboilerplate``). A ``RenameRule`` pairs one of them with its
replacement and the files and directories it touches.

Replacement is plain substring replacement: the old identifier is never
interpreted as a regular expression.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from rich.markup import escape

from .utils import console, print_warning

ANDROID_SOURCE_ROOT = Path("android", "app", "src", "main", "java", "com")
ANDROID_STRINGS = Path("android", "app", "src", "main", "res", "values", "strings.xml")


class RenameError(Exception):
    """Raised when a native target cannot be rewritten."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


def replace_in_file(path: Path, old: str, new: str) -> int:
    """Replace every occurrence of *old* with *new* in the file at *path*.

    The whole file is read, replaced in memory and written back. Files with
    no occurrences are not rewritten.

    Returns:
        Number of occurrences replaced.

    Raises:
        RenameError: If the file is not valid UTF-8 text.
    """
    if not old:
        raise ValueError("old literal must not be empty")

    # Bytes in and out so line endings survive untouched.
    try:
        content = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RenameError(f"{path} is not valid UTF-8 text: {exc.reason}", path=path) from exc
    count = content.count(old)
    if count:
        path.write_bytes(content.replace(old, new).encode("utf-8"))
    console.print(f"  [green]+[/green] Replaced {count} occurrence(s) in {escape(str(path))}")
    return count


def replace_in_files(paths: list[Path], old: str, new: str) -> list[Path]:
    """Apply :func:`replace_in_file` to each existing path in order.

    Missing files are reported and skipped; they are never created.

    Returns:
        The paths that existed and were processed.
    """
    processed: list[Path] = []
    for path in paths:
        if not path.is_file():
            print_warning(f"  File not found: {escape(str(path))}. Skipping...")
            continue
        replace_in_file(path, old, new)
        processed.append(path)
    return processed


def rename_directory(old_dir: Path, new_dir: Path) -> bool:
    """Move *old_dir* to *new_dir* when it exists.

    Returns:
        ``True`` if the directory was renamed, ``False`` if it was missing.
    """
    if not old_dir.is_dir():
        print_warning(f"  Directory not found: {escape(str(old_dir))}. Skipping rename...")
        return False

    old_dir.rename(new_dir)
    console.print(
        f"  [green]+[/green] Renamed directory: {escape(str(old_dir))} -> {escape(str(new_dir))}"
    )
    return True


class RenameRule(BaseModel):
    """An (old, new) identifier pair and the targets it applies to."""

    old: str = Field(..., min_length=1)
    new: str = Field(..., min_length=1)
    files: list[Path] = Field(default_factory=list)
    directories: list[tuple[Path, Path]] = Field(
        default_factory=list,
        description="(current path, renamed path) pairs",
    )

    def apply_files(self) -> list[Path]:
        """Substitute the identifier in every target file."""
        return replace_in_files(self.files, self.old, self.new)

    def apply_directories(self) -> list[Path]:
        """Rename every target directory; returns the new paths created."""
        return [new for old, new in self.directories if rename_directory(old, new)]


def ios_rule(project_root: Path, old_id: str, new_id: str) -> RenameRule:
    """Rule for the iOS project: Podfile, Xcode project and workspace, app folder."""
    ios_root = project_root / "ios"
    return RenameRule(
        old=old_id,
        new=new_id,
        files=[
            ios_root / "Podfile",
            ios_root / f"{old_id}.xcodeproj" / "project.pbxproj",
            ios_root / f"{old_id}.xcworkspace" / "contents.xcworkspacedata",
        ],
        directories=[(ios_root / old_id, ios_root / new_id)],
    )


def android_rule(project_root: Path, old_id: str, new_id: str) -> RenameRule:
    """Rule for the Android package.

    Android package segments are lower-case, so *new_id* is lower-cased.
    Source files are addressed under the package directory's current name;
    the directory itself is renamed by :meth:`RenameRule.apply_directories`
    which must run after :meth:`RenameRule.apply_files`.
    """
    package_id = new_id.lower()
    source_root = project_root / ANDROID_SOURCE_ROOT
    package_dir = source_root / old_id
    return RenameRule(
        old=old_id,
        new=package_id,
        files=[
            package_dir / "MainActivity.kt",
            package_dir / "MainApplication.kt",
            project_root / ANDROID_STRINGS,
        ],
        directories=[(package_dir, source_root / package_id)],
    )
