"""Shared pytest fixtures for the create-rn-boilerplate test suite.

Provides reusable fixtures for:
- A miniature copy of the React Native boilerplate on disk
- The same tree packed as a GitHub-style tarball
- Mock subprocess helpers
"""

from __future__ import annotations

import io
import json
import tarfile
import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

IOS_ID = "reactNativeBoilerPlate"
ANDROID_ID = "reactnativeboilerplate"


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_boilerplate(root: Path) -> Path:
    """Lay out the files the pipeline touches, with the template identifiers baked in."""
    _write(
        root / "package.json",
        json.dumps(
            {
                "name": "boilerplate",
                "version": "0.0.1",
                "private": True,
                "scripts": {"android": "react-native run-android", "ios": "react-native run-ios"},
            },
            indent=2,
        ),
    )
    _write(
        root / "app.json",
        json.dumps({"name": IOS_ID, "displayName": IOS_ID}, indent=2),
    )
    _write(
        root / "ios" / "Podfile",
        textwrap.dedent(f"""\
            platform :ios, min_ios_version_supported
            target '{IOS_ID}' do
              config = use_native_modules!
              target '{IOS_ID}Tests' do
                inherit! :complete
              end
            end
        """),
    )
    _write(
        root / "ios" / f"{IOS_ID}.xcodeproj" / "project.pbxproj",
        f"/* {IOS_ID}.app */\nPRODUCT_NAME = {IOS_ID};\nINFOPLIST_FILE = {IOS_ID}/Info.plist;\n",
    )
    _write(
        root / "ios" / f"{IOS_ID}.xcworkspace" / "contents.xcworkspacedata",
        f'<Workspace version = "1.0">\n   <FileRef location = "group:{IOS_ID}.xcodeproj">\n</Workspace>\n',
    )
    _write(root / "ios" / IOS_ID / "AppDelegate.mm", f'self.moduleName = @"{IOS_ID}";\n')

    package_dir = root / "android" / "app" / "src" / "main" / "java" / "com" / ANDROID_ID
    _write(
        package_dir / "MainActivity.kt",
        f'package com.{ANDROID_ID}\n\nclass MainActivity {{\n  override fun getMainComponentName(): String = "{ANDROID_ID}"\n}}\n',
    )
    _write(
        package_dir / "MainApplication.kt",
        f"package com.{ANDROID_ID}\n\nclass MainApplication\n",
    )
    _write(
        root / "android" / "app" / "src" / "main" / "res" / "values" / "strings.xml",
        f'<resources>\n    <string name="app_name">{ANDROID_ID}</string>\n</resources>\n',
    )
    return root


def make_tarball(source: Path, prefix: str = "Tanishk-P-React-Native-Boiler-Plate-1a2b3c4") -> bytes:
    """Pack *source* the way GitHub's tarball endpoint does (single top-level folder)."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        archive.add(source, arcname=prefix)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def boilerplate_tree(tmp_path: Path) -> Path:
    """A project directory as it looks right after the template is fetched."""
    return write_boilerplate(tmp_path / "MyApp")


@pytest.fixture
def boilerplate_tarball(tmp_path: Path) -> bytes:
    """The boilerplate tree packed as a GitHub tarball."""
    source = write_boilerplate(tmp_path / "template-source")
    return make_tarball(source)


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
