"""create-rn-boilerplate configuration.

Centralised, typed configuration for the scaffolding pipeline. Every constant
the pipeline relies on (template location, baked-in identifiers, external
commands) lives here as a Pydantic v2 model so it can be validated at
construction time and overridden from JSON or environment variables.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_TEMPLATE_REPO = "Tanishk-P/React-Native-Boiler-Plate"
DEFAULT_IOS_IDENTIFIER = "reactNativeBoilerPlate"
DEFAULT_ANDROID_IDENTIFIER = "reactnativeboilerplate"
DEFAULT_COMMIT_MESSAGE = "React Native Boiler Plate initialised"
PROJECT_HOMEPAGE = "https://github.com/Tanishk-P/create-rn-boilerplate"


class Config(BaseModel):
    """Global create-rn-boilerplate configuration.

    Instances are typically created once by the CLI entry point and handed
    to ``Pipeline``.
    """

    template_repo: str = Field(
        default=DEFAULT_TEMPLATE_REPO, description="GitHub ``owner/repo`` of the template"
    )
    template_ref: str = Field(
        default="", description="Branch, tag or commit to fetch (empty = default branch)"
    )
    output_dir: Path = Field(default=Path("."))

    ios_identifier: str = Field(default=DEFAULT_IOS_IDENTIFIER, min_length=1)
    android_identifier: str = Field(default=DEFAULT_ANDROID_IDENTIFIER, min_length=1)

    git_branch: str = Field(default="main", min_length=1)
    commit_message: str = Field(default=DEFAULT_COMMIT_MESSAGE, min_length=1)
    package_manager: list[str] = Field(default_factory=lambda: ["yarn"])
    rename_command: list[str] = Field(default_factory=lambda: ["npx", "react-native-rename"])
    rename_flags: list[str] = Field(default_factory=lambda: ["--skipGitStatusCheck"])

    # None means child processes may run for as long as they need.
    command_timeout: int | None = Field(default=None, ge=1)
    http_timeout: int = Field(default=60, ge=1, description="Template download timeout in seconds")

    @field_validator("template_repo")
    @classmethod
    def _check_repo(cls, value: str) -> str:
        owner, sep, repo = value.strip().partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"template_repo must look like 'owner/repo', got {value!r}")
        return value.strip()

    @field_validator("package_manager", "rename_command")
    @classmethod
    def _check_command(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("command must contain at least the executable name")
        return value

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def project_dir(self, project_name: str) -> Path:
        """Directory the new project is materialised into."""
        return (self.output_dir / project_name).resolve()

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            RNB_TEMPLATE_REPO, RNB_TEMPLATE_REF, RNB_OUTPUT_DIR,
            RNB_IOS_IDENTIFIER, RNB_ANDROID_IDENTIFIER, RNB_GIT_BRANCH,
            RNB_COMMIT_MESSAGE, RNB_PACKAGE_MANAGER, RNB_COMMAND_TIMEOUT,
            RNB_HTTP_TIMEOUT.

        ``RNB_PACKAGE_MANAGER`` is split like a shell command line.
        """
        kwargs: dict[str, Any] = {}
        simple = {
            "RNB_TEMPLATE_REPO": "template_repo",
            "RNB_TEMPLATE_REF": "template_ref",
            "RNB_IOS_IDENTIFIER": "ios_identifier",
            "RNB_ANDROID_IDENTIFIER": "android_identifier",
            "RNB_GIT_BRANCH": "git_branch",
            "RNB_COMMIT_MESSAGE": "commit_message",
        }
        for env_name, field_name in simple.items():
            if os.environ.get(env_name):
                kwargs[field_name] = os.environ[env_name]

        if os.environ.get("RNB_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["RNB_OUTPUT_DIR"])
        if os.environ.get("RNB_PACKAGE_MANAGER"):
            kwargs["package_manager"] = shlex.split(os.environ["RNB_PACKAGE_MANAGER"])
        if os.environ.get("RNB_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["RNB_COMMAND_TIMEOUT"])
        if os.environ.get("RNB_HTTP_TIMEOUT"):
            kwargs["http_timeout"] = int(os.environ["RNB_HTTP_TIMEOUT"])

        return cls(**kwargs)
