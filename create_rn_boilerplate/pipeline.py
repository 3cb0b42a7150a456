"""create-rn-boilerplate pipeline orchestrator.

Implements the 8-step scaffolding pipeline:

Step 1: NAME         -- Ask for the project name.
Step 2: FETCH        -- Download the template into ``<output>/<name>``.
Step 3: MANIFEST     -- Rewrite ``name`` fields in package.json and app.json.
Step 4: GIT INIT     -- Initialise a git repository.
Step 5: RENAME       -- Run react-native-rename on the native projects.
Step 6: NATIVE FILES -- Replace leftover template identifiers in native files.
Step 7: NATIVE DIRS  -- Rename native directories named after the template.
Step 8: COMMIT       -- Stage, install dependencies and commit.

Each step must succeed before the next one starts. A failure stops the run;
completed steps are not rolled back.

Usage::

    create-rn-boilerplate
    python -m create_rn_boilerplate --name MyApp --output ~/projects
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel

from .config import PROJECT_HOMEPAGE, Config
from .fetcher import FetchError, TemplateFetcher
from .manifest import ManifestError, update_app_manifest, update_package_manifest
from .prompt import ask_project_name, validate_project_name
from .renamer import RenameError, RenameRule, android_rule, ios_rule
from .utils import (
    STEP_NAMES,
    CommandError,
    console,
    error_console,
    format_duration,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    run_checked,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PipelineError(Exception):
    """Raised when a pipeline step fails irrecoverably."""

    def __init__(self, step: int, message: str) -> None:
        self.step = step
        super().__init__(f"Step {step} ({STEP_NAMES.get(step, '?')}): {message}")


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives the eight scaffolding steps in order, stopping at the first failure.

    Attributes:
        config: Pipeline configuration.
        fetcher: Downloads the template repository.
        project_name: Name chosen by the operator (set by step 1 unless given).
        project_dir: Directory of the new project (set by step 2).
        state: In-memory record of what each step did.
    """

    _STEP_METHODS: dict[int, str] = {
        1: "step1_name",
        2: "step2_fetch",
        3: "step3_manifest",
        4: "step4_git_init",
        5: "step5_rename",
        6: "step6_native_files",
        7: "step7_native_dirs",
        8: "step8_commit",
    }

    def __init__(
        self,
        config: Config,
        project_name: str | None = None,
        fetcher: TemplateFetcher | None = None,
    ) -> None:
        self.config = config
        self.project_name = project_name
        self.project_dir: Path | None = None
        self.fetcher = fetcher or TemplateFetcher(
            config.template_repo,
            ref=config.template_ref,
            timeout=config.http_timeout,
        )
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "steps_completed": [],
            "steps_failed": [],
            "success": False,
        }

    # ------------------------------------------------------------------
    # Step dispatch
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute all steps in order.

        Returns:
            The final state dictionary, including a top-level ``success``
            boolean.
        """
        pipeline_start = time.monotonic()

        console.print(
            Panel(
                f"[bold bright_cyan]Welcome to Create My React Native App![/bold bright_cyan]\n"
                f"Template : {escape(self.config.template_repo)}\n"
                f"Output   : {escape(str(self.config.output_dir.resolve()))}",
                title="[bold]create-rn-boilerplate[/bold]",
                border_style="bright_cyan",
            )
        )

        all_success = True

        for step_num in sorted(self._STEP_METHODS):
            step_name = STEP_NAMES[step_num]
            print_step_header(step_num, step_name)

            try:
                method = getattr(self, self._STEP_METHODS[step_num])
                result = await method()
                self.state[f"step{step_num}"] = result
                self.state["steps_completed"].append(step_num)

            except PipelineError as exc:
                all_success = False
                self.state["steps_failed"].append(step_num)
                self.state[f"step{step_num}_error"] = str(exc)
                print_error(f"An error occurred: {escape(str(exc))}")
                # Later steps depend on this one.
                break

            except Exception as exc:
                all_success = False
                self.state["steps_failed"].append(step_num)
                tb = traceback.format_exc()
                self.state[f"step{step_num}_error"] = tb
                print_error(
                    f"An error occurred in step {step_num} ({step_name}): {escape(str(exc))}"
                )
                error_console.print(f"[dim]{escape(tb)}[/dim]")
                break

        total_elapsed = time.monotonic() - pipeline_start
        self.state["success"] = all_success
        self.state["total_duration"] = format_duration(total_elapsed)
        self.state["finished_at"] = datetime.now(timezone.utc).isoformat()

        self._print_final_summary(total_elapsed)
        if all_success:
            self._print_next_steps()
        return self.state

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def step1_name(self) -> dict[str, Any]:
        """Collect the project name, prompting unless one was supplied."""
        if self.project_name is None:
            self.project_name = ask_project_name(console)
        else:
            error = validate_project_name(self.project_name)
            if error:
                raise PipelineError(1, error)

        self.state["project_name"] = self.project_name
        return {"project_name": self.project_name}

    async def step2_fetch(self) -> dict[str, Any]:
        """Materialise the project directory from the template repository."""
        target = self.config.project_dir(self._require_name(2))
        console.print(f"  Cloning boilerplate into [bold]{escape(str(target))}[/bold]...")

        try:
            self.project_dir = await self.fetcher.fetch(target)
        except FetchError as exc:
            raise PipelineError(2, str(exc)) from exc

        self.state["project_dir"] = str(self.project_dir)
        return {"project_dir": str(self.project_dir), "template": self.config.template_repo}

    async def step3_manifest(self) -> dict[str, Any]:
        """Point package.json and app.json at the new project name."""
        root = self._require_project(3)
        name = self._require_name(3)

        try:
            await update_package_manifest(root / "package.json", name)
            app_updated = await update_app_manifest(root / "app.json", name)
        except ManifestError as exc:
            raise PipelineError(3, str(exc)) from exc

        return {"package_json": True, "app_json": app_updated}

    async def step4_git_init(self) -> dict[str, Any]:
        """Initialise version control with an explicit default branch."""
        await self._run(4, ["git", "init", "--initial-branch", self.config.git_branch])
        return {"branch": self.config.git_branch}

    async def step5_rename(self) -> dict[str, Any]:
        """Rewrite native build identifiers with the external rename helper."""
        name = self._require_name(5)
        cmd = [*self.config.rename_command, name, *self.config.rename_flags]
        try:
            await self._run(5, cmd)
        except PipelineError:
            print_error("Failed to rename the project.")
            raise
        return {"command": cmd}

    async def step6_native_files(self) -> dict[str, Any]:
        """Replace the template identifiers left in iOS and Android files."""
        ios, android = self._rules(6)

        try:
            console.print("  Fixing iOS file references...")
            ios_files = ios.apply_files()
            console.print("  Fixing Android package name...")
            android_files = android.apply_files()
        except RenameError as exc:
            raise PipelineError(6, str(exc)) from exc

        return {
            "ios_files": [str(p) for p in ios_files],
            "android_files": [str(p) for p in android_files],
        }

    async def step7_native_dirs(self) -> dict[str, Any]:
        """Rename directories named after the template identifiers."""
        ios, android = self._rules(7)
        renamed = ios.apply_directories() + android.apply_directories()
        return {"renamed": [str(p) for p in renamed]}

    async def step8_commit(self) -> dict[str, Any]:
        """Stage the project, install dependencies and commit."""
        console.print("  Staging files...")
        await self._run(8, ["git", "add", "."])
        console.print("  Installing dependencies...")
        await self._run(8, list(self.config.package_manager))
        console.print("  Committing changes...")
        await self._run(8, ["git", "commit", "-m", self.config.commit_message])
        return {"commit_message": self.config.commit_message}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_name(self, step: int) -> str:
        if not self.project_name:
            raise PipelineError(step, "Project name has not been collected (run step 1 first)")
        return self.project_name

    def _require_project(self, step: int) -> Path:
        if self.project_dir is None:
            raise PipelineError(step, "Project directory does not exist (run step 2 first)")
        return self.project_dir

    def _rules(self, step: int) -> tuple[RenameRule, RenameRule]:
        root = self._require_project(step)
        name = self._require_name(step)
        return (
            ios_rule(root, self.config.ios_identifier, name),
            android_rule(root, self.config.android_identifier, name),
        )

    async def _run(self, step: int, cmd: list[str]) -> None:
        """Run *cmd* inside the project directory, mapping failures to ``PipelineError``."""
        cwd = self._require_project(step)
        try:
            await run_checked(cmd, cwd=cwd, timeout=self.config.command_timeout)
        except CommandError as exc:
            raise PipelineError(step, str(exc)) from exc

    def _print_final_summary(self, total_elapsed: float) -> None:
        """Print the final pipeline summary panel."""
        steps_ok = self.state.get("steps_completed", [])
        steps_fail = self.state.get("steps_failed", [])

        if self.state.get("success"):
            border_style = "bold green"
            status_text = "[bold green]PROJECT CREATED[/bold green]"
        else:
            border_style = "bold red"
            status_text = "[bold red]PROJECT CREATION FAILED[/bold red]"

        detail_lines = [
            status_text,
            "",
            f"Duration  : {format_duration(total_elapsed)}",
            f"Completed : {', '.join(str(s) for s in steps_ok) or 'none'}",
        ]
        if steps_fail:
            detail_lines.append(f"Failed    : {', '.join(str(s) for s in steps_fail)}")
            detail_lines.append("")
            detail_lines.append("Completed steps were not rolled back; clean up before re-running.")

        if self.project_dir is not None:
            detail_lines.extend(["", f"Project   : {escape(str(self.project_dir))}"])

        console.print()
        print_summary_table(self._step_statuses(), title="Steps")
        console.print(
            Panel(
                "\n".join(detail_lines),
                title="[bold]Summary[/bold]",
                border_style=border_style,
            )
        )

    def _step_statuses(self) -> dict[str, str]:
        statuses: dict[str, str] = {}
        for step_num in sorted(self._STEP_METHODS):
            if step_num in self.state["steps_completed"]:
                status = "[green]completed[/green]"
            elif step_num in self.state["steps_failed"]:
                status = "[red]failed[/red]"
            else:
                status = "[dim]not run[/dim]"
            statuses[f"{step_num}. {STEP_NAMES[step_num]}"] = status
        return statuses

    def _print_next_steps(self) -> None:
        name = escape(self.project_name or "")
        print_success(f'Success! Your React Native app "{name}" is ready.')
        console.print(
            f"\n[green]If you like this tool, please give it a star on GitHub:[/green]\n"
            f"   [blue]{PROJECT_HOMEPAGE}[/blue]"
        )
        console.print(
            Panel(
                f"[yellow]cd {name}[/yellow]\n"
                "[yellow]yarn ios # or yarn android[/yellow]",
                title="[blue]Next Steps[/blue]",
                border_style="blue",
            )
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-rn-boilerplate",
        description="Create a new React Native app from the boilerplate template.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-rn-boilerplate\n"
            "  create-rn-boilerplate --name MyApp --output ~/projects\n"
            "  create-rn-boilerplate --config settings.json\n"
        ),
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Project name (prompted for when omitted)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Parent directory for the new project (default: current directory)",
    )
    parser.add_argument(
        "--template",
        default=None,
        help="Template repository as owner/repo",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON settings file (default: built from RNB_* environment variables)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``create-rn-boilerplate``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.name is not None and validate_project_name(args.name):
        parser.error(validate_project_name(args.name))

    try:
        config = Config.load(Path(args.config)) if args.config else Config.from_env()
        overrides: dict[str, Any] = {}
        if args.output:
            overrides["output_dir"] = Path(args.output)
        if args.template:
            overrides["template_repo"] = args.template
        if overrides:
            config = Config.model_validate({**config.model_dump(), **overrides})
    except (ValidationError, ValueError, OSError) as exc:
        error_console.print(f"[bold red]Error:[/bold red] Invalid configuration: {escape(str(exc))}")
        sys.exit(2)

    pipeline = Pipeline(config, project_name=args.name)
    try:
        result = asyncio.run(pipeline.run())
    except KeyboardInterrupt:
        print_error("\nAborted.")
        sys.exit(130)

    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
