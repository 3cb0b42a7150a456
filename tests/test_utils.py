"""Unit tests for utility functions (create_rn_boilerplate.utils).

Tests cover:
- run_command (success, failure, timeout, cwd, env vars, capture)
- run_checked (success, non-zero exit, missing executable)
- format_command
- load_json / save_json (use tmp_path)
- format_duration
- STEP_NAMES / STEP_COLORS constants
- Rich output helpers
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from create_rn_boilerplate.utils import (
    STEP_COLORS,
    STEP_NAMES,
    CommandError,
    format_command,
    format_duration,
    load_json,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    run_checked,
    run_command,
    save_json,
)

PY = sys.executable


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_successful_command_captured(self):
        returncode, stdout, stderr = await run_command(
            [PY, "-c", "print('hello')"], capture=True
        )
        assert returncode == 0
        assert stdout == "hello"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_inherited_streams_return_empty_output(self):
        returncode, stdout, stderr = await run_command([PY, "-c", "pass"])
        assert returncode == 0
        assert stdout == ""
        assert stderr == ""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_command(self):
        returncode, _, _ = await run_command([PY, "-c", "import sys; sys.exit(3)"])
        assert returncode == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_with_cwd(self, tmp_path: Path):
        returncode, stdout, _ = await run_command(
            [PY, "-c", "import os; print(os.getcwd())"], cwd=tmp_path, capture=True
        )
        assert returncode == 0
        assert Path(stdout).resolve() == tmp_path.resolve()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_timeout(self):
        returncode, _, stderr = await run_command(
            [PY, "-c", "import time; time.sleep(10)"], timeout=1
        )
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_with_env(self):
        returncode, stdout, _ = await run_command(
            [PY, "-c", "import os; print(os.environ['RNB_TEST_VAR'])"],
            env={"RNB_TEST_VAR": "test_value"},
            capture=True,
        )
        assert returncode == 0
        assert stdout == "test_value"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_executable_raises(self):
        with pytest.raises(FileNotFoundError):
            await run_command(["nonexistent-binary-12345-xyz"])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_uses_mocked_process(self, mock_subprocess):
        proc = mock_subprocess(stdout="done", returncode=0)
        with patch("asyncio.create_subprocess_exec", return_value=proc) as mock_exec:
            returncode, stdout, _ = await run_command(["yarn"], capture=True)

        assert returncode == 0
        assert stdout == "done"
        assert mock_exec.call_args.args == ("yarn",)


# ---------------------------------------------------------------------------
# run_checked
# ---------------------------------------------------------------------------


class TestRunChecked:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_returns_none(self):
        assert await run_checked([PY, "-c", "pass"]) is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_zero_exit_raises_with_command(self):
        with pytest.raises(CommandError) as exc_info:
            await run_checked([PY, "-c", "import sys; sys.exit(2)"])

        err = exc_info.value
        assert err.returncode == 2
        assert "-c" in err.command
        assert "exit 2" in str(err)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_executable_raises_command_error(self):
        with pytest.raises(CommandError) as exc_info:
            await run_checked(["nonexistent-binary-12345-xyz", "--flag"])

        assert exc_info.value.command == "nonexistent-binary-12345-xyz --flag"
        assert exc_info.value.returncode is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout_is_a_failure(self):
        with pytest.raises(CommandError, match="timed out"):
            await run_checked([PY, "-c", "import time; time.sleep(10)"], timeout=1)


# ---------------------------------------------------------------------------
# format_command
# ---------------------------------------------------------------------------


class TestFormatCommand:
    @pytest.mark.unit
    def test_plain_arguments(self):
        assert format_command(["git", "add", "."]) == "git add ."

    @pytest.mark.unit
    def test_arguments_with_spaces_are_quoted(self):
        rendered = format_command(["git", "commit", "-m", "first commit"])
        assert rendered == "git commit -m 'first commit'"


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


class TestJsonIO:
    @pytest.mark.unit
    def test_load_json_object(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text('{"name": "boilerplate"}', encoding="utf-8")
        assert load_json(path) == {"name": "boilerplate"}

    @pytest.mark.unit
    def test_load_json_array(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_json(path) == [1, 2]

    @pytest.mark.unit
    def test_load_json_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "missing.json")

    @pytest.mark.unit
    def test_load_json_invalid(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_json(path)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_json_two_space_indent(self, tmp_path: Path):
        path = tmp_path / "out.json"
        await save_json({"name": "MyApp", "scripts": {"ios": "react-native run-ios"}}, path)
        assert path.read_text(encoding="utf-8") == (
            '{\n  "name": "MyApp",\n  "scripts": {\n    "ios": "react-native run-ios"\n  }\n}'
        )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_json_keeps_key_order(self, tmp_path: Path):
        path = tmp_path / "out.json"
        await save_json({"z": 1, "a": 2, "m": 3}, path)
        assert list(json.loads(path.read_text(encoding="utf-8"))) == ["z", "a", "m"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_json_keeps_unicode(self, tmp_path: Path):
        path = tmp_path / "out.json"
        await save_json({"displayName": "Café"}, path)
        assert "Café" in path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    def test_seconds(self):
        assert format_duration(3.7) == "3.7s"

    @pytest.mark.unit
    def test_minutes(self):
        assert format_duration(65.2) == "1m 5s"

    @pytest.mark.unit
    def test_hours(self):
        assert format_duration(3661.0) == "1h 1m 1s"

    @pytest.mark.unit
    def test_negative(self):
        assert format_duration(-1) == "0.0s"


# ---------------------------------------------------------------------------
# STEP_NAMES / STEP_COLORS constants
# ---------------------------------------------------------------------------


class TestStepConstants:
    @pytest.mark.unit
    def test_step_names_all_present(self):
        assert list(STEP_NAMES) == list(range(1, 9))
        assert STEP_NAMES[1] == "NAME"
        assert STEP_NAMES[2] == "FETCH"
        assert STEP_NAMES[8] == "COMMIT"

    @pytest.mark.unit
    def test_step_colors_all_present(self):
        for i in STEP_NAMES:
            assert isinstance(STEP_COLORS[i], str)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutputHelpers:
    @pytest.mark.unit
    def test_print_step_header(self, capsys):
        print_step_header(3, "manifest")
        assert "Step 3: MANIFEST" in capsys.readouterr().out

    @pytest.mark.unit
    def test_print_success(self, capsys):
        print_success("All done")
        assert "All done" in capsys.readouterr().out

    @pytest.mark.unit
    def test_print_error(self, capsys):
        print_error("Something failed")
        captured = capsys.readouterr()
        assert "Something failed" in captured.err
        assert "Something failed" not in captured.out

    @pytest.mark.unit
    def test_print_warning(self, capsys):
        print_warning("File not found")
        assert "File not found" in capsys.readouterr().out

    @pytest.mark.unit
    def test_print_summary_table(self, capsys):
        print_summary_table({"1. NAME": "completed", "2. FETCH": "failed"}, title="Steps")
        out = capsys.readouterr().out
        assert "Steps" in out
        assert "1. NAME" in out
        assert "failed" in out
