from __future__ import annotations

import subprocess

from dynparam.loader import PARSE_COMMAND, check_syntax, find_executable


def _completed(returncode: int, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_find_executable_prefers_first_candidate() -> None:
    found = find_executable(("pwsh", "powershell"), which=lambda name: f"/usr/bin/{name}")
    assert found == "/usr/bin/pwsh"
    assert find_executable(("pwsh",), which=lambda name: None) is None


def test_check_skipped_without_executable() -> None:
    result = check_syntax("function X {}", which=lambda name: None)
    assert result.ok is True
    assert result.skipped is True


def test_check_passes_source_on_stdin() -> None:
    calls = []

    def runner(argv, **kwargs):
        calls.append((argv, kwargs))
        return _completed(0)

    result = check_syntax("function X {}", executable="pwsh", runner=runner)
    assert result.ok is True
    assert result.skipped is False
    assert result.errors == []
    argv, kwargs = calls[0]
    assert argv == ["pwsh", "-NoProfile", "-NonInteractive", "-Command", PARSE_COMMAND]
    assert kwargs["input"] == "function X {}"


def test_check_reports_parser_errors() -> None:
    def runner(argv, **kwargs):
        return _completed(1, stdout="Missing closing '}' in statement block.\n\n")

    result = check_syntax("function X {", executable="pwsh", runner=runner)
    assert result.ok is False
    assert result.errors == ["Missing closing '}' in statement block."]


def test_check_reports_stderr_when_no_messages() -> None:
    def runner(argv, **kwargs):
        return _completed(3, stderr="boom")

    result = check_syntax("x", executable="pwsh", runner=runner)
    assert result.errors == ["boom"]


def test_check_reports_launch_failure() -> None:
    def runner(argv, **kwargs):
        raise FileNotFoundError("pwsh")

    result = check_syntax("x", executable="pwsh", runner=runner)
    assert result.ok is False
    assert result.errors[0].startswith("failed to run pwsh")
