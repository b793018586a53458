"""Optional host-side syntax check for generated source.

Generated functions only run inside PowerShell. When a PowerShell executable is
on PATH the source is handed to the host parser; otherwise the check is
reported as skipped.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Callable, List, Sequence

PWSH_EXECUTABLES: Sequence[str] = ("pwsh", "powershell")

PARSE_COMMAND = (
    "$errors = $null; "
    "[System.Management.Automation.Language.Parser]::ParseInput("
    "[Console]::In.ReadToEnd(), [ref]$null, [ref]$errors) | Out-Null; "
    "$errors | ForEach-Object { $_.Message }; "
    "exit @($errors).Count"
)

Runner = Callable[..., subprocess.CompletedProcess]


@dataclass(frozen=True)
class SyntaxCheckResult:
    ok: bool
    skipped: bool = False
    executable: str | None = None
    errors: List[str] = field(default_factory=list)


def find_executable(
    candidates: Sequence[str] = PWSH_EXECUTABLES,
    which: Callable[[str], str | None] = shutil.which,
) -> str | None:
    for candidate in candidates:
        found = which(candidate)
        if found:
            return found
    return None


def check_syntax(
    source: str,
    *,
    executable: str | None = None,
    runner: Runner = subprocess.run,
    which: Callable[[str], str | None] = shutil.which,
    timeout: float = 60.0,
) -> SyntaxCheckResult:
    executable = executable or find_executable(which=which)
    if executable is None:
        return SyntaxCheckResult(ok=True, skipped=True)
    try:
        completed = runner(
            [executable, "-NoProfile", "-NonInteractive", "-Command", PARSE_COMMAND],
            input=source,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        return SyntaxCheckResult(
            ok=False,
            executable=executable,
            errors=[f"failed to run {executable}: {exc}"],
        )
    errors = [line.strip() for line in (completed.stdout or "").splitlines() if line.strip()]
    if completed.returncode != 0 and not errors:
        stderr = (completed.stderr or "").strip()
        errors = [stderr or f"{executable} exited with status {completed.returncode}"]
    return SyntaxCheckResult(
        ok=completed.returncode == 0,
        executable=executable,
        errors=errors,
    )
