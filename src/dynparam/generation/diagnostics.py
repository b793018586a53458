"""Side-channel warnings collected while classifying and emitting.

Nothing here changes generated text. Callers read the collected diagnostics
from the result object, next to the source.
"""

from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from dynparam.generation.model import Diagnostic, DiagnosticCode


class DiagnosticReport:
    def __init__(self) -> None:
        self._entries: List[Diagnostic] = []
        self._seen: Set[Tuple[DiagnosticCode, str]] = set()

    def warn(self, code: DiagnosticCode, parameter: str, message: str) -> bool:
        """Record a warning; a code is kept at most once per parameter."""
        key = (code, parameter)
        if key in self._seen:
            return False
        self._seen.add(key)
        self._entries.append(Diagnostic(code=code, parameter=parameter, message=message))
        return True

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.warn(diagnostic.code, diagnostic.parameter, diagnostic.message)

    @property
    def entries(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._entries)

    def codes_for(self, parameter: str) -> List[DiagnosticCode]:
        return [entry.code for entry in self._entries if entry.parameter == parameter]

    def __len__(self) -> int:
        return len(self._entries)


def reserved_collision(name: str, reserved_names: Iterable[str]) -> str | None:
    """Return the reserved name that ``name`` would shadow or abbreviate.

    The host binds a parameter by any unambiguous prefix, so a declared name is
    a collision when some reserved name starts with it.
    """
    lowered = name.lower()
    if not lowered:
        return None
    for reserved in reserved_names:
        if reserved.lower().startswith(lowered):
            return reserved
    return None


def report_untyped(report: DiagnosticReport, name: str) -> None:
    report.warn(
        DiagnosticCode.UNTYPED_PARAMETER,
        name,
        "no type constraint; registered as [Object]",
    )


def report_reserved(report: DiagnosticReport, name: str, reserved: str) -> None:
    if reserved.lower() == name.lower():
        message = f"shadows the common parameter -{reserved}"
    else:
        message = f"is an ambiguous abbreviation of the common parameter -{reserved}"
    report.warn(DiagnosticCode.RESERVED_NAME, name, message)
