from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Dict, List, Tuple

from dynparam.exceptions import ConfigError
from dynparam.syntax.model import AnnotationNode

DEFAULT_FUNCTION_NAME = "Invoke-DynamicFunction"
DEFAULT_MARKER = "Dynamic"
UNTYPED = "Object"

COMMON_PARAMETERS: Tuple[str, ...] = (
    "Verbose",
    "Debug",
    "ErrorAction",
    "WarningAction",
    "InformationAction",
    "ProgressAction",
    "ErrorVariable",
    "WarningVariable",
    "InformationVariable",
    "OutVariable",
    "OutBuffer",
    "PipelineVariable",
    "WhatIf",
    "Confirm",
)

_FUNCTION_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:-[A-Za-z0-9_]+)*$")
_MARKER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


class DiagnosticStream(StrEnum):
    VERBOSE = "Verbose"
    DEBUG = "Debug"

    @classmethod
    def parse(cls, raw: str) -> "DiagnosticStream":
        for member in cls:
            if member.value.lower() == raw.strip().lower():
                return member
        raise ConfigError(
            "diagnostic_stream",
            f"Unsupported diagnostic stream: {raw!r} (expected Verbose or Debug)",
        )


@dataclass(frozen=True)
class GenerateSettings:
    function_name: str = DEFAULT_FUNCTION_NAME
    marker: str = DEFAULT_MARKER
    diagnostic_stream: DiagnosticStream = DiagnosticStream.VERBOSE
    extra_reserved_names: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not _FUNCTION_NAME_RE.match(self.function_name or ""):
            raise ConfigError(
                "function_name",
                f"Invalid function name: {self.function_name!r}",
            )
        if not _MARKER_RE.match(self.marker or ""):
            raise ConfigError("marker", f"Invalid marker tag: {self.marker!r}")
        object.__setattr__(
            self,
            "diagnostic_stream",
            DiagnosticStream.parse(str(self.diagnostic_stream)),
        )
        object.__setattr__(
            self, "extra_reserved_names", tuple(self.extra_reserved_names)
        )

    @property
    def reserved_names(self) -> Tuple[str, ...]:
        return COMMON_PARAMETERS + self.extra_reserved_names


class ParameterKind(StrEnum):
    STATIC = "static"
    DYNAMIC = "dynamic"


class AnnotationRole(StrEnum):
    MARKER = "marker"
    TYPE_CONSTRAINT = "type_constraint"
    GENERIC = "generic"


class DiagnosticCode(StrEnum):
    UNTYPED_PARAMETER = "UNTYPED_PARAMETER"
    RESERVED_NAME = "RESERVED_NAME"
    DUPLICATE_MARKER = "DUPLICATE_MARKER"
    EMPTY_MARKER = "EMPTY_MARKER"
    AMBIGUOUS_CONDITION = "AMBIGUOUS_CONDITION"


@dataclass(frozen=True)
class Diagnostic:
    code: DiagnosticCode
    parameter: str
    message: str

    def render(self) -> str:
        return f"warning[{self.code.value}] ${self.parameter}: {self.message}"


@dataclass(frozen=True)
class ClassifiedParameter:
    """Dynamic view over a ``ParameterNode``.

    ``condition`` is the verbatim predicate text between the marker's script
    block braces; the empty string means the parameter is always registered.
    """

    name: str
    condition: str
    resolved_type: str
    annotations: Tuple[AnnotationNode, ...] = ()
    default: str | None = None
    pipeline_aware: bool = False
    has_parameter_attribute: bool = False
    untyped: bool = False

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.DYNAMIC

    @property
    def always_present(self) -> bool:
        return self.condition == ""


@dataclass(frozen=True)
class ClassificationResult:
    static: Tuple[str, ...] = ()
    static_names: Tuple[str, ...] = ()
    dynamic: Tuple[ClassifiedParameter, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()


class Region(StrEnum):
    STATIC = "static"
    REGISTRATION = "registration"
    INITIALIZATION = "initialization"
    PIPELINE = "pipeline"
    DIAGNOSTICS = "diagnostics"


STATIC_SEPARATOR = ",\n        "


@dataclass
class EmissionContext:
    """Growable text buffers for the generated function's regions."""

    static: List[str] = field(default_factory=list)
    registration: List[str] = field(default_factory=list)
    initialization: List[str] = field(default_factory=list)
    pipeline: List[str] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
    defaults: Dict[str, str | None] = field(default_factory=dict)
    dynamic_names: List[str] = field(default_factory=list)
    pipeline_names: List[str] = field(default_factory=list)

    def register_pipeline(self, name: str) -> bool:
        if name in self.pipeline_names:
            return False
        self.pipeline_names.append(name)
        return True

    def buffer(self, region: Region) -> List[str]:
        return getattr(self, region.value)

    def render(self, region: Region) -> str:
        if region is Region.STATIC:
            return STATIC_SEPARATOR.join(self.static)
        return "\n".join(self.buffer(region))

    def regions(self) -> Dict[Region, str]:
        return {region: self.render(region) for region in Region}


@dataclass(frozen=True)
class GenerationResult:
    function_name: str
    source: str
    regions: Dict[Region, str]
    static_parameters: Tuple[str, ...]
    dynamic_parameters: Tuple[ClassifiedParameter, ...]
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def warnings(self) -> List[str]:
        return [diagnostic.render() for diagnostic in self.diagnostics]
