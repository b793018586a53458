from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Tuple


class AnnotationKind(StrEnum):
    ATTRIBUTE = "attribute"
    TYPE_CONSTRAINT = "type_constraint"


@dataclass(frozen=True)
class NamedArgument:
    """A ``Name = expression`` attribute argument.

    ``expression`` is ``None`` when the source omitted the value, which the host
    reads as ``$true``.
    """

    name: str
    expression: str | None = None

    @property
    def omitted(self) -> bool:
        return self.expression is None


@dataclass(frozen=True)
class AnnotationNode:
    tag: str
    kind: AnnotationKind = AnnotationKind.ATTRIBUTE
    positional: Tuple[str, ...] = ()
    named: Tuple[NamedArgument, ...] = ()
    extent: str = ""


@dataclass(frozen=True)
class ParameterNode:
    name: str
    annotations: Tuple[AnnotationNode, ...] = ()
    default: str | None = None
    extent: str = ""

    @property
    def type_name(self) -> str | None:
        for annotation in self.annotations:
            if annotation.kind is AnnotationKind.TYPE_CONSTRAINT:
                return annotation.tag
        return None


@dataclass(frozen=True)
class ParamBlockNode:
    parameters: Tuple[ParameterNode, ...] = ()
    attributes: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ScriptNode:
    param_block: ParamBlockNode | None = None
