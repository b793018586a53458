"""Parameter-block syntax: AST nodes and the PowerShell reader."""

from dynparam.syntax.model import (
    AnnotationKind,
    AnnotationNode,
    NamedArgument,
    ParamBlockNode,
    ParameterNode,
    ScriptNode,
)
from dynparam.syntax.parser import parse_script

__all__ = [
    "AnnotationKind",
    "AnnotationNode",
    "NamedArgument",
    "ParamBlockNode",
    "ParameterNode",
    "ScriptNode",
    "parse_script",
]
