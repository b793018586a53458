from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from dynparam.syntax.model import (
    AnnotationKind,
    AnnotationNode,
    NamedArgument,
    ParamBlockNode,
    ParameterNode,
    ScriptNode,
)

EXAMPLE_SCRIPT = """\
[CmdletBinding()]
param(
    [Parameter(Mandatory)][string]$Action,

    [Dynamic({ $Action -eq 'edit' })]
    [Parameter(Mandatory)]
    [Guid]$Id,

    [Dynamic({})]
    [string]$Test = 'hello'
)
"""


@pytest.fixture
def example_script() -> str:
    return EXAMPLE_SCRIPT


@pytest.fixture
def make_parameter():
    """Build a ``ParameterNode`` without going through the reader."""

    def _make(
        name: str,
        *,
        type_name: str | None = None,
        condition: str | None = None,
        attributes: tuple[AnnotationNode, ...] = (),
        default: str | None = None,
    ) -> ParameterNode:
        annotations: list[AnnotationNode] = []
        if condition is not None:
            annotations.append(
                AnnotationNode(tag="Dynamic", positional=("{" + condition + "}",))
            )
        annotations.extend(attributes)
        if type_name is not None:
            annotations.append(
                AnnotationNode(tag=type_name, kind=AnnotationKind.TYPE_CONSTRAINT)
            )
        extent = "".join(
            f"[{annotation.tag}]"
            for annotation in annotations
            if annotation.kind is AnnotationKind.TYPE_CONSTRAINT
        ) + f"${name}"
        if default is not None:
            extent += f" = {default}"
        return ParameterNode(
            name=name,
            annotations=tuple(annotations),
            default=default,
            extent=extent,
        )

    return _make


@pytest.fixture
def make_script():
    def _make(*parameters: ParameterNode) -> ScriptNode:
        return ScriptNode(param_block=ParamBlockNode(parameters=tuple(parameters)))

    return _make


@pytest.fixture
def mandatory() -> AnnotationNode:
    return AnnotationNode(tag="Parameter", named=(NamedArgument("Mandatory"),))
