from __future__ import annotations

from typing import Iterable, List, Sequence

from dynparam.generation.diagnostics import (
    DiagnosticReport,
    report_reserved,
    report_untyped,
    reserved_collision,
)
from dynparam.generation.model import (
    UNTYPED,
    AnnotationRole,
    ClassificationResult,
    ClassifiedParameter,
    DiagnosticCode,
    GenerateSettings,
)
from dynparam.syntax.model import (
    AnnotationKind,
    AnnotationNode,
    NamedArgument,
    ParameterNode,
)

_PARAMETER_TAGS = frozenset(
    {
        "parameter",
        "parameterattribute",
        "system.management.automation.parameter",
        "system.management.automation.parameterattribute",
    }
)
PIPELINE_FLAGS = frozenset({"valuefrompipeline", "valuefrompipelinebypropertyname"})
_FALSE_VALUES = frozenset({"$false", "0"})


def annotation_role(annotation: AnnotationNode, marker: str) -> AnnotationRole:
    tag = annotation.tag.lower()
    marker_tag = marker.lower()
    if tag in (marker_tag, f"{marker_tag}attribute"):
        return AnnotationRole.MARKER
    if annotation.kind is AnnotationKind.TYPE_CONSTRAINT:
        return AnnotationRole.TYPE_CONSTRAINT
    return AnnotationRole.GENERIC


def is_parameter_attribute(annotation: AnnotationNode) -> bool:
    return annotation.tag.lower() in _PARAMETER_TAGS


def is_pipeline_flag(argument: NamedArgument) -> bool:
    if argument.name.lower() not in PIPELINE_FLAGS:
        return False
    if argument.omitted:
        return True
    return argument.expression.strip().lower() not in _FALSE_VALUES


def strip_condition(raw: str) -> str:
    """Remove one enclosing pair of script-block braces from ``raw``.

    Text that is not wrapped in braces is returned unchanged. The inner text is
    never trimmed: an empty result means "always true", anything else is carried
    through to the guard as written.
    """
    text = raw.strip()
    if len(text) >= 2 and text[0] == "{" and text[-1] == "}":
        return text[1:-1]
    return raw


def classify_parameters(
    parameters: Sequence[ParameterNode],
    *,
    settings: GenerateSettings | None = None,
    report: DiagnosticReport | None = None,
) -> ClassificationResult:
    """Partition declarations into static texts and dynamic parameters.

    Declaration order is preserved in both outputs and no declaration appears
    in both.
    """
    settings = settings or GenerateSettings()
    report = report if report is not None else DiagnosticReport()
    static: List[str] = []
    static_names: List[str] = []
    dynamic: List[ClassifiedParameter] = []
    for node in parameters:
        collision = reserved_collision(node.name, settings.reserved_names)
        if collision is not None:
            report_reserved(report, node.name, collision)
        markers = [
            annotation
            for annotation in node.annotations
            if annotation_role(annotation, settings.marker) is AnnotationRole.MARKER
        ]
        if not markers:
            static.append(node.extent)
            static_names.append(node.name)
            continue
        dynamic.append(_classify_dynamic(node, markers, settings, report))
    return ClassificationResult(
        static=tuple(static),
        static_names=tuple(static_names),
        dynamic=tuple(dynamic),
        diagnostics=report.entries,
    )


def _classify_dynamic(
    node: ParameterNode,
    markers: List[AnnotationNode],
    settings: GenerateSettings,
    report: DiagnosticReport,
) -> ClassifiedParameter:
    if len(markers) > 1:
        report.warn(
            DiagnosticCode.DUPLICATE_MARKER,
            node.name,
            f"{len(markers)} [{settings.marker}] markers; only the first is honoured",
        )
    condition = _condition(node.name, markers[0], report)

    type_constraints: List[str] = []
    generic: List[AnnotationNode] = []
    for annotation in node.annotations:
        role = annotation_role(annotation, settings.marker)
        if role is AnnotationRole.TYPE_CONSTRAINT:
            type_constraints.append(annotation.tag)
        elif role is AnnotationRole.GENERIC:
            generic.append(annotation)

    untyped = not type_constraints
    if untyped:
        report_untyped(report, node.name)

    return ClassifiedParameter(
        name=node.name,
        condition=condition,
        resolved_type=UNTYPED if untyped else type_constraints[0],
        annotations=tuple(generic),
        default=node.default,
        pipeline_aware=_has_pipeline_flag(generic),
        has_parameter_attribute=any(is_parameter_attribute(a) for a in generic),
        untyped=untyped,
    )


def _condition(name: str, marker: AnnotationNode, report: DiagnosticReport) -> str:
    if not marker.positional:
        report.warn(
            DiagnosticCode.EMPTY_MARKER,
            name,
            "marker has no condition; the parameter is always registered",
        )
        return ""
    condition = strip_condition(marker.positional[0])
    if condition and not condition.strip():
        report.warn(
            DiagnosticCode.AMBIGUOUS_CONDITION,
            name,
            "condition is blank but not empty; carried through literally",
        )
    return condition


def _has_pipeline_flag(annotations: Iterable[AnnotationNode]) -> bool:
    for annotation in annotations:
        for argument in annotation.named:
            if is_pipeline_flag(argument):
                return True
    return False
