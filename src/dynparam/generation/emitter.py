"""Text synthesis for the generated function's regions.

Each dynamic parameter contributes fragments to the registration, initialization
and (when pipeline-aware) pipeline-refresh regions in declaration order; the
diagnostics region is a single dump sorted by name. Embedded expressions are
copied through as text and never evaluated here.
"""

from __future__ import annotations

import re
from typing import List

from dynparam.generation.diagnostics import DiagnosticReport, report_untyped
from dynparam.generation.model import (
    ClassificationResult,
    ClassifiedParameter,
    DiagnosticStream,
    EmissionContext,
    GenerateSettings,
)
from dynparam.order_contract import sort_once
from dynparam.syntax.model import AnnotationNode

INDENT = "    "
BODY_INDENT = INDENT * 2

ATTRIBUTE_COLLECTION_TYPE = "System.Collections.ObjectModel.Collection[System.Attribute]"
RUNTIME_PARAMETER_TYPE = "System.Management.Automation.RuntimeDefinedParameter"

_SIMPLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _literal(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"


def _variable(name: str) -> str:
    if _SIMPLE_NAME_RE.match(name):
        return f"${name}"
    return "${" + name + "}"


def _hashtable_key(name: str) -> str:
    if _SIMPLE_NAME_RE.match(name):
        return name
    return _literal(name)


def _bound_lookup(name: str) -> str:
    return f"$PSBoundParameters[{_literal(name)}]"


def _bound_test(name: str) -> str:
    return f"$PSBoundParameters.ContainsKey({_literal(name)})"


def render_attribute(annotation: AnnotationNode, indent: str) -> List[str]:
    arguments = ", ".join(annotation.positional)
    lines = [f"{indent}$Attribute = [{annotation.tag}]::new({arguments})"]
    for argument in annotation.named:
        value = "$true" if argument.omitted else argument.expression
        lines.append(f"{indent}$Attribute.{argument.name} = {value}")
    lines.append(f"{indent}$AttributeCollection.Add($Attribute)")
    return lines


def emit_registration(
    context: EmissionContext,
    parameter: ClassifiedParameter,
    report: DiagnosticReport,
) -> None:
    out = context.registration
    out.append(f"{BODY_INDENT}#region {parameter.name}")
    indent = BODY_INDENT
    if not parameter.always_present:
        out.append(f"{BODY_INDENT}if ({parameter.condition}) {{")
        indent = BODY_INDENT + INDENT

    out.append(
        f"{indent}$AttributeCollection = New-Object -TypeName {_literal(ATTRIBUTE_COLLECTION_TYPE)}"
    )
    for annotation in parameter.annotations:
        out.extend(render_attribute(annotation, indent))
    if parameter.pipeline_aware:
        context.register_pipeline(parameter.name)
    if not parameter.has_parameter_attribute:
        out.append(f"{indent}$Attribute = [Parameter]::new()")
        out.append(f"{indent}$AttributeCollection.Add($Attribute)")

    if parameter.untyped:
        report_untyped(report, parameter.name)
    out.append(
        f"{indent}$RuntimeParameter = New-Object -TypeName {RUNTIME_PARAMETER_TYPE} "
        f"-ArgumentList {_literal(parameter.name)}, ([{parameter.resolved_type}]), $AttributeCollection"
    )
    out.append(
        f"{indent}$RuntimeParameterDictionary.Add({_literal(parameter.name)}, $RuntimeParameter)"
    )

    if not parameter.always_present:
        out.append(f"{BODY_INDENT}}}")
    out.append(f"{BODY_INDENT}#endregion {parameter.name}")


def emit_initialization(context: EmissionContext, parameter: ClassifiedParameter) -> None:
    name = parameter.name
    context.defaults[name] = parameter.default
    fallback = context.defaults[name] or "$null"
    context.initialization.append(
        f"{BODY_INDENT}if ({_bound_test(name)}) {{ {_variable(name)} = {_bound_lookup(name)} }}"
        f" else {{ {_variable(name)} = {fallback} }}"
    )


def emit_pipeline_refresh(context: EmissionContext, parameter: ClassifiedParameter) -> None:
    name = parameter.name
    context.pipeline.append(
        f"{BODY_INDENT}if ({_bound_test(name)}) {{ {_variable(name)} = {_bound_lookup(name)} }}"
    )


def emit_diagnostics(context: EmissionContext, stream: DiagnosticStream) -> None:
    if not context.dynamic_names:
        return
    names = sort_once(context.dynamic_names, source="emit_diagnostics.dynamic_names")
    width = max(len(_hashtable_key(name)) for name in names)
    out = context.diagnostics
    out.append(f"{BODY_INDENT}Write-{stream.value} -Message ([pscustomobject]@{{")
    for name in names:
        key = _hashtable_key(name).ljust(width)
        out.append(f"{BODY_INDENT}{INDENT}{key} = {_variable(name)}")
    out.append(f"{BODY_INDENT}}} | Format-List | Out-String)")


def emit_regions(
    classification: ClassificationResult,
    *,
    settings: GenerateSettings | None = None,
    report: DiagnosticReport | None = None,
) -> EmissionContext:
    settings = settings or GenerateSettings()
    report = report if report is not None else DiagnosticReport()
    context = EmissionContext()
    context.static.extend(classification.static)
    for parameter in classification.dynamic:
        context.dynamic_names.append(parameter.name)
        emit_registration(context, parameter, report)
        emit_initialization(context, parameter)
    for parameter in classification.dynamic:
        if parameter.name in context.pipeline_names:
            emit_pipeline_refresh(context, parameter)
    emit_diagnostics(context, settings.diagnostic_stream)
    return context
