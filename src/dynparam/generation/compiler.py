"""Parser -> classifier -> emitter, one synchronous pass per call."""

from __future__ import annotations

from dataclasses import replace

from dynparam.exceptions import MissingParamBlockError
from dynparam.generation.classifier import classify_parameters
from dynparam.generation.diagnostics import DiagnosticReport
from dynparam.generation.emitter import emit_regions
from dynparam.generation.model import (
    ClassificationResult,
    GenerateSettings,
    GenerationResult,
)
from dynparam.generation.templates import assemble_function
from dynparam.syntax.model import ScriptNode
from dynparam.syntax.parser import parse_script


def _resolve_settings(
    settings: GenerateSettings | None, function_name: str | None
) -> GenerateSettings:
    settings = settings or GenerateSettings()
    if function_name is not None:
        settings = replace(settings, function_name=function_name)
    return settings


def classify_script(
    script: ScriptNode, *, settings: GenerateSettings | None = None
) -> ClassificationResult:
    if script.param_block is None:
        raise MissingParamBlockError()
    return classify_parameters(
        script.param_block.parameters, settings=settings or GenerateSettings()
    )


def generate_function(
    script: ScriptNode,
    function_name: str | None = None,
    *,
    settings: GenerateSettings | None = None,
) -> GenerationResult:
    """Generate the full source of a function with dynamic parameters.

    Raises ``MissingParamBlockError`` before producing anything when ``script``
    has no parameter block. Metadata problems never raise; they are returned in
    ``GenerationResult.diagnostics``.
    """
    settings = _resolve_settings(settings, function_name)
    if script.param_block is None:
        raise MissingParamBlockError()
    report = DiagnosticReport()
    classification = classify_parameters(
        script.param_block.parameters, settings=settings, report=report
    )
    context = emit_regions(classification, settings=settings, report=report)
    regions = context.regions()
    source = assemble_function(
        settings.function_name, regions, script.param_block.attributes
    )
    return GenerationResult(
        function_name=settings.function_name,
        source=source,
        regions=regions,
        static_parameters=classification.static_names,
        dynamic_parameters=classification.dynamic,
        diagnostics=report.entries,
    )


def generate_from_text(
    text: str,
    function_name: str | None = None,
    *,
    settings: GenerateSettings | None = None,
) -> GenerationResult:
    return generate_function(parse_script(text), function_name, settings=settings)
