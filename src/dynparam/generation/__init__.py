"""Classification and code emission for dynamic parameter functions."""

from dynparam.generation.classifier import classify_parameters
from dynparam.generation.compiler import (
    classify_script,
    generate_from_text,
    generate_function,
)
from dynparam.generation.diagnostics import DiagnosticReport
from dynparam.generation.emitter import emit_regions
from dynparam.generation.model import (
    ClassificationResult,
    ClassifiedParameter,
    Diagnostic,
    DiagnosticCode,
    DiagnosticStream,
    EmissionContext,
    GenerateSettings,
    GenerationResult,
    Region,
)
from dynparam.generation.templates import assemble_function

__all__ = [
    "ClassificationResult",
    "ClassifiedParameter",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticReport",
    "DiagnosticStream",
    "EmissionContext",
    "GenerateSettings",
    "GenerationResult",
    "Region",
    "assemble_function",
    "classify_parameters",
    "classify_script",
    "emit_regions",
    "generate_from_text",
    "generate_function",
]
