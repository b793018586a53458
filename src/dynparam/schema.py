from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ValidationError

from dynparam.exceptions import PayloadError
from dynparam.generation.model import (
    ClassificationResult,
    ClassifiedParameter,
    Diagnostic,
    GenerationResult,
    ParameterKind,
)
from dynparam.syntax.model import (
    AnnotationKind,
    AnnotationNode,
    NamedArgument,
    ParamBlockNode,
    ParameterNode,
    ScriptNode,
)


class NamedArgumentDTO(BaseModel):
    name: str
    expression: Optional[str] = None


class AnnotationDTO(BaseModel):
    tag: str
    kind: Literal["attribute", "type_constraint"] = "attribute"
    positional: List[str] = []
    named: List[NamedArgumentDTO] = []
    extent: str = ""

    def to_node(self) -> AnnotationNode:
        return AnnotationNode(
            tag=self.tag,
            kind=AnnotationKind(self.kind),
            positional=tuple(self.positional),
            named=tuple(
                NamedArgument(name=entry.name, expression=entry.expression)
                for entry in self.named
            ),
            extent=self.extent,
        )


class ParameterDTO(BaseModel):
    name: str
    annotations: List[AnnotationDTO] = []
    default: Optional[str] = None
    extent: str

    def to_node(self) -> ParameterNode:
        return ParameterNode(
            name=self.name,
            annotations=tuple(annotation.to_node() for annotation in self.annotations),
            default=self.default,
            extent=self.extent,
        )


class ParamBlockDTO(BaseModel):
    parameters: List[ParameterDTO] = []
    attributes: List[str] = []

    def to_node(self) -> ParamBlockNode:
        return ParamBlockNode(
            parameters=tuple(parameter.to_node() for parameter in self.parameters),
            attributes=tuple(self.attributes),
        )


class ScriptDTO(BaseModel):
    param_block: Optional[ParamBlockDTO] = None

    def to_node(self) -> ScriptNode:
        if self.param_block is None:
            return ScriptNode(param_block=None)
        return ScriptNode(param_block=self.param_block.to_node())


def script_from_payload(payload: object) -> ScriptNode:
    try:
        request = ScriptDTO.model_validate(payload)
    except ValidationError as exc:
        raise PayloadError(str(exc)) from exc
    return request.to_node()


class DiagnosticDTO(BaseModel):
    code: str
    parameter: str
    message: str

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> "DiagnosticDTO":
        return cls(
            code=diagnostic.code.value,
            parameter=diagnostic.parameter,
            message=diagnostic.message,
        )


class ClassifiedParameterDTO(BaseModel):
    name: str
    kind: str = ParameterKind.DYNAMIC.value
    condition: Optional[str] = None
    resolved_type: Optional[str] = None
    default: Optional[str] = None
    pipeline_aware: bool = False
    has_parameter_attribute: bool = False
    extent: Optional[str] = None

    @classmethod
    def from_classified(cls, parameter: ClassifiedParameter) -> "ClassifiedParameterDTO":
        return cls(
            name=parameter.name,
            kind=parameter.kind.value,
            condition=parameter.condition,
            resolved_type=parameter.resolved_type,
            default=parameter.default,
            pipeline_aware=parameter.pipeline_aware,
            has_parameter_attribute=parameter.has_parameter_attribute,
        )


class ClassificationResponseDTO(BaseModel):
    static: List[ClassifiedParameterDTO] = []
    dynamic: List[ClassifiedParameterDTO] = []
    warnings: List[DiagnosticDTO] = []

    @classmethod
    def from_result(
        cls, script: ScriptNode, result: ClassificationResult
    ) -> "ClassificationResponseDTO":
        static_nodes = {}
        if script.param_block is not None:
            static_nodes = {node.name: node for node in script.param_block.parameters}
        static: List[ClassifiedParameterDTO] = []
        for name, extent in zip(result.static_names, result.static):
            node = static_nodes.get(name)
            static.append(
                ClassifiedParameterDTO(
                    name=name,
                    kind=ParameterKind.STATIC.value,
                    resolved_type=node.type_name if node is not None else None,
                    default=node.default if node is not None else None,
                    extent=extent,
                )
            )
        return cls(
            static=static,
            dynamic=[
                ClassifiedParameterDTO.from_classified(parameter)
                for parameter in result.dynamic
            ],
            warnings=[
                DiagnosticDTO.from_diagnostic(diagnostic)
                for diagnostic in result.diagnostics
            ],
        )


class GenerateResponseDTO(BaseModel):
    function_name: str
    source: str
    static_parameters: List[str] = []
    dynamic_parameters: List[ClassifiedParameterDTO] = []
    warnings: List[DiagnosticDTO] = []
    syntax_errors: List[str] = []

    @classmethod
    def from_result(
        cls, result: GenerationResult, *, syntax_errors: List[str] | None = None
    ) -> "GenerateResponseDTO":
        return cls(
            function_name=result.function_name,
            source=result.source,
            static_parameters=list(result.static_parameters),
            dynamic_parameters=[
                ClassifiedParameterDTO.from_classified(parameter)
                for parameter in result.dynamic_parameters
            ],
            warnings=[
                DiagnosticDTO.from_diagnostic(diagnostic)
                for diagnostic in result.diagnostics
            ],
            syntax_errors=list(syntax_errors or []),
        )
