from __future__ import annotations

import pytest

from dynparam.exceptions import PayloadError
from dynparam.generation import classify_script, generate_function
from dynparam.schema import (
    ClassificationResponseDTO,
    GenerateResponseDTO,
    script_from_payload,
)
from dynparam.syntax.model import AnnotationKind, NamedArgument

PAYLOAD = {
    "param_block": {
        "attributes": ["[CmdletBinding()]"],
        "parameters": [
            {
                "name": "Action",
                "annotations": [{"tag": "string", "kind": "type_constraint"}],
                "extent": "[string]$Action",
            },
            {
                "name": "Id",
                "annotations": [
                    {"tag": "Dynamic", "positional": ["{ $Action -eq 'edit' }"]},
                    {"tag": "Parameter", "named": [{"name": "Mandatory"}]},
                    {"tag": "Guid", "kind": "type_constraint"},
                ],
                "extent": "[Dynamic({ $Action -eq 'edit' })][Parameter(Mandatory)][Guid]$Id",
            },
            {
                "name": "Note",
                "annotations": [{"tag": "Dynamic", "positional": ["{}"]}],
                "default": "'n/a'",
                "extent": "[Dynamic({})]$Note = 'n/a'",
            },
        ],
    }
}


def test_payload_converts_to_nodes() -> None:
    script = script_from_payload(PAYLOAD)
    assert script.param_block is not None
    action, identifier, note = script.param_block.parameters
    assert action.type_name == "string"
    assert identifier.annotations[1].named == (NamedArgument("Mandatory"),)
    assert identifier.annotations[2].kind is AnnotationKind.TYPE_CONSTRAINT
    assert note.default == "'n/a'"


def test_payload_without_param_block() -> None:
    assert script_from_payload({}).param_block is None


def test_invalid_payload_raises_payload_error() -> None:
    with pytest.raises(PayloadError):
        script_from_payload({"param_block": {"parameters": [{"name": "NoExtent"}]}})
    with pytest.raises(PayloadError):
        script_from_payload(["not", "an", "object"])


def test_generate_response_dto() -> None:
    result = generate_function(script_from_payload(PAYLOAD), "Get-Thing")
    payload = GenerateResponseDTO.from_result(result).model_dump()
    assert payload["function_name"] == "Get-Thing"
    assert payload["static_parameters"] == ["Action"]
    assert [entry["name"] for entry in payload["dynamic_parameters"]] == ["Id", "Note"]
    assert payload["dynamic_parameters"][0]["condition"] == " $Action -eq 'edit' "
    assert payload["warnings"] == [
        {
            "code": "UNTYPED_PARAMETER",
            "parameter": "Note",
            "message": "no type constraint; registered as [Object]",
        }
    ]
    assert payload["syntax_errors"] == []
    assert payload["source"] == result.source


def test_classification_response_dto() -> None:
    script = script_from_payload(PAYLOAD)
    payload = ClassificationResponseDTO.from_result(script, classify_script(script)).model_dump()
    (static,) = payload["static"]
    assert static["kind"] == "static"
    assert static["resolved_type"] == "string"
    assert static["extent"] == "[string]$Action"
    assert [entry["kind"] for entry in payload["dynamic"]] == ["dynamic", "dynamic"]
    assert payload["dynamic"][1]["resolved_type"] == "Object"
    assert [entry["code"] for entry in payload["warnings"]] == ["UNTYPED_PARAMETER"]
