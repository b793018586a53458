from __future__ import annotations

from dynparam.generation.classifier import classify_parameters
from dynparam.generation.diagnostics import DiagnosticReport
from dynparam.generation.emitter import (
    emit_diagnostics,
    emit_regions,
    render_attribute,
)
from dynparam.generation.model import (
    ClassificationResult,
    ClassifiedParameter,
    DiagnosticCode,
    DiagnosticStream,
    EmissionContext,
    GenerateSettings,
    Region,
)
from dynparam.syntax.model import AnnotationNode, NamedArgument


def _emit(params, settings: GenerateSettings | None = None):
    report = DiagnosticReport()
    classification = classify_parameters(params, settings=settings, report=report)
    return emit_regions(classification, settings=settings, report=report), report


def test_render_attribute_echoes_arguments() -> None:
    annotation = AnnotationNode(
        tag="ValidateRange",
        positional=("1", "10"),
        named=(NamedArgument("ErrorMessage", "'out of range'"), NamedArgument("Strict")),
    )
    assert render_attribute(annotation, "  ") == [
        "  $Attribute = [ValidateRange]::new(1, 10)",
        "  $Attribute.ErrorMessage = 'out of range'",
        "  $Attribute.Strict = $true",
        "  $AttributeCollection.Add($Attribute)",
    ]


def test_registration_with_guard(make_parameter, mandatory) -> None:
    context, _ = _emit(
        [make_parameter("Id", type_name="Guid", condition=" $mode -eq 'edit' ", attributes=(mandatory,))]
    )
    assert context.registration == [
        "        #region Id",
        "        if ( $mode -eq 'edit' ) {",
        "            $AttributeCollection = New-Object -TypeName 'System.Collections.ObjectModel.Collection[System.Attribute]'",
        "            $Attribute = [Parameter]::new()",
        "            $Attribute.Mandatory = $true",
        "            $AttributeCollection.Add($Attribute)",
        "            $RuntimeParameter = New-Object -TypeName System.Management.Automation.RuntimeDefinedParameter -ArgumentList 'Id', ([Guid]), $AttributeCollection",
        "            $RuntimeParameterDictionary.Add('Id', $RuntimeParameter)",
        "        }",
        "        #endregion Id",
    ]


def test_registration_without_guard_synthesizes_parameter_attribute(make_parameter) -> None:
    context, _ = _emit([make_parameter("Test", type_name="string", condition="")])
    assert context.registration == [
        "        #region Test",
        "        $AttributeCollection = New-Object -TypeName 'System.Collections.ObjectModel.Collection[System.Attribute]'",
        "        $Attribute = [Parameter]::new()",
        "        $AttributeCollection.Add($Attribute)",
        "        $RuntimeParameter = New-Object -TypeName System.Management.Automation.RuntimeDefinedParameter -ArgumentList 'Test', ([string]), $AttributeCollection",
        "        $RuntimeParameterDictionary.Add('Test', $RuntimeParameter)",
        "        #endregion Test",
    ]


def test_untyped_parameter_uses_object_and_warns_once(make_parameter) -> None:
    context, report = _emit([make_parameter("Loose", condition="$true")])
    assert any("'Loose', ([Object])" in line for line in context.registration)
    assert report.codes_for("Loose") == [DiagnosticCode.UNTYPED_PARAMETER]


def test_initialization_binds_default_or_null(make_parameter) -> None:
    context, _ = _emit(
        [
            make_parameter("First", type_name="int", condition="", default="42"),
            make_parameter("Second", type_name="int", condition=""),
        ]
    )
    assert context.initialization == [
        "        if ($PSBoundParameters.ContainsKey('First')) { $First = $PSBoundParameters['First'] } else { $First = 42 }",
        "        if ($PSBoundParameters.ContainsKey('Second')) { $Second = $PSBoundParameters['Second'] } else { $Second = $null }",
    ]
    assert context.defaults == {"First": "42", "Second": None}


def test_pipeline_region_only_holds_pipeline_aware_parameters(make_parameter) -> None:
    from_pipeline = AnnotationNode(
        tag="Parameter",
        named=(NamedArgument("ValueFromPipeline"), NamedArgument("ValueFromPipelineByPropertyName")),
    )
    context, _ = _emit(
        [
            make_parameter("Plain", type_name="string", condition=""),
            make_parameter("InputObject", type_name="psobject", condition="", attributes=(from_pipeline,)),
        ]
    )
    assert context.pipeline_names == ["InputObject"]
    assert context.pipeline == [
        "        if ($PSBoundParameters.ContainsKey('InputObject')) { $InputObject = $PSBoundParameters['InputObject'] }",
    ]
    assert len(context.initialization) == 2
    assert not any("Plain" in line for line in context.pipeline)


def test_diagnostics_sorted_and_padded(make_parameter) -> None:
    context, _ = _emit(
        [
            make_parameter("Zebra", type_name="int", condition=""),
            make_parameter("Id", type_name="int", condition=""),
            make_parameter("Alpha", type_name="int", condition=""),
        ]
    )
    assert context.dynamic_names == ["Zebra", "Id", "Alpha"]
    assert context.diagnostics == [
        "        Write-Verbose -Message ([pscustomobject]@{",
        "            Alpha = $Alpha",
        "            Id    = $Id",
        "            Zebra = $Zebra",
        "        } | Format-List | Out-String)",
    ]


def test_diagnostics_quote_non_identifier_names() -> None:
    context = EmissionContext(dynamic_names=["my var", "Id"])
    emit_diagnostics(context, DiagnosticStream.DEBUG)
    assert context.diagnostics == [
        "        Write-Debug -Message ([pscustomobject]@{",
        "            Id       = $Id",
        "            'my var' = ${my var}",
        "        } | Format-List | Out-String)",
    ]


def test_no_dynamic_parameters_leaves_regions_empty(make_parameter) -> None:
    context, _ = _emit([make_parameter("Path", type_name="string")])
    regions = context.regions()
    assert regions[Region.STATIC] == "[string]$Path"
    for region in (Region.REGISTRATION, Region.INITIALIZATION, Region.PIPELINE, Region.DIAGNOSTICS):
        assert regions[region] == ""


def test_register_pipeline_is_idempotent() -> None:
    context = EmissionContext()
    assert context.register_pipeline("Name") is True
    assert context.register_pipeline("Name") is False
    assert context.pipeline_names == ["Name"]


def test_pipeline_region_follows_classified_flag() -> None:
    feed = ClassifiedParameter(
        name="Feed", condition="", resolved_type="string", pipeline_aware=True
    )
    context = emit_regions(ClassificationResult(dynamic=(feed,)))
    assert context.pipeline_names == ["Feed"]
    assert context.pipeline == [
        "        if ($PSBoundParameters.ContainsKey('Feed')) { $Feed = $PSBoundParameters['Feed'] }",
    ]
