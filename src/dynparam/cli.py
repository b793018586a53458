from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional

import typer

from dynparam import __version__
from dynparam.config import generate_defaults, merge_payload, settings_from_payload
from dynparam.exceptions import DynParamError
from dynparam.generation import classify_script, generate_function
from dynparam.generation.model import Diagnostic, GenerateSettings
from dynparam.loader import SyntaxCheckResult, check_syntax
from dynparam.schema import (
    ClassificationResponseDTO,
    GenerateResponseDTO,
    script_from_payload,
)
from dynparam.syntax.model import ScriptNode
from dynparam.syntax.parser import parse_script

app = typer.Typer(
    add_completion=False,
    help="Compile PowerShell param() blocks with conditional parameters into "
    "functions that register them as dynamic parameters.",
)

_STDIO_ALIAS = "-"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the version and exit.",
    ),
) -> None:
    """dynparam command line."""


def _read_script(script: Optional[str], ast_input: Optional[Path]) -> ScriptNode:
    if script is not None and ast_input is not None:
        raise typer.BadParameter("Pass either SCRIPT or --ast, not both.")
    if ast_input is not None:
        try:
            loaded = json.loads(ast_input.read_text(encoding="utf-8"))
        except OSError as exc:
            raise typer.BadParameter(f"Cannot read {ast_input}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid JSON payload: {exc}") from exc
        return script_from_payload(loaded)
    if script is None or script == _STDIO_ALIAS:
        text = typer.get_text_stream("stdin").read()
    else:
        try:
            text = Path(script).read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(f"Cannot read {script}: {exc}") from exc
    return parse_script(text)


def _resolve_settings(
    *, root: Path, config: Optional[Path], name: Optional[str]
) -> GenerateSettings:
    defaults = generate_defaults(root=root, config_path=config)
    merged = merge_payload({"function_name": name}, defaults)
    return settings_from_payload(merged)


def _write_output(output: Optional[Path], text: str) -> None:
    if output is None or str(output) == _STDIO_ALIAS:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")


def _context_check_syntax(ctx: typer.Context) -> Callable[[str], SyntaxCheckResult]:
    obj = ctx.obj
    if isinstance(obj, Mapping):
        candidate = obj.get("check_syntax")
        if callable(candidate):
            return candidate
    return check_syntax


def _report_warnings(diagnostics: Iterable[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        typer.secho(diagnostic.render(), err=True, fg=typer.colors.YELLOW)


@app.command("generate")
def generate(
    ctx: typer.Context,
    script: Optional[str] = typer.Argument(
        None, help="PowerShell script containing a param() block, or '-' for stdin."
    ),
    ast_input: Optional[Path] = typer.Option(
        None, "--ast", help="JSON parameter-block AST produced by an external parser."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Name of the generated function."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", help="Write the result to this path instead of stdout."
    ),
    config: Optional[Path] = typer.Option(None, "--config"),
    root: Path = typer.Option(Path("."), "--root"),
    json_output: bool = typer.Option(
        False, "--json", help="Emit a JSON document with the source and warnings."
    ),
    check: bool = typer.Option(
        False,
        "--check/--no-check",
        help="Parse the generated source with PowerShell when it is installed.",
    ),
    strict: bool = typer.Option(
        False, "--strict/--no-strict", help="Exit with status 1 when warnings exist."
    ),
) -> None:
    """Generate a function that registers conditional parameters dynamically."""
    try:
        settings = _resolve_settings(root=root, config=config, name=name)
        result = generate_function(_read_script(script, ast_input), settings=settings)
    except DynParamError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=2)
    _report_warnings(result.diagnostics)

    syntax_errors: List[str] = []
    if check:
        outcome = _context_check_syntax(ctx)(result.source)
        if outcome.skipped:
            typer.secho(
                "syntax check skipped: no PowerShell executable found",
                err=True,
                fg=typer.colors.YELLOW,
            )
        for error in outcome.errors:
            typer.secho(f"syntax error: {error}", err=True, fg=typer.colors.RED)
        syntax_errors = list(outcome.errors)

    if json_output:
        normalized = GenerateResponseDTO.from_result(
            result, syntax_errors=syntax_errors
        ).model_dump()
        _write_output(output, json.dumps(normalized, indent=2, sort_keys=True))
    else:
        _write_output(output, result.source)

    if syntax_errors:
        raise typer.Exit(code=1)
    if strict and result.diagnostics:
        raise typer.Exit(code=1)


@app.command("classify")
def classify(
    script: Optional[str] = typer.Argument(
        None, help="PowerShell script containing a param() block, or '-' for stdin."
    ),
    ast_input: Optional[Path] = typer.Option(
        None, "--ast", help="JSON parameter-block AST produced by an external parser."
    ),
    config: Optional[Path] = typer.Option(None, "--config"),
    root: Path = typer.Option(Path("."), "--root"),
) -> None:
    """Print the static/dynamic classification of a param() block as JSON."""
    try:
        settings = _resolve_settings(root=root, config=config, name=None)
        script_node = _read_script(script, ast_input)
        result = classify_script(script_node, settings=settings)
    except DynParamError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=2)
    normalized = ClassificationResponseDTO.from_result(script_node, result).model_dump()
    typer.echo(json.dumps(normalized, indent=2, sort_keys=True))
