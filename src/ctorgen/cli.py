from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, List, Mapping, Optional, TypeAlias

import typer

from ctorgen import __version__
from ctorgen.collector import collect
from ctorgen.config import (
    TomlTable,
    constructor_type_names,
    directive_prefix,
    generate_defaults,
    merge_payload,
    output_suffix,
)
from ctorgen.directives import DEFAULT_DIRECTIVE_PREFIX
from ctorgen.emission import run
from ctorgen.emitter import default_output_path, render_unit, write_unit
from ctorgen.exceptions import CtorgenError, UnknownConstructorType
from ctorgen.ingest import PackageDeclarations, PythonSourceLoader, SourceLoader
from ctorgen.model import (
    DEFAULT_CONSTRUCTOR_TYPES,
    ConstructorType,
    GenerationRequest,
    normalize_constructor_types,
)
from ctorgen.schema import fields_response

app = typer.Typer(add_completion=False)
LoaderFactory: TypeAlias = Callable[[str], SourceLoader]

_STDOUT_ALIAS = "-"
_CONSTRUCTOR_TYPES_HELP = (
    "Comma-separated list of constructor types; expects "
    + " and ".join(f'"{kind.value}"' for kind in ConstructorType)
    + f' (default "{",".join(k.value for k in DEFAULT_CONSTRUCTOR_TYPES)}").'
)
_DIRECTIVE_PREFIX_HELP = (
    f'Comment prefix that marks field directives (default "{DEFAULT_DIRECTIVE_PREFIX}").'
)


def _python_loader(prefix: str) -> SourceLoader:
    return PythonSourceLoader(directive_prefix=prefix)


DEFAULT_LOADER_FACTORY: LoaderFactory = _python_loader


def _context_loader_factory(ctx: typer.Context) -> LoaderFactory:
    obj = ctx.obj
    if isinstance(obj, Mapping):
        candidate = obj.get("loader_factory")
        if callable(candidate):
            return candidate
    return DEFAULT_LOADER_FACTORY


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ctorgen {__version__}")
        raise typer.Exit()


def _fail(exc: CtorgenError, code: int = 1) -> typer.Exit:
    typer.echo(f"[error] {exc}", err=True)
    return typer.Exit(code=code)


def _settings(config: Optional[Path], **options: Optional[str]) -> TomlTable:
    """Config file values overridden by the options given on the command line."""
    return merge_payload(dict(options), generate_defaults(config_path=config))


def _resolve_constructor_types(settings: TomlTable) -> tuple[ConstructorType, ...]:
    names = constructor_type_names(settings)
    if not names:
        return DEFAULT_CONSTRUCTOR_TYPES
    return normalize_constructor_types(names)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version information.",
    ),
) -> None:
    """Generate constructors and builders for record classes."""


@app.command("generate")
def generate(
    ctx: typer.Context,
    type_name: str = typer.Option(..., "--type", help="[mandatory] a type name"),
    constructor_types: Optional[str] = typer.Option(
        None, "--constructor-types", help=_CONSTRUCTOR_TYPES_HELP
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        help="Output file name (default <srcdir>/<type>_gen.py); '-' for stdout.",
    ),
    prefix: Optional[str] = typer.Option(
        None, "--directive-prefix", help=_DIRECTIVE_PREFIX_HELP
    ),
    suffix: Optional[str] = typer.Option(
        None, "--output-suffix", help="Suffix of the default output file name (default \"_gen\")."
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to ctorgen.toml."),
    paths: Optional[List[Path]] = typer.Argument(None, help="Package directory or files."),
) -> None:
    """Generate constructor code for one record class."""
    settings = _settings(
        config,
        constructor_types=constructor_types,
        directive_prefix=prefix,
        output_suffix=suffix,
    )
    try:
        kinds = _resolve_constructor_types(settings)
    except UnknownConstructorType as exc:
        raise _fail(exc, code=2) from exc
    source_paths = list(paths or [Path(".")])
    try:
        request = GenerationRequest(
            type_name=type_name,
            constructor_types=kinds,
            invocation=(
                "generate",
                "--type",
                type_name,
                "--constructor-types",
                ",".join(kind.value for kind in kinds),
                *(str(p) for p in source_paths),
            ),
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    loader = _context_loader_factory(ctx)(
        directive_prefix(settings, DEFAULT_DIRECTIVE_PREFIX)
    )
    loaded: list[PackageDeclarations] = []

    def _load() -> PackageDeclarations:
        package = loader.load(source_paths)
        loaded.append(package)
        return package

    try:
        unit = run(request, _load)
        text = render_unit(unit, loaded[0])
        if output == _STDOUT_ALIAS:
            typer.echo(text, nl=False)
            return
        target = (
            Path(output)
            if output
            else default_output_path(source_paths, type_name, output_suffix(settings))
        )
        write_unit(text, target)
    except CtorgenError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Wrote {target}")


@app.command("fields")
def fields(
    ctx: typer.Context,
    type_name: str = typer.Option(..., "--type", help="[mandatory] a type name"),
    prefix: Optional[str] = typer.Option(
        None, "--directive-prefix", help=_DIRECTIVE_PREFIX_HELP
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to ctorgen.toml."),
    paths: Optional[List[Path]] = typer.Argument(None, help="Package directory or files."),
) -> None:
    """Print the collected constructor fields of a record class as JSON."""
    settings = _settings(config, directive_prefix=prefix)
    loader = _context_loader_factory(ctx)(
        directive_prefix(settings, DEFAULT_DIRECTIVE_PREFIX)
    )
    try:
        package = loader.load(list(paths or [Path(".")]))
        collected = collect(type_name, package)
    except CtorgenError as exc:
        raise _fail(exc) from exc
    payload = fields_response(package.name, type_name, collected).model_dump()
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
