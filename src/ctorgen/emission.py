from __future__ import annotations

from typing import Callable, Sequence

from ctorgen.collector import collect_members
from ctorgen.ingest.adapter_contract import PackageDeclarations
from ctorgen.model import GENERATED_HEADER_PREFIX, GeneratedUnit, GenerationRequest
from ctorgen.strategies import generator_for

PackageLoader = Callable[[], PackageDeclarations]


def provenance_header(invocation: Sequence[str]) -> str:
    args = " ".join(invocation).replace("\n", " ").strip()
    if args:
        return f"{GENERATED_HEADER_PREFIX} {args}; DO NOT EDIT."
    return f"{GENERATED_HEADER_PREFIX}; DO NOT EDIT."


def run(request: GenerationRequest, load_package: PackageLoader) -> GeneratedUnit:
    """Generate every requested constructor for ``request.type_name``.

    The request's constructor types were validated when it was built, so an
    unknown name never reaches ``load_package``. Fields are collected once and
    shared by all strategies; declarations follow the requested order.
    """
    generators = [generator_for(kind) for kind in request.constructor_types]
    package = load_package()
    fields, excluded = collect_members(request.type_name, package)
    declarations = []
    for generator in generators:
        declarations.extend(generator.generate(request.type_name, fields, excluded))
    decl = package.lookup(request.type_name)
    return GeneratedUnit(
        package=package.name,
        module=decl.module if decl is not None else "",
        type_name=request.type_name,
        header=provenance_header(request.invocation),
        declarations=tuple(declarations),
    )
