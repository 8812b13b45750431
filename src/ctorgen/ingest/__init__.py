from ctorgen.ingest.adapter_contract import (
    DeclKind,
    MemberDecl,
    PackageDeclarations,
    SourceLoader,
    TypeDecl,
)
from ctorgen.ingest.python_loader import PythonSourceLoader, load_package

__all__ = [
    "DeclKind",
    "MemberDecl",
    "PackageDeclarations",
    "PythonSourceLoader",
    "SourceLoader",
    "TypeDecl",
    "load_package",
]
