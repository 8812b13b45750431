from __future__ import annotations

import keyword
import re
from typing import Iterable

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def to_snake(value: str) -> str:
    """``HTTPClient`` -> ``http_client``; ``userID`` -> ``user_id``."""
    parts = [p for p in re.split(r"[^a-zA-Z0-9]+", value) if p]
    words: list[str] = []
    for part in parts:
        part = _ACRONYM_BOUNDARY.sub(r"\1_\2", part)
        part = _WORD_BOUNDARY.sub(r"\1_\2", part)
        words.append(part.lower())
    return "_".join(words)


def _normalize_identifier(value: str, fallback: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9_]", "", value)
    if not cleaned:
        return fallback
    if cleaned[0].isdigit():
        return f"{fallback}{cleaned}"
    return cleaned


def parameter_name(attribute: str, reserved: Iterable[str] = ()) -> str:
    """Constructor-facing name for an attribute.

    Leading underscores are dropped so private attributes read as ordinary
    parameters; keywords, ``self`` and the ``reserved`` names get a trailing
    underscore.
    """
    name = _normalize_identifier(attribute.lstrip("_"), "field")
    if keyword.iskeyword(name) or name == "self" or name in set(reserved):
        name = f"{name}_"
    return name


def constructor_name(type_name: str) -> str:
    return f"new_{to_snake(type_name)}"


def builder_class_name(type_name: str) -> str:
    return f"{type_name}Builder"


def builder_entry_name(type_name: str) -> str:
    return f"new_{to_snake(type_name)}_builder"


def setter_name(param: str) -> str:
    return f"with_{param}"


def staged_attribute(param: str) -> str:
    return f"_{param}"


def output_file_name(type_name: str, suffix: str = "_gen") -> str:
    return f"{to_snake(type_name)}{suffix}.py"
