"""Canonical names for generated identifiers, modules and route paths.

Operation ids, parameter names and tags all end up as Python identifiers
in generated code, so everything passes through snake_case plus an
identifier-safety step.

Examples:
  getPetById            -> get_pet_by_id
  get_pet_by_id         -> get_pet_by_id
  /pets/{petId}         -> /pets/:pet_id
  /a/{fooBar}/b/{baz}   -> /a/:foo_bar/b/:baz
  application/json      -> application_json
"""

from __future__ import annotations

import keyword
import re

_ROUTE_PARAM_RE = re.compile(r"/:([A-Za-z_][A-Za-z0-9_]*)")


def to_snake_case(name: str) -> str:
    """Convert camelCase, PascalCase, kebab-case or spaced words to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1)
    s3 = re.sub(r"[\s.\-]+", "_", s2)
    return re.sub(r"_+", "_", s3).strip("_").lower()


def to_identifier(name: str) -> str:
    """snake_case ``name`` and make it a legal Python identifier."""
    value = to_snake_case(name)
    value = re.sub(r"[^0-9a-z_]", "_", value)
    value = re.sub(r"_+", "_", value).strip("_")
    if not value:
        value = "value"
    if value[0].isdigit():
        value = f"_{value}"
    if keyword.iskeyword(value):
        value += "_"
    return value


def normalize_path_template(path: str) -> str:
    """Rewrite ``{name}`` placeholders as ``:snake_name``.

    Handles one placeholder per pass and repeats until no ``{`` is left.
    An unmatched ``{`` is dropped.
    """
    head, brace, rest = path.partition("{")
    if not brace:
        return path
    name, close, tail = rest.partition("}")
    if close:
        modified = f":{to_identifier(name)}{tail}"
    else:
        modified = rest
    return normalize_path_template(head + modified)


def content_type_suffix(content_type: str) -> str:
    """Turn a media type into an identifier suffix."""
    return to_identifier(content_type.replace("/", "_"))


def module_name_for_tag(tag: str) -> str:
    """Module name used for a tag's generated files."""
    return to_identifier(tag)


def to_route_path(path: str) -> str:
    """Convert a normalized ``/pets/:pet_id`` path to ``/pets/{pet_id}``.

    Only segment-leading tokens are converted, so ``/m/:id:run`` keeps
    its literal ``:run`` suffix.
    """
    return _ROUTE_PARAM_RE.sub(r"/{\1}", path)
