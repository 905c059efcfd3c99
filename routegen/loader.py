"""Load and parse an OpenAPI document.

Reads a JSON (or YAML) document and extracts paths and components.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .errors import DocumentLoadError

SPEC_PATH = Path(__file__).parent.parent / "spec" / "petstore.json"

_YAML_SUFFIXES = {".yaml", ".yml"}


def parse_document(text: str, *, fmt: str = "json") -> dict[str, Any]:
    """Deserialize document text into a mapping."""
    try:
        if fmt == "yaml":
            document = yaml.safe_load(text)
        else:
            document = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentLoadError(f"Could not deserialize input: {e}") from e

    if not isinstance(document, dict):
        raise DocumentLoadError(
            f"Document root must be an object, got {type(document).__name__}"
        )
    if not isinstance(document.get("paths", {}), dict):
        raise DocumentLoadError("Document 'paths' must be an object")
    return document


def load_spec(path: Path | None = None) -> dict[str, Any]:
    """Load the OpenAPI document from disk."""
    spec_file = path or SPEC_PATH
    try:
        text = spec_file.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(f"Could not read {spec_file}: {e}") from e
    fmt = "yaml" if spec_file.suffix.lower() in _YAML_SUFFIXES else "json"
    return parse_document(text, fmt=fmt)


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the document."""
    return spec.get("paths") or {}


def get_components(spec: dict[str, Any]) -> dict[str, Any] | None:
    """Extract the components table, or None when the document has none."""
    components = spec.get("components")
    if isinstance(components, dict):
        return components
    return None
