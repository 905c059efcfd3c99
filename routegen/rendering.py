"""Jinja2 environment for the generated-source templates."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import jinja2

from .naming import to_route_path

TEMPLATE_DIR = Path(__file__).parent / "templates"


def mount_prefix(prefix: str) -> str:
    """FastAPI spells the root mount as an empty prefix."""
    return prefix.rstrip("/")


@lru_cache(maxsize=1)
def get_environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["pyrepr"] = repr
    env.filters["route_path"] = to_route_path
    env.filters["mount_prefix"] = mount_prefix
    return env


def render(template_name: str, **context: Any) -> str:
    """Render one of the bundled templates."""
    return get_environment().get_template(template_name).render(**context)
