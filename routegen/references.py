"""Resolve $ref pointers against a document's components table.

A reference looks like ``#/components/<category>/<name>``. Only the last
two segments matter. Components may themselves be references, so lookup
recurses until a literal turns up, the chain breaks, or it loops.

Two providers exist: one backed by the components table and one that
never finds anything (documents without ``components``). The provider is
chosen once per document by ``reference_provider_for``.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from .errors import ReferenceCycleError
from .loader import get_components

PARAMETERS = "parameters"
REQUEST_BODIES = "request_bodies"
SCHEMAS = "schemas"

# Category spellings seen in reference strings and components tables.
_CATEGORY_ALIASES: dict[str, str] = {
    "parameters": PARAMETERS,
    "requestBodies": REQUEST_BODIES,
    "request_bodies": REQUEST_BODIES,
    "request_body": REQUEST_BODIES,
    "schemas": SCHEMAS,
}


def canonical_category(category: str) -> str | None:
    """Map a category spelling onto its canonical name."""
    return _CATEGORY_ALIASES.get(category)


class ResolutionStatus(enum.Enum):
    RESOLVED = "resolved"
    ABSENT = "absent"
    BROKEN = "broken"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving an optional, possibly-referenced value."""

    status: ResolutionStatus
    value: Any = None
    reason: str = ""

    @classmethod
    def resolved(cls, value: Any) -> Resolution:
        return cls(ResolutionStatus.RESOLVED, value)

    @classmethod
    def absent(cls) -> Resolution:
        return cls(ResolutionStatus.ABSENT)

    @classmethod
    def broken(cls, reason: str) -> Resolution:
        return cls(ResolutionStatus.BROKEN, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED

    @property
    def is_broken(self) -> bool:
        return self.status is ResolutionStatus.BROKEN


class ReferenceProvider(ABC):
    """Look up raw components by (category, name)."""

    @abstractmethod
    def lookup(self, category: str, name: str) -> Any | None:
        """Return the component (literal or reference) or None."""


class EmptyReferenceProvider(ReferenceProvider):
    """Provider for documents without a components section."""

    def lookup(self, category: str, name: str) -> Any | None:
        return None


class ComponentReferenceProvider(ReferenceProvider):
    """Provider backed by the document's components table."""

    def __init__(self, components: dict[str, Any]) -> None:
        self._tables: dict[str, dict[str, Any]] = {}
        for key, table in components.items():
            category = canonical_category(key)
            if category is None or not isinstance(table, dict):
                continue
            self._tables.setdefault(category, {}).update(table)

    def lookup(self, category: str, name: str) -> Any | None:
        return self._tables.get(category, {}).get(name)


def reference_provider_for(spec: dict[str, Any]) -> ReferenceProvider:
    """Pick the provider variant for a loaded document."""
    components = get_components(spec)
    if components is None:
        return EmptyReferenceProvider()
    return ComponentReferenceProvider(components)


def is_reference(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("$ref"), str)


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def split_reference(ref: str) -> tuple[str, str] | None:
    """Return (category, name) from the last two segments of a reference."""
    parts = ref.split("/")
    if len(parts) < 2:
        return None
    category, name = _unescape(parts[-2]), _unescape(parts[-1])
    if not category or not name:
        return None
    return category, name


def resolve(value: Any, category: str, provider: ReferenceProvider) -> Resolution:
    """Dereference ``value`` in ``category`` until a literal is reached.

    Raises ReferenceCycleError if the chain revisits a component.
    """
    if value is None:
        return Resolution.absent()

    seen: list[tuple[str, str]] = []
    while is_reference(value):
        ref = value["$ref"]
        parts = split_reference(ref)
        if parts is None:
            return Resolution.broken(f"malformed reference {ref!r}")

        ref_category, name = parts
        if canonical_category(ref_category) != category:
            return Resolution.broken(
                f"reference {ref!r} does not point into {category}"
            )

        key = (category, name)
        if key in seen:
            raise ReferenceCycleError(seen + [key])
        seen.append(key)

        value = provider.lookup(category, name)
        if value is None:
            return Resolution.broken(f"reference {ref!r} not found")

    return Resolution.resolved(value)


def resolve_parameter(value: Any, provider: ReferenceProvider) -> Resolution:
    return resolve(value, PARAMETERS, provider)


def resolve_request_body(value: Any, provider: ReferenceProvider) -> Resolution:
    return resolve(value, REQUEST_BODIES, provider)


def resolve_schema(value: Any, provider: ReferenceProvider) -> Resolution:
    return resolve(value, SCHEMAS, provider)
