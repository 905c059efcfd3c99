"""Collect operations from an OpenAPI document into handler descriptors.

Walks every path item, resolves parameters and request bodies through
the reference provider, and groups the resulting descriptors by the
operation's first tag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .loader import get_paths
from .naming import normalize_path_template, to_identifier
from .references import (
    ReferenceProvider,
    is_reference,
    resolve_parameter,
    resolve_request_body,
)

logger = logging.getLogger(__name__)

# HTTP methods turned into handlers, in emission order
SUPPORTED_METHODS: tuple[str, ...] = ("get", "post", "put")

# Group for operations that declare no tags
UNTAGGED = "NoTag"


@dataclass(frozen=True)
class HandlerDescriptor:
    operation_id: str
    method: str
    path: str
    path_params: tuple[str, ...] = ()
    request_body: dict[str, Any] | None = None
    summary: str = field(default="", compare=False)


TagGroups = dict[str, list[HandlerDescriptor]]


def _collect_path_params(
    operation: dict[str, Any],
    provider: ReferenceProvider,
    label: str,
) -> tuple[str, ...]:
    """Resolve declared parameters and keep the path-style ones, in order."""
    names: list[str] = []
    for param in operation.get("parameters") or []:
        resolution = resolve_parameter(param, provider)
        if resolution.is_broken:
            logger.warning("%s: dropping parameter, %s", label, resolution.reason)
            continue
        resolved = resolution.value
        if not isinstance(resolved, dict):
            logger.warning("%s: ignoring malformed parameter %r", label, resolved)
            continue
        if resolved.get("in") != "path":
            continue
        name = resolved.get("name")
        if not isinstance(name, str) or not name:
            logger.warning("%s: ignoring path parameter without a name", label)
            continue
        ident = to_identifier(name)
        if ident in names:
            logger.warning("%s: path parameter %r repeats %s, dropping it", label, name, ident)
            continue
        names.append(ident)
    return tuple(names)


def _collect_request_body(
    operation: dict[str, Any],
    provider: ReferenceProvider,
    label: str,
) -> dict[str, Any] | None:
    """Resolve the request body; broken references count as no body."""
    resolution = resolve_request_body(operation.get("requestBody"), provider)
    if resolution.is_broken:
        logger.warning("%s: ignoring request body, %s", label, resolution.reason)
        return None
    if resolution.ok and not isinstance(resolution.value, dict):
        logger.warning("%s: ignoring malformed request body", label)
        return None
    return resolution.value


def operation_tag(operation: dict[str, Any]) -> str:
    """First declared tag, or the untagged group."""
    tags = operation.get("tags") or []
    if not isinstance(tags, list):
        logger.warning("Ignoring malformed tags %r", tags)
        return UNTAGGED
    if tags and isinstance(tags[0], str) and tags[0]:
        return tags[0]
    return UNTAGGED


def process_operation(
    method: str,
    path: str,
    operation: dict[str, Any],
    provider: ReferenceProvider,
) -> tuple[str, HandlerDescriptor] | None:
    """Build the descriptor for one operation and pick its tag.

    Returns None for operations without an operationId.
    """
    operation_id = operation.get("operationId")
    if not operation_id:
        logger.warning("Path %s %s has no operationId, skipping", path, method.upper())
        return None

    label = f"{method.upper()} {path} ({operation_id})"
    logger.info("Path %s %s operation %s", path, method.upper(), operation_id)

    descriptor = HandlerDescriptor(
        operation_id=to_identifier(str(operation_id)),
        method=method,
        path=normalize_path_template(path),
        path_params=_collect_path_params(operation, provider, label),
        request_body=_collect_request_body(operation, provider, label),
        summary=operation.get("summary") or "",
    )
    return operation_tag(operation), descriptor


def collect_operations(spec: dict[str, Any], provider: ReferenceProvider) -> TagGroups:
    """Group every supported operation in the document by tag."""
    groups: TagGroups = {}

    for path, path_item in get_paths(spec).items():
        if is_reference(path_item):
            logger.warning("Path %s is a $ref, skipping", path)
            continue
        if not isinstance(path_item, dict):
            logger.warning("Path %s is not an object, skipping", path)
            continue

        for method in SUPPORTED_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            processed = process_operation(method, path, operation, provider)
            if processed is None:
                continue
            tag, descriptor = processed
            groups.setdefault(tag, []).append(descriptor)

    return groups
