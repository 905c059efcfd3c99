"""Turn handler descriptors into handler stubs and their routing keys.

An operation without a request body gets one stub named after the
operation id. An operation with a body gets one stub per declared
content type, named ``<operation_id>_<content_type>``. Every stub from
one descriptor shares the descriptor's (path, method) routing key.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from .collector import HandlerDescriptor
from .naming import content_type_suffix
from .references import ReferenceProvider, is_reference, resolve_schema, split_reference
from .rendering import render

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutingKey:
    path: str
    method: str


@dataclass(frozen=True)
class BodyParameter:
    content_type: str
    required: bool
    schema_hint: str = "any"


@dataclass(frozen=True)
class HandlerStub:
    name: str
    routing_key: RoutingKey
    path_params: tuple[str, ...] = ()
    body: BodyParameter | None = None
    summary: str = ""

    @property
    def body_argument(self) -> str:
        """Name of the body argument, distinct from every path parameter."""
        name = "body"
        while name in self.path_params:
            name += "_"
        return name

    @property
    def docstring(self) -> str:
        key = self.routing_key
        lines = [self.summary.strip() or f"{key.method.upper()} {key.path}"]
        if self.body:
            need = "required" if self.body.required else "optional"
            lines.append("")
            lines.append(
                f"Accepts a {need} {self.body.content_type} body ({self.body.schema_hint})."
            )
        return "\n".join(lines)


Route = tuple[RoutingKey, str]


@dataclass(frozen=True)
class HandlerModule:
    tag: str
    stubs: list[HandlerStub]
    routes: list[Route]
    source: str


def describe_schema(schema: Any, provider: ReferenceProvider) -> str:
    """Short human-readable hint for a media type's schema."""
    if schema is None:
        return "any"
    if is_reference(schema):
        resolution = resolve_schema(schema, provider)
        if not resolution.ok:
            return f"unresolved {schema['$ref']}"
        _, name = split_reference(schema["$ref"])
        return name
    if isinstance(schema, dict):
        return schema.get("title") or schema.get("type") or "object"
    return "any"


def build_stubs(descriptor: HandlerDescriptor, provider: ReferenceProvider) -> list[HandlerStub]:
    """Stubs for one descriptor, one per request-body content type."""
    key = RoutingKey(descriptor.path, descriptor.method)
    body = descriptor.request_body

    if body is None:
        return [
            HandlerStub(
                name=descriptor.operation_id,
                routing_key=key,
                path_params=descriptor.path_params,
                summary=descriptor.summary,
            )
        ]

    content = body.get("content") or {}
    if not isinstance(content, dict):
        logger.warning(
            "%s %s (%s): ignoring malformed request body content %r",
            descriptor.method.upper(), descriptor.path, descriptor.operation_id, content,
        )
        content = {}
    elif not content:
        logger.warning(
            "%s %s (%s): request body declares no content types, no handler generated",
            descriptor.method.upper(), descriptor.path, descriptor.operation_id,
        )

    required = bool(body.get("required", False))
    stubs = []
    for content_type, media in content.items():
        schema = media.get("schema") if isinstance(media, dict) else None
        stubs.append(
            HandlerStub(
                name=f"{descriptor.operation_id}_{content_type_suffix(content_type)}",
                routing_key=key,
                path_params=descriptor.path_params,
                body=BodyParameter(
                    content_type=content_type,
                    required=required,
                    schema_hint=describe_schema(schema, provider),
                ),
                summary=descriptor.summary,
            )
        )
    return stubs


def deduplicate_stub_names(stubs: list[HandlerStub]) -> list[HandlerStub]:
    """Make stub names unique by appending the method, then a counter."""
    seen: set[str] = set()
    renamed: list[HandlerStub] = []
    for stub in stubs:
        if stub.name in seen:
            new_name = f"{stub.name}_{stub.routing_key.method}"
            logger.warning("Handler name %s already used, renaming to %s", stub.name, new_name)
            stub = dataclasses.replace(stub, name=new_name)
        renamed.append(stub)
        seen.add(stub.name)

    final_seen: dict[str, int] = {}
    result: list[HandlerStub] = []
    for stub in renamed:
        if stub.name in final_seen:
            final_seen[stub.name] += 1
            new_name = f"{stub.name}_{final_seen[stub.name]}"
            logger.warning("Handler name %s already used, renaming to %s", stub.name, new_name)
            stub = dataclasses.replace(stub, name=new_name)
        else:
            final_seen[stub.name] = 1
        result.append(stub)
    return result


def synthesize_handlers(
    tag: str,
    descriptors: list[HandlerDescriptor],
    provider: ReferenceProvider,
) -> HandlerModule:
    """Build and render every handler stub for a tag."""
    stubs: list[HandlerStub] = []
    for descriptor in descriptors:
        stubs.extend(build_stubs(descriptor, provider))
    stubs = deduplicate_stub_names(stubs)

    routes = [(stub.routing_key, stub.name) for stub in stubs]
    source = render(
        "handlers.py.j2",
        tag=tag,
        stubs=stubs,
        uses_body=any(stub.body for stub in stubs),
    )
    return HandlerModule(tag=tag, stubs=stubs, routes=routes, source=source)
