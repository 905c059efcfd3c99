"""Assemble per-tag router modules and the aggregate server module.

Each tag gets a module exposing ``router()``, which registers the tag's
handler stubs under their (path, method) routing keys. The server module
exposes ``server()``, which nests every tag router under one prefix.
Tags are not prefixed individually: the full path already lives in each
routing key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .naming import module_name_for_tag
from .synthesizer import HandlerStub, Route, RoutingKey
from .rendering import render

logger = logging.getLogger(__name__)

ROOT_PREFIX = "/"


@dataclass(frozen=True)
class TagModule:
    tag: str
    name: str
    stubs: list[HandlerStub] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)

    @property
    def handlers_module(self) -> str:
        return f"{self.name}_handlers"

    @property
    def router_alias(self) -> str:
        # never shadows server(), app or FastAPI in the server module
        return f"{self.name}_router"


def tag_module_names(tags: list[str], reserved: frozenset[str] = frozenset()) -> dict[str, str]:
    """Map each tag to a unique module name, avoiding ``reserved`` names."""
    names: dict[str, str] = {}
    taken = set(reserved)
    for tag in tags:
        base = module_name_for_tag(tag)
        name, count = base, 1
        while name in taken:
            count += 1
            name = f"{base}_{count}"
        if name != base:
            logger.warning("Tag %r collides with another module, using %s", tag, name)
        taken.add(name)
        names[tag] = name
    return names


def find_duplicate_routes(routes: list[Route]) -> dict[RoutingKey, list[str]]:
    """Routing keys registered by more than one handler."""
    handlers: dict[RoutingKey, list[str]] = {}
    for key, handler in routes:
        handlers.setdefault(key, []).append(handler)
    return {key: names for key, names in handlers.items() if len(names) > 1}


def assemble_router(module: TagModule, handlers_package: str = "handlers") -> str:
    """Render the router module for one tag."""
    for key, names in find_duplicate_routes(module.routes).items():
        logger.warning(
            "%s %s is registered by %s; the first registration (%s) serves requests",
            key.method.upper(), key.path, ", ".join(names), names[0],
        )
    return render("router.py.j2", module=module, handlers_package=handlers_package)


def assemble_index(modules: list[TagModule]) -> str:
    """Render the handler package index."""
    return render("index.py.j2", modules=modules)


def assemble_server(
    modules: list[TagModule],
    prefix: str = ROOT_PREFIX,
    title: str | None = None,
) -> str:
    """Render the aggregate server module."""
    return render("server.py.j2", modules=modules, prefix=prefix, title=title)
