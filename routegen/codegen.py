"""Render, validate and write the generated modules.

Every artifact is rendered and compiled before anything touches the disk:
one artifact that fails to compile aborts the run with no files written.
Each artifact is written twice, as the raw render (``<stem>.py.src``,
kept for diagnosing template bugs) and as the formatted module
(``<stem>.py``).
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .collector import TagGroups, collect_operations
from .config import GeneratorSettings
from .errors import EmissionError, GeneratedSourceError
from .references import ReferenceProvider, reference_provider_for
from .router import TagModule, assemble_index, assemble_router, assemble_server, tag_module_names
from .synthesizer import synthesize_handlers

logger = logging.getLogger(__name__)

GENERATED_HEADER = "# This file is generated by routegen. Do not edit.\n"

INDEX_STEM = "__init__"


@dataclass(frozen=True)
class Artifact:
    stem: str
    source: str
    subdir: str = ""

    @property
    def relative_path(self) -> Path:
        return Path(self.subdir) / f"{self.stem}.py"

    @property
    def raw_relative_path(self) -> Path:
        return Path(self.subdir) / f"{self.stem}.py.src"


@dataclass
class GenerationResult:
    groups: TagGroups
    modules: list[TagModule]
    written: list[Path] = field(default_factory=list)

    @property
    def handler_count(self) -> int:
        return sum(len(module.stubs) for module in self.modules)


def validate_source(artifact: Artifact) -> ast.Module:
    """Parse and compile an artifact's source.

    Compiling catches what the parser accepts but the compiler rejects,
    such as duplicate argument names. Raises GeneratedSourceError.
    """
    filename = str(artifact.relative_path)
    try:
        tree = ast.parse(artifact.source, filename=filename)
        compile(tree, filename, "exec")
    except SyntaxError as e:
        raise GeneratedSourceError(filename, e.msg, e.lineno) from e
    return tree


def format_source(tree: ast.Module) -> str:
    """Pretty-print a parsed module."""
    return GENERATED_HEADER + ast.unparse(tree) + "\n"


def build_modules(
    groups: TagGroups,
    provider: ReferenceProvider,
    settings: GeneratorSettings,
) -> tuple[list[TagModule], dict[str, str]]:
    """Synthesize handlers per tag. Returns the modules and their handler sources."""
    names = tag_module_names(
        list(groups),
        reserved=frozenset({settings.handlers_package, settings.server_module}),
    )
    modules: list[TagModule] = []
    handler_sources: dict[str, str] = {}
    for tag, descriptors in groups.items():
        handlers = synthesize_handlers(tag, descriptors, provider)
        module = TagModule(tag=tag, name=names[tag], stubs=handlers.stubs, routes=handlers.routes)
        modules.append(module)
        handler_sources[module.name] = handlers.source
    return modules, handler_sources


def render_artifacts(
    modules: list[TagModule],
    handler_sources: dict[str, str],
    settings: GeneratorSettings,
    title: str | None = None,
) -> list[Artifact]:
    """Render every artifact of the run."""
    artifacts: list[Artifact] = []
    for module in modules:
        artifacts.append(
            Artifact(module.handlers_module, handler_sources[module.name], settings.handlers_package)
        )
        artifacts.append(
            Artifact(module.name, assemble_router(module, settings.handlers_package))
        )
    if modules:
        artifacts.append(Artifact(INDEX_STEM, assemble_index(modules), settings.handlers_package))
    artifacts.append(
        Artifact(
            settings.server_module,
            assemble_server(modules, prefix=settings.mount_prefix, title=title),
        )
    )
    return artifacts


def _write(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise EmissionError(f"Could not write {path}: {e}") from e


def write_artifacts(
    artifacts: list[Artifact],
    output_dir: Path,
    write_raw: bool = True,
) -> list[Path]:
    """Validate all artifacts, then write them under ``output_dir``."""
    formatted = [(artifact, format_source(validate_source(artifact))) for artifact in artifacts]

    written: list[Path] = []
    for artifact, code in formatted:
        if write_raw:
            raw_path = output_dir / artifact.raw_relative_path
            _write(raw_path, artifact.source)
            written.append(raw_path)
        path = output_dir / artifact.relative_path
        _write(path, code)
        written.append(path)
        logger.debug("Wrote %s", path)
    return written


def generate(spec: dict[str, Any], settings: GeneratorSettings) -> GenerationResult:
    """Run the whole pipeline for one document."""
    provider = reference_provider_for(spec)
    groups = collect_operations(spec, provider)
    for tag, descriptors in groups.items():
        logger.info("Tag %s: %d operations", tag, len(descriptors))

    modules, handler_sources = build_modules(groups, provider, settings)
    info = spec.get("info")
    title = info.get("title") if isinstance(info, dict) else None
    if not isinstance(title, str):
        title = None
    artifacts = render_artifacts(modules, handler_sources, settings, title=title)
    written = write_artifacts(artifacts, settings.output_dir, write_raw=settings.write_raw)
    return GenerationResult(groups=groups, modules=modules, written=written)
