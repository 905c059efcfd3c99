"""Fatal errors raised by the generator.

Anything recoverable (missing operationId, broken $ref) is logged and
skipped instead; these exceptions abort the whole run.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for errors that stop a generation run."""


class DocumentLoadError(GeneratorError):
    """The API document could not be read or deserialized."""


class ReferenceCycleError(GeneratorError):
    """A $ref chain points back at itself."""

    def __init__(self, chain: list[tuple[str, str]]) -> None:
        self.chain = chain
        rendered = " -> ".join(f"{category}/{name}" for category, name in chain)
        super().__init__(f"Reference cycle detected: {rendered}")


class GeneratedSourceError(GeneratorError):
    """A rendered artifact is not valid Python."""

    def __init__(self, artifact: str, message: str, lineno: int | None = None) -> None:
        self.artifact = artifact
        self.lineno = lineno
        location = f" (line {lineno})" if lineno else ""
        super().__init__(f"{artifact}: {message}{location}")


class EmissionError(GeneratorError):
    """The output directory could not be created or written."""
