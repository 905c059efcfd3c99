"""Shared fixtures for routegen tests.

The petstore document under spec/ covers referenced parameters, chained
request bodies, multi-content bodies, untagged operations and an
operation without an operationId.
"""

from __future__ import annotations

import importlib
import sys
from typing import Any

import pytest

from routegen.codegen import generate
from routegen.config import GeneratorSettings
from routegen.loader import load_spec
from routegen.references import reference_provider_for


@pytest.fixture(scope="session")
def petstore() -> dict[str, Any]:
    return load_spec()


@pytest.fixture(scope="session")
def petstore_provider(petstore):
    return reference_provider_for(petstore)


@pytest.fixture
def settings(tmp_path) -> GeneratorSettings:
    """Settings writing into a fresh package directory."""
    return GeneratorSettings(output_dir=tmp_path / "generated_app")


# ---------------------------------------------------------------------------
# Generated package — written to tmp_path and imported fresh
# ---------------------------------------------------------------------------

@pytest.fixture
def import_generated(tmp_path, monkeypatch):
    """Generate a document into a fresh package and import its server module.

    The host application owns packaging, so the fixture adds the package
    __init__ the generated relative imports need.
    """
    packages: list[str] = []

    def _purge(package: str) -> None:
        for name in [m for m in sys.modules if m == package or m.startswith(f"{package}.")]:
            sys.modules.pop(name)

    def _import(document: dict[str, Any], package: str):
        output_dir = tmp_path / package
        result = generate(document, GeneratorSettings(output_dir=output_dir))
        (output_dir / "__init__.py").write_text("")
        monkeypatch.syspath_prepend(str(tmp_path))
        _purge(package)
        packages.append(package)
        importlib.invalidate_caches()
        return result, importlib.import_module(f"{package}.lib")

    yield _import
    for package in packages:
        _purge(package)


@pytest.fixture
def generated_app(petstore, import_generated):
    """The generated petstore server."""
    return import_generated(petstore, "petstore_generated")
