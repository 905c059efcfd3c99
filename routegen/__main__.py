"""Entry point: python -m routegen

Reads an OpenAPI document, generates FastAPI routers and handler stubs.
"""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
