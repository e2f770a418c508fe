#!/usr/bin/env python3
"""
Write the OpenAPI document of the Movies API to a file.

FastAPI derives the document from the routes and the pydantic schemas
in ``schemas.movie``; this script only serialises it, so the contract
can be committed and diffed in CI.

Usage:
    python -m movies_api.app.api_docs.openapi_writer --output openapi.json
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "openapi.json"


def build_openapi(app: Optional[FastAPI] = None) -> Dict[str, Any]:
    """Return the OpenAPI document of ``app`` (the default app if omitted)."""
    if app is None:
        from movies_api.app.main import app as default_app
        app = default_app
    return app.openapi()


def write_openapi(path: str, app: Optional[FastAPI] = None) -> Path:
    """Serialise the document as indented JSON and return the written path."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(build_openapi(app), indent=2) + "\n", encoding="utf-8")
    logger.info("OpenAPI document written to %s", output)
    return output


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Generate the Movies API OpenAPI document")
    parser.add_argument("--output", "-o", default=DEFAULT_OUTPUT, help="Destination file")
    args = parser.parse_args(argv)
    print(write_openapi(args.output))


if __name__ == "__main__":
    main()
