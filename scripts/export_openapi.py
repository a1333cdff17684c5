from __future__ import annotations

import json
import sys
from pathlib import Path

from fastapi import FastAPI

from taskflow.api.main import create_app


def export_openapi(app: FastAPI, destination: Path) -> None:
    """Write the TaskFlow OpenAPI document to ``destination``."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(app.openapi(), indent=2))


def main() -> None:
    output = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("docs/api/openapi.json")
    export_openapi(create_app(), output)
    print(f"OpenAPI schema written to {output}")


if __name__ == "__main__":
    main()
