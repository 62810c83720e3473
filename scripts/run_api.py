#!/usr/bin/env python3
"""Run the time sync API with uvicorn.

Usage examples:
  - python scripts/run_api.py
  - python scripts/run_api.py --port 8080 --reload
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


# Ensure repo root is on sys.path so `src.*` imports resolve
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import uvicorn  # noqa: E402

from src.config.settings import settings  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the time sync API")
    parser.add_argument("--host", default=settings.API_HOST, help="Bind host")
    parser.add_argument("--port", type=int, default=settings.API_PORT, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "src.api.rest_api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
        app_dir=str(ROOT),
    )


if __name__ == "__main__":
    main()
