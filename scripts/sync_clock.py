#!/usr/bin/env python3
"""Terminal clock launcher.

Usage examples:
  - python scripts/sync_clock.py naver.com
  - python scripts/sync_clock.py example.com --duration 5 --api http://localhost:8000
"""

from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.app.main import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
