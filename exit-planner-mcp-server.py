#!/usr/bin/env python3

from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from exit_planner.server import main, mcp

__all__ = ["main", "mcp"]


if __name__ == "__main__":
    main()
