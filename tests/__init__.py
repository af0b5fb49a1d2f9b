"""Test package initialisation for GreenWalk."""

from pathlib import Path
import sys

# Ensure the repository root is importable when tests run from an isolated
# working directory; the engine modules live at the top level of the repo.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
