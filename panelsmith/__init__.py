"""
Panelsmith - Comic Generation Job Orchestration

Turns a story into a planned, illustrated comic by chaining a narrative
planner, a per-page shot planner, a consistency resolver and an image
synthesizer. Work runs as background jobs whose progress clients poll.

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Panelsmith Team"
__project__ = "Panelsmith"

from pathlib import Path

# Load environment variables early - before any other imports that might need them
from panelsmith.core.env_loader import ensure_env_loaded
ensure_env_loaded()

# Package root directory
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent

__all__ = [
    "__version__",
    "__author__",
    "__project__",
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
]
