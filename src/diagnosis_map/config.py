"""Configuration constants for diagnosis-map."""

import os
from pathlib import Path

# Static diagnostic tree shipped with the package.
TREE_DATA_PATH: Path = Path(__file__).parent / "data" / "diagnostic_tree.json"

# The tree's single root. It is always expanded.
ROOT_ID: str = "root"

# Base URL of the hosted diagnosis endpoints. Overridden by the env var.
API_BASE_ENV: str = "DIAGNOSIS_MAP_API_BASE"
DEFAULT_API_BASE: str = "http://localhost:3000"

SEARCH_ENDPOINT: str = "api/diagnosis-search"
ASSIST_ENDPOINT: str = "api/ai-diagnosis"
REQUEST_TIMEOUT_SECONDS: float = 30.0

# Cache prefix, used only when the client is created with from_cache=True.
API_CACHE_PREFIX: str = "/tmp/diagnosis-map-cache/cache-"

# Highlight on a navigated-to node is cleared after this many seconds.
HIGHLIGHT_DURATION_SECONDS: float = 3.0

# Search panel resets this long after "go to result".
SEARCH_CLEAR_DELAY_SECONDS: float = 0.5

# Viewport refit presets: (padding, duration_ms, delay_ms).
FIT_AFTER_TOGGLE: tuple[float, int, int] = (0.35, 800, 50)
FIT_AFTER_NAVIGATE: tuple[float, int, int] = (0.5, 800, 100)
FIT_AFTER_RECENTER: tuple[float, int, int] = (0.25, 1000, 100)
NAVIGATE_ZOOM_RANGE: tuple[float, float] = (0.5, 1.2)


def resolve_api_base() -> str:
    """Return the diagnosis API base URL, without a trailing slash."""
    base = os.environ.get(API_BASE_ENV) or DEFAULT_API_BASE
    return base.rstrip("/")
