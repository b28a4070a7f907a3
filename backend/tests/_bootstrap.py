from __future__ import annotations

import os
import sys
from pathlib import Path


def bootstrap_backend_imports() -> None:
    """Ensure `import indexrepair.*` works and keeps unit tests off any real graph storage."""
    repo_root = Path(__file__).resolve().parents[2]
    backend_dir = str(repo_root / "backend")
    if backend_dir not in sys.path:
        sys.path.insert(0, backend_dir)

    os.environ.setdefault("STORAGE_URL", "sqlite+pysqlite:///:memory:")


def reset_caches() -> None:
    """Clear lru_cache-backed singletons to isolate tests."""
    # bootstrap first so these imports work
    bootstrap_backend_imports()

    from indexrepair.config import get_settings

    get_settings.cache_clear()
