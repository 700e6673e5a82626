"""Root conftest: exports .env.test so team_chat.config sees zero-latency settings."""
from __future__ import annotations

import os
from pathlib import Path


def _export_env_file(path: Path) -> None:
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())


_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    _export_env_file(_env_test)
