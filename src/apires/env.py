"""Load ``KEY=value`` pairs from .env files into the environment.

Files are read from the config directory, then the working directory; a
later file overrides an earlier one, and variables already present in the
environment are never overwritten.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, Optional


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env_file(path: Path) -> Dict[str, str]:
    """Parse one .env file; missing or unreadable files yield ``{}``."""
    if not path.is_file():
        return {}
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return {}

    result: Dict[str, str] = {}
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        result[key] = _unquote(value.strip())
    return result


def load_env_files(config_dir: Path, extra: Optional[Iterable[Path]] = None) -> Dict[str, str]:
    """Apply .env files to ``os.environ``; returns the variables that were set."""
    candidates = [config_dir / ".env", Path.cwd() / ".env"]
    candidates.extend(extra or ())

    combined: Dict[str, str] = {}
    for env_file in candidates:
        combined.update(parse_env_file(env_file))

    applied = {k: v for k, v in combined.items() if k not in os.environ}
    os.environ.update(applied)
    return applied
