"""Dotenv loading shared by the web runner and tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Tuple

from dotenv import load_dotenv

_LOADED_FILES: Tuple[Path, ...] | None = None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _candidate_files() -> Iterator[Path]:
    """Explicit ``BOOKVAULT_ENV_FILE`` entries first, then the project files."""

    explicit = os.environ.get("BOOKVAULT_ENV_FILE", "")
    for value in explicit.split(os.pathsep):
        if value.strip():
            yield Path(value).expanduser().resolve()

    root = _project_root()
    yield root / ".env"
    yield root / ".env.local"


def load_environment(*, force: bool = False) -> Tuple[Path, ...]:
    """Load variables from dotenv files without overriding the real environment."""

    global _LOADED_FILES
    if _LOADED_FILES is not None and not force:
        return _LOADED_FILES

    loaded = []
    for path in dict.fromkeys(_candidate_files()):
        if path.is_file() and load_dotenv(path, override=False):
            loaded.append(path)
    _LOADED_FILES = tuple(loaded)
    return _LOADED_FILES


__all__ = ["load_environment"]
