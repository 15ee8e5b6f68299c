"""
File-related helper functions.

These functions handle:
- Writing decoded files below an output directory,
- Reading a prompt from a text file for the CLI.

Generated names come from model output, so every path is checked to stay
inside the output directory before anything is written.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable

from .models import GeneratedFile

logger = logging.getLogger(__name__)


class UnsafePathError(ValueError):
    """A generated filename would escape the output directory."""


def safe_relative_path(name: str) -> Path:
    """
    Normalise a generated filename into a relative path.

    Raises:
        UnsafePathError for absolute paths, drive letters or '..' segments.
    """
    posix = PurePosixPath(name.replace("\\", "/"))
    if posix.is_absolute() or not posix.parts or ".." in posix.parts or ":" in posix.parts[0]:
        raise UnsafePathError(f"Refusing to write outside the output directory: {name!r}")
    return Path(*posix.parts)


def write_generated_files(files: Iterable[GeneratedFile], out_dir: str | Path) -> Dict[str, Path]:
    """
    Write files below out_dir and return {name: written path}.

    Files sharing a name overwrite each other in order, so the last one wins.
    Every name is checked before the first write; one unsafe name means
    nothing is written.
    """
    root = Path(out_dir)
    planned = [(generated, root / safe_relative_path(generated.name)) for generated in files]
    written: Dict[str, Path] = {}
    for generated, target in planned:
        if generated.name in written:
            logger.warning("Duplicate generated file %s; keeping the later copy", generated.name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.content, encoding="utf-8")
        written[generated.name] = target
    return written


def read_text_file(path_str: str) -> str:
    """
    Read a UTF-8 text file and return its contents as a string.

    If the file does not exist, it returns an empty string.
    """
    path = Path(path_str)

    if not path.exists():
        return ""
    with path.open("r", encoding="utf-8") as f:
        content = f.read()

    return content
