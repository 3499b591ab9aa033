"""
File discovery — enumerate candidate input files under a root path.

Every regular file is a candidate; files that are not proto sources
fail to parse later and are skipped there. Directory entries are
visited in sorted name order so runs are reproducible.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def discover_files(root: Path, recursive: bool = False) -> list[Path]:
    """List input files for a file or directory root.

    Args:
        root: A single file, or a directory to scan.
        recursive: Descend into subdirectories when ``root`` is a directory.

    Returns:
        ``[root]`` for a file, otherwise the files found in the directory.

    Raises:
        FileNotFoundError: If ``root`` is neither a file nor a directory.
    """
    if root.is_file():
        logger.debug("Loaded single file. Path = %s", root.resolve())
        return [root]

    if root.is_dir():
        logger.debug("Loaded directory. Path = %s", root.resolve())
        return _walk(root, recursive)

    raise FileNotFoundError(f"Can not find file or folder by path: {root}")


def _walk(folder: Path, recursive: bool) -> list[Path]:
    files: list[Path] = []
    for entry in sorted(folder.iterdir(), key=lambda p: p.name):
        if entry.is_file():
            logger.info("Found proto file candidate: %s", entry)
            files.append(entry)
        elif entry.is_dir() and recursive:
            files.extend(_walk(entry, recursive))
    return files
