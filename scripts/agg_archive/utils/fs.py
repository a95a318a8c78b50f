"""
Directory listing and path helpers.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union


@dataclass(frozen=True)
class DirEntry:
    """One immediate child of a directory."""
    name: str
    path: Path
    is_dir: bool


def strip_extension(path: Union[str, Path], extension: str) -> Optional[Path]:
    """
    Remove ``extension`` from the end of ``path``, ignoring case.

    Returns None when the path does not end with the extension.
    """
    text = str(path)
    if not extension or not text.upper().endswith(extension.upper()):
        return None
    stripped = text[:len(text) - len(extension)]
    return Path(stripped) if stripped else None


def list_entries(directory: Union[str, Path], include_dirs: bool = True) -> List[DirEntry]:
    """List immediate children of ``directory`` sorted by name."""
    directory = Path(directory)
    entries = []

    with os.scandir(directory) as it:
        for item in it:
            is_dir = item.is_dir()
            if is_dir and not include_dirs:
                continue
            entries.append(DirEntry(name=item.name, path=Path(item.path), is_dir=is_dir))

    entries.sort(key=lambda entry: entry.name)
    return entries


def list_files_with_extensions(directory: Union[str, Path], extensions: Iterable[str]) -> List[Path]:
    """
    List regular files directly inside ``directory`` whose extension is one of
    ``extensions`` (case-insensitive), ordered by upper-cased file name.
    """
    wanted = {ext.upper() for ext in extensions}
    files = [
        entry.path for entry in list_entries(directory, include_dirs=False)
        if entry.path.suffix.upper() in wanted
    ]
    files.sort(key=lambda path: path.name.upper())
    return files
