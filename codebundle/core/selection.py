from __future__ import annotations

import enum
from pathlib import Path
from typing import AbstractSet, Iterable, List, Optional


class SortMode(str, enum.Enum):
    NAME = "name"
    TYPE = "type"


def parse_sort_mode(value: Optional[str]) -> SortMode:
    """'type' (any case) sorts by extension; every other value sorts by name."""
    if value is not None and value.strip().lower() == SortMode.TYPE.value:
        return SortMode.TYPE
    return SortMode.NAME


def file_extension(path: Path) -> str:
    """
    Text from the last dot of the file name, or "" when there is none.

    Unlike ``Path.suffix`` a dotfile such as ``.py`` counts as having the
    extension ``.py``. A trailing dot (``notes.``) gives "".
    """
    name = path.name
    dot = name.rfind(".")
    if dot == -1 or dot == len(name) - 1:
        return ""
    return name[dot:]


def _same_file(a: Path, b: Path) -> bool:
    try:
        return a.resolve() == b.resolve()
    except OSError:
        return False


def list_candidates(
    workdir: Path,
    extensions: AbstractSet[str],
    exclude: Optional[Path] = None,
) -> List[Path]:
    """
    Regular files directly inside ``workdir`` whose extension (any case) is selected.

    No recursion. ``exclude`` is typically the bundle output, which must not be
    read back into itself.
    """
    files: List[Path] = []
    for p in Path(workdir).iterdir():
        if not p.is_file():
            continue
        if file_extension(p).lower() not in extensions:
            continue
        if exclude is not None and _same_file(p, exclude):
            continue
        files.append(p)
    return files


def sort_candidates(files: Iterable[Path], mode: SortMode) -> List[Path]:
    if mode is SortMode.TYPE:
        return sorted(files, key=lambda p: (file_extension(p).lower(), p.name))
    return sorted(files, key=lambda p: p.name)
