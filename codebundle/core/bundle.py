from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from codebundle.core.errors import (
    BundleConfigError,
    BundleError,
    BundlePathError,
    BundleValidationError,
)
from codebundle.core.languages import resolve_extensions, unknown_languages
from codebundle.core.selection import SortMode, list_candidates, sort_candidates
from codebundle.utils.logging import JsonlLogger

__all__ = [
    "BundleConfigError",
    "BundleError",
    "BundleOptions",
    "BundlePathError",
    "BundleResult",
    "BundleValidationError",
    "bundle_files",
    "read_source_lines",
    "strip_blank_lines",
]


@dataclass(frozen=True)
class BundleOptions:
    languages: Tuple[str, ...]
    output: Path
    note: bool = False
    sort: SortMode = SortMode.NAME
    remove_empty_lines: bool = False
    author: Optional[str] = None


@dataclass
class BundleResult:
    output: Path
    files: List[Path] = field(default_factory=list)


def strip_blank_lines(lines: Iterable[str]) -> List[str]:
    return [line for line in lines if line.strip()]


def read_source_lines(path: Path) -> List[str]:
    """Lines of a text file without their terminators (UTF-8, BOM tolerated)."""
    with path.open("r", encoding="utf-8-sig") as f:
        return [line.rstrip("\n") for line in f]


def _write_file_block(
    out,
    path: Path,
    workdir: Path,
    note: bool,
    remove_empty_lines: bool,
) -> None:
    if note:
        out.write(f"# Source: {path.relative_to(workdir).as_posix()}\n")

    lines: Sequence[str] = read_source_lines(path)
    if remove_empty_lines:
        lines = strip_blank_lines(lines)

    for line in lines:
        out.write(line + "\n")
    # Separator after every file, even when blank lines were removed.
    out.write("\n")


def bundle_files(
    options: BundleOptions,
    workdir: Path,
    logger: Optional[JsonlLogger] = None,
) -> BundleResult:
    """
    Concatenate the selected files of ``workdir`` into ``options.output``.

    Raises BundleValidationError when no known language was requested and
    BundlePathError when the output directory does not exist. Any other
    OSError / UnicodeDecodeError propagates; whatever was already written to
    the output stays there.
    """
    lg = logger or JsonlLogger()
    workdir = Path(workdir).resolve()

    ignored = unknown_languages(options.languages)
    if ignored:
        lg.warning("Ignoring unknown languages.", languages=ignored)

    extensions = resolve_extensions(options.languages)

    output = Path(options.output)
    if not output.is_absolute():
        output = workdir / output

    files = sort_candidates(
        list_candidates(workdir, extensions, exclude=output),
        options.sort,
    )
    lg.info(
        "Candidates selected.",
        extensions=extensions,
        sort=options.sort.value,
        count=len(files),
    )

    try:
        out = output.open("w", encoding="utf-8")
    except FileNotFoundError as exc:
        raise BundlePathError(output) from exc

    with out:
        if options.author:
            out.write(f"# Author: {options.author}\n")
        for path in files:
            lg.debug("Bundling file.", path=path.name)
            _write_file_block(out, path, workdir, options.note, options.remove_empty_lines)

    return BundleResult(output=output.resolve(), files=files)
