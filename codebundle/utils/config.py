from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from codebundle.core.errors import BundleConfigError

# -------------------------
# Defaults / file names
# -------------------------

DEFAULT_OUTPUT: str = "bundle.txt"
DEFAULT_SORT: str = "name"
RSP_FILE_NAME: str = "bundle.rsp"
EVENTS_FILE: str = "events.jsonl"

# Fallback for --log-dir.
LOG_DIR_ENV: str = "CODEBUNDLE_LOG_DIR"

ConfigLike = Union[str, Path, Mapping[str, Any]]


@dataclass
class BundleDefaults:
    """Values taken from a ``--config`` file.

    ``None`` means "not set in the file"; the CLI then falls back to its own
    defaults. Explicit command-line flags always win over these values.
    """

    language: List[str] = field(default_factory=list)
    output: Optional[str] = None
    note: Optional[bool] = None
    sort: Optional[str] = None
    remove_empty_lines: Optional[bool] = None
    author: Optional[str] = None


_KEY_ALIASES = {
    "languages": "language",
    "remove-empty-lines": "remove_empty_lines",
}

_BOOL_KEYS = ("note", "remove_empty_lines")
_STR_KEYS = ("output", "sort", "author")


def _read_mapping(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BundleConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise BundleConfigError(f"Malformed config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BundleConfigError(f"Config file {path} must contain a mapping at the top level.")
    return data


def load_bundle_defaults(src: ConfigLike) -> BundleDefaults:
    """
    Build BundleDefaults from a YAML/JSON file or an already-parsed mapping.

    Accepted keys: language (string or list; "languages" also works), output,
    note, sort, remove_empty_lines ("remove-empty-lines" also works), author.
    """
    if isinstance(src, Mapping):
        raw = dict(src)
        origin = "<mapping>"
    else:
        path = Path(src)
        raw = _read_mapping(path)
        origin = str(path)

    known = {f.name for f in fields(BundleDefaults)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        name = _KEY_ALIASES.get(str(key), str(key))
        if name not in known:
            raise BundleConfigError(f"Unknown key '{key}' in config {origin}.")
        values[name] = value

    language = values.pop("language", None)
    if language is None:
        languages: List[str] = []
    elif isinstance(language, str):
        languages = [language]
    elif isinstance(language, list) and all(isinstance(x, str) for x in language):
        languages = list(language)
    else:
        raise BundleConfigError(f"'language' in config {origin} must be a string or a list of strings.")

    for key in _BOOL_KEYS:
        if key in values and values[key] is not None and not isinstance(values[key], bool):
            raise BundleConfigError(f"'{key}' in config {origin} must be true or false.")
    for key in _STR_KEYS:
        if key in values and values[key] is not None:
            # YAML happily turns `author: 1984` into an int; keep it textual.
            if isinstance(values[key], (dict, list)):
                raise BundleConfigError(f"'{key}' in config {origin} must be a scalar.")
            values[key] = str(values[key])

    return BundleDefaults(language=languages, **values)
