from __future__ import annotations

from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Tuple

from codebundle.core.errors import BundleValidationError

# Language name -> extensions (lower-case, leading dot).
LANGUAGE_EXTENSIONS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "csharp": (".cs",),
        "python": (".py",),
        "java": (".java",),
        "javascript": (".js",),
        "cpp": (".cpp", ".h"),
        "html": (".html",),
        "css": (".css",),
        "typescript": (".ts",),
    }
)

ALL_LANGUAGES = "all"


def split_language_tokens(tokens: Iterable[str]) -> List[str]:
    """Split comma lists (``python,java``) into separate, trimmed tokens."""
    out: List[str] = []
    for token in tokens:
        for piece in token.split(","):
            piece = piece.strip()
            if piece:
                out.append(piece)
    return out


def unknown_languages(tokens: Iterable[str]) -> List[str]:
    return [t for t in tokens if t != ALL_LANGUAGES and t not in LANGUAGE_EXTENSIONS]


def resolve_extensions(languages: Iterable[str]) -> FrozenSet[str]:
    """
    Map language tokens to the set of file extensions they select.

    "all" selects every known extension regardless of the other tokens.
    Unknown tokens contribute nothing; only an empty result is an error.
    """
    tokens = list(languages)
    if ALL_LANGUAGES in tokens:
        selected = {ext for exts in LANGUAGE_EXTENSIONS.values() for ext in exts}
    else:
        selected = {ext for lang in tokens for ext in LANGUAGE_EXTENSIONS.get(lang, ())}

    if not selected:
        raise BundleValidationError("No valid languages selected")
    return frozenset(selected)
