from __future__ import annotations

import json
from pathlib import Path

import pytest

from codebundle.core.errors import BundleConfigError
from codebundle.utils.config import BundleDefaults, load_bundle_defaults


def test_yaml_defaults(tmp_path: Path):
    cfg = tmp_path / "bundle.yaml"
    cfg.write_text(
        "languages: python\n"
        "output: out.txt\n"
        "remove-empty-lines: true\n"
        "sort: type\n"
        "author: 1984\n",
        encoding="utf-8",
    )
    d = load_bundle_defaults(cfg)
    assert d.language == ["python"]
    assert d.output == "out.txt"
    assert d.remove_empty_lines is True
    assert d.note is None
    assert d.sort == "type"
    assert d.author == "1984"


def test_json_defaults(tmp_path: Path):
    cfg = tmp_path / "bundle.json"
    cfg.write_text(json.dumps({"language": ["css", "html"], "note": False}), encoding="utf-8")
    d = load_bundle_defaults(cfg)
    assert d.language == ["css", "html"]
    assert d.note is False


def test_empty_file_gives_plain_defaults(tmp_path: Path):
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("", encoding="utf-8")
    assert load_bundle_defaults(cfg) == BundleDefaults()


def test_mapping_input():
    assert load_bundle_defaults({"language": "all"}).language == ["all"]


@pytest.mark.parametrize(
    "body, match",
    [
        ("- python\n", "mapping"),
        ("colour: red\n", "Unknown key"),
        ("language: {a: 1}\n", "string or a list"),
        ("note: maybe\n", "true or false"),
        ("author: [a, b]\n", "scalar"),
        ("language: [python\n", "Malformed"),
    ],
)
def test_invalid_configs(tmp_path: Path, body: str, match: str):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text(body, encoding="utf-8")
    with pytest.raises(BundleConfigError, match=match):
        load_bundle_defaults(cfg)


def test_missing_file(tmp_path: Path):
    with pytest.raises(BundleConfigError, match="Cannot read"):
        load_bundle_defaults(tmp_path / "nope.yaml")
