from __future__ import annotations

import json
import logging
from pathlib import Path

from codebundle.utils.logging import JsonlLogger, resolve_log_dir


def _events(path: Path) -> list:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_jsonl_logger_writes_structured_events(tmp_path: Path):
    with JsonlLogger(tmp_path / "logs") as lg:
        lg.info("Hello.", files=[Path("a.py")], exts={".py", ".cs"}, ratio=float("nan"))
        lg.phase_start("bundle", output=Path("out.txt"))
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            lg.error("Failed.", error=str(exc), exc_info=True)

    events = _events(tmp_path / "logs" / "events.jsonl")
    assert [e["level"] for e in events] == ["INFO", "INFO", "ERROR"]
    assert events[0]["files"] == ["a.py"]
    assert events[0]["exts"] == [".cs", ".py"]
    assert events[0]["ratio"] == "NaN"
    assert events[1]["phase"] == "bundle"
    assert "RuntimeError: boom" in events[2]["trace"]
    assert "exc_info" not in events[2]


def test_logger_without_dir_only_mirrors_to_stdlib(caplog):
    lg = JsonlLogger()
    with caplog.at_level(logging.INFO, logger="codebundle"):
        lg.warning("Ignoring unknown languages.", languages=["cobol"])
    lg.close()
    assert lg.path is None
    assert "Ignoring unknown languages." in caplog.text


def test_resolve_log_dir_prefers_flag(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("CODEBUNDLE_LOG_DIR", str(tmp_path / "env"))
    assert resolve_log_dir(str(tmp_path / "flag")) == tmp_path / "flag"
    assert resolve_log_dir(None) == tmp_path / "env"
    monkeypatch.delenv("CODEBUNDLE_LOG_DIR")
    assert resolve_log_dir(None) is None


def test_surrogate_fields_are_escaped_not_raised(tmp_path: Path):
    with JsonlLogger(tmp_path) as lg:
        lg.debug("Bundling file.", path="caf\udce9.py")
        lg.info("After.")

    events = _events(tmp_path / "events.jsonl")
    assert [e["msg"] for e in events] == ["Bundling file.", "After."]
    assert events[0]["path"] == "caf\udce9.py"
