"""Tests for writing edits back to files on disk."""

from __future__ import annotations

import gc
import json
import os
import stat
import threading
from pathlib import Path

import pytest

from uiforge import write_css_change, write_prop_default, write_token_value
from uiforge.patcher import PatchOutcome, PatchStatus
from uiforge.writeback import SourceWriter


def _write(path: Path, text: str) -> Path:
    path.write_bytes(text.encode("utf-8"))
    return path


def test_write_css_change_updates_file(tmp_path: Path) -> None:
    target = _write(tmp_path / "Button.module.css", ".button {\r\n  color: red;\r\n}\r\n")

    result = write_css_change(target, ".button", "color", "blue")

    assert result.success
    assert result.previous_value == "red"
    assert result.strategy == "patched"
    assert target.read_bytes() == b".button {\r\n  color: blue;\r\n}\r\n"
    assert result.new_content == ".button {\r\n  color: blue;\r\n}\r\n"


def test_write_css_change_reports_fallback_strategy(tmp_path: Path) -> None:
    target = _write(tmp_path / "broken.css", ".a { color: red; }\n.b { color: blue;\n")

    result = write_css_change(str(target), ".a", "color", "green")

    assert result.success
    assert result.strategy == "fallback_patched"
    assert target.read_text(encoding="utf-8").startswith(".a { color: green; }")


def test_failed_edit_leaves_file_untouched(tmp_path: Path) -> None:
    original = ".a { color: red; }\n"
    target = _write(tmp_path / "a.css", original)
    before = target.stat().st_mtime_ns

    result = write_css_change(target, ".a", "color", "red; }")

    assert not result.success
    assert result.strategy == "failed"
    assert result.error
    assert target.read_text(encoding="utf-8") == original
    assert target.stat().st_mtime_ns == before


def test_write_to_missing_file_fails(tmp_path: Path) -> None:
    result = write_css_change(tmp_path / "missing.css", ".a", "color", "red")

    assert not result.success
    assert result.new_content is None
    assert not (tmp_path / "missing.css").exists()


def test_write_token_value(tmp_path: Path) -> None:
    target = _write(tmp_path / "theme.css", ":root {\n  --color-primary: #0af;\n}\n")

    result = write_token_value(target, "color-primary", "#f00")

    assert result.previous_value == "#0af"
    assert "--color-primary: #f00;" in target.read_text(encoding="utf-8")

    missing = write_token_value(target, "nope", "1px")
    assert missing.not_found
    assert missing.error == "Token --nope not found"


def test_write_prop_default(tmp_path: Path) -> None:
    target = _write(
        tmp_path / "forgecore.json",
        json.dumps({"components": {"Button": {"entry": "Button.tsx"}}}),
    )

    result = write_prop_default(target, "Button", "size", "lg")

    assert result.success
    assert result.previous_value is None
    assert json.loads(target.read_text(encoding="utf-8"))["components"]["Button"]["defaultProps"] == {
        "size": "lg"
    }
    unknown = write_prop_default(target, "Card", "size", "lg")
    assert unknown.not_found


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_write_preserves_file_mode(tmp_path: Path) -> None:
    target = _write(tmp_path / "a.css", ".a { color: red; }\n")
    target.chmod(0o640)

    write_css_change(target, ".a", "color", "blue")

    assert stat.S_IMODE(target.stat().st_mode) == 0o640
    assert [path.name for path in tmp_path.iterdir()] == ["a.css"]


def test_unchanged_text_is_not_rewritten(tmp_path: Path) -> None:
    target = _write(tmp_path / "a.css", ".a { color: red; }\n")
    before = target.stat().st_mtime_ns

    result = SourceWriter().apply(target, lambda text: PatchOutcome(PatchStatus.PATCHED, text))

    assert result.success
    assert target.stat().st_mtime_ns == before


def test_concurrent_edits_to_one_file_are_serialized(tmp_path: Path) -> None:
    target = _write(tmp_path / "a.css", ".a {\n  color: red;\n}\n")
    writer = SourceWriter()
    properties = [f"--p{index}" for index in range(12)]

    threads = [
        threading.Thread(target=writer.write_css_change, args=(target, ".a", name, "1px"))
        for name in properties
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    text = target.read_text(encoding="utf-8")
    assert all(f"{name}: 1px;" in text for name in properties)


def test_writer_drops_path_locks_after_edits(tmp_path: Path) -> None:
    writer = SourceWriter()
    targets = [_write(tmp_path / f"c{index}.css", ".a { color: red; }\n") for index in range(5)]

    held = writer._lock_for(targets[0])
    assert writer._lock_for(targets[0]) is held
    for target in targets:
        assert writer.write_css_change(target, ".a", "color", "blue").success
    del held
    gc.collect()

    assert len(writer._locks) == 0
