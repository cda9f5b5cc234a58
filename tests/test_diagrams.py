from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from md2overleaf.core import diagrams as diagrams_mod
from md2overleaf.core.exceptions import ProcessExecutionError


DRAWING_NOTE = "Intro\n\n```tldraw\n{\"shapes\": []}\n```\n"


class RecordingEmitter:
    debug_enabled = False

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: dict[str, Any]) -> None:
        self.events.append((name, dict(payload)))


def _exporter(tmp_path: Path, **kwargs: Any) -> diagrams_mod.DiagramExporter:
    stage = tmp_path / "stage"
    stage.mkdir()
    return diagrams_mod.DiagramExporter(
        source_root=tmp_path / "vault",
        stage_dir=stage,
        work_dir=tmp_path / "work",
        **kwargs,
    )


def _drawing(tmp_path: Path, text: str = DRAWING_NOTE) -> Path:
    note = tmp_path / "vault" / "pictures" / "plan.md"
    note.parent.mkdir(parents=True)
    note.write_text(text, encoding="utf-8")
    return note


def test_extract_tldraw_document() -> None:
    assert diagrams_mod.extract_tldraw_document(DRAWING_NOTE) == '{"shapes": []}\n'
    assert diagrams_mod.extract_tldraw_document("```python\nprint()\n```") is None


def test_export_writes_png_into_stage(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    note = _drawing(tmp_path)
    emitter = RecordingEmitter()
    exporter = _exporter(tmp_path, env={"PATH": "/bin"}, emitter=emitter)
    recorded: dict[str, Any] = {}

    def fake_run(command: list[str], **kwargs: Any) -> None:
        recorded["command"] = command
        recorded.update(kwargs)
        recorded["drawing"] = Path(command[4]).read_text(encoding="utf-8")
        Path(command[command.index("--output") + 1]).write_bytes(b"\x89PNG")

    monkeypatch.setattr(diagrams_mod, "run_command", fake_run)

    assert exporter(note) == "pictures/plan.png"

    target = tmp_path / "stage" / "pictures" / "plan.png"
    assert target.read_bytes() == b"\x89PNG"
    assert recorded["command"][:4] == ["npx", "-y", "@tldraw/cli", "export"]
    assert recorded["command"][5:] == [
        "--format",
        "png",
        "--output",
        str(target),
        "--overwrite",
    ]
    assert recorded["drawing"] == '{"shapes": []}\n'
    assert recorded["cwd"] == tmp_path / "vault"
    assert recorded["env"] == {"PATH": "/bin"}
    assert not (tmp_path / "work" / "plan.tldr").exists()
    assert emitter.events == [
        ("diagram_exported", {"source": str(note), "target": "pictures/plan.png"})
    ]


def test_note_without_fence_is_not_exported(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    note = _drawing(tmp_path, "just text")

    def fail_run(*_: Any, **__: Any) -> None:
        raise AssertionError("tldraw CLI should not run")

    monkeypatch.setattr(diagrams_mod, "run_command", fail_run)

    assert _exporter(tmp_path).export(note) is None


def test_cli_failure_returns_none(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    note = _drawing(tmp_path)

    def failing_run(*_: Any, **__: Any) -> None:
        raise ProcessExecutionError("tldraw CLI exited with status 1")

    monkeypatch.setattr(diagrams_mod, "run_command", failing_run)

    with caplog.at_level("WARNING", logger="md2overleaf"):
        assert _exporter(tmp_path).export(note) is None

    assert "tldraw export failed" in caplog.text
    assert not (tmp_path / "work" / "plan.tldr").exists()


def test_missing_png_returns_none(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    note = _drawing(tmp_path)
    monkeypatch.setattr(diagrams_mod, "run_command", lambda *_, **__: None)

    assert _exporter(tmp_path).export(note) is None


def test_unreadable_note_returns_none(tmp_path: Path) -> None:
    assert _exporter(tmp_path).export(tmp_path / "vault" / "pictures" / "gone.md") is None


def test_undecodable_note_returns_none(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    note = tmp_path / "vault" / "pictures" / "plan.md"
    note.parent.mkdir(parents=True)
    note.write_bytes(b"\xff\xfe not utf8")

    def fail_run(*_: Any, **__: Any) -> None:
        raise AssertionError("tldraw CLI should not run")

    monkeypatch.setattr(diagrams_mod, "run_command", fail_run)

    assert _exporter(tmp_path).export(note) is None
