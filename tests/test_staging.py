from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from md2overleaf.assets import ASSETS_DIR
from md2overleaf.core import staging as staging_mod
from md2overleaf.core.exceptions import StageBuildError
from md2overleaf.core.rewriter import AssetCopy


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    (root / "pictures").mkdir(parents=True)
    (root / "pictures" / "foo.png").write_bytes(b"\x89PNG foo")
    return root


@pytest.fixture
def stage_tmp(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    base = tmp_path / "tmp"
    base.mkdir()
    monkeypatch.setattr(staging_mod.tempfile, "tempdir", str(base))
    return base


def _tex(tmp_path: Path, body: str) -> Path:
    tex = tmp_path / "my_note.tex"
    tex.write_text(body, encoding="utf-8")
    return tex


def test_document_title() -> None:
    assert staging_mod.document_title("my_note") == "my note"
    assert staging_mod.document_title("draft--v2__final.tex") == "draft v2 final"
    assert staging_mod.document_title("R&D 100%") == "R\\&D 100\\%"


def test_render_main_template_replaces_first_directives() -> None:
    template = "\\title{Untitled}\n\\begin{document}\n\\include{content}\n\\include{extra}\n"

    rendered = staging_mod.render_main_template(template, "my_note")

    assert rendered == "\\title{my note}\n\\begin{document}\n\\include{my_note}\n\\include{extra}\n"


def test_build_stage_assembles_project(tmp_path: Path, vault: Path, stage_tmp: Path) -> None:
    tex = _tex(
        tmp_path,
        "\\pandocbounded{\\includegraphics[keepaspectratio]{pictures/foo.png}}\n",
    )

    result = staging_mod.build_stage(
        tex,
        "my_note",
        source_root=vault,
        assets_dir=ASSETS_DIR,
        work_dir=tmp_path / "work",
    )

    try:
        stage = result.stage_dir
        assert stage.parent == stage_tmp
        assert stage.name.startswith(staging_mod.STAGE_PREFIX)
        assert (stage / "pictures" / "foo.png").read_bytes() == b"\x89PNG foo"
        assert (stage / "my_note.tex").read_text(encoding="utf-8") == result.tex
        assert "\\label{fig:foo}" in result.tex
        main = (stage / "main.tex").read_text(encoding="utf-8")
        assert "\\title{my note}" in main
        assert "\\include{my_note}" in main
        assert (stage / "config.tex").read_text(encoding="utf-8") == (
            ASSETS_DIR / "config.tex"
        ).read_text(encoding="utf-8")
    finally:
        staging_mod.discard_stage(result.stage_dir)


def test_build_stage_skips_missing_images(
    tmp_path: Path, vault: Path, stage_tmp: Path, caplog: pytest.LogCaptureFixture
) -> None:
    tex = _tex(tmp_path, "!{[}{[}pictures/gone.png{]}{]}\n")

    events: list[tuple[str, dict[str, Any]]] = []
    emitter = SimpleNamespace(
        debug_enabled=False,
        warning=lambda *_: None,
        error=lambda *_: None,
        event=lambda name, payload: events.append((name, dict(payload))),
    )

    with caplog.at_level("INFO", logger="md2overleaf"):
        result = staging_mod.build_stage(
            tex,
            "my_note",
            source_root=vault,
            assets_dir=ASSETS_DIR,
            work_dir=tmp_path / "work",
            emitter=emitter,
        )

    try:
        assert "\\includegraphics[width=\\linewidth]{pictures/gone.png}" in result.tex
        assert not (result.stage_dir / "pictures").exists()
        assert "Missing referenced image" in caplog.text
        assert events == [("asset_missing", {"path": "pictures/gone.png"})]
    finally:
        staging_mod.discard_stage(result.stage_dir)


def test_build_stage_without_templates_still_succeeds(
    tmp_path: Path, vault: Path, stage_tmp: Path
) -> None:
    empty_assets = tmp_path / "assets"
    empty_assets.mkdir()
    tex = _tex(tmp_path, "Hello\n")

    result = staging_mod.build_stage(
        tex,
        "my_note",
        source_root=vault,
        assets_dir=empty_assets,
        work_dir=tmp_path / "work",
    )

    try:
        assert sorted(path.name for path in result.stage_dir.iterdir()) == ["my_note.tex"]
    finally:
        staging_mod.discard_stage(result.stage_dir)


def test_build_stage_is_repeatable(tmp_path: Path, vault: Path, stage_tmp: Path) -> None:
    tex = _tex(tmp_path, "!{[}{[}pictures/foo.png{]}{]}\n")
    options: dict[str, Any] = {
        "source_root": vault,
        "assets_dir": ASSETS_DIR,
        "work_dir": tmp_path / "work",
    }

    first = staging_mod.build_stage(tex, "my_note", **options)
    second = staging_mod.build_stage(tex, "my_note", **options)

    try:
        assert first.stage_dir != second.stage_dir
        assert first.tex == second.tex
        for name in ("my_note.tex", "main.tex", "config.tex", "pictures/foo.png"):
            assert (first.stage_dir / name).read_bytes() == (second.stage_dir / name).read_bytes()
    finally:
        staging_mod.discard_stage(first.stage_dir)
        staging_mod.discard_stage(second.stage_dir)


def test_build_stage_failure_removes_directory(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, vault: Path, stage_tmp: Path
) -> None:
    tex = _tex(tmp_path, "Hello\n")

    def broken_install(*_: Any, **__: Any) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(staging_mod, "install_templates", broken_install)

    with pytest.raises(StageBuildError, match="disk full"):
        staging_mod.build_stage(
            tex,
            "my_note",
            source_root=vault,
            assets_dir=ASSETS_DIR,
            work_dir=tmp_path / "work",
        )

    assert list(stage_tmp.iterdir()) == []


def test_copy_assets_refuses_paths_outside_stage(tmp_path: Path, vault: Path) -> None:
    stage = tmp_path / "stage"
    stage.mkdir()
    outside = AssetCopy(source=vault / "pictures" / "foo.png", relative="../escape.png")

    assert staging_mod.copy_assets([outside], stage) == []
    assert not (tmp_path / "escape.png").exists()


def test_build_stage_survives_undecodable_drawing(
    tmp_path: Path, vault: Path, stage_tmp: Path
) -> None:
    (vault / "pictures" / "plan.md").write_bytes(b"\xff\xfe not utf8")
    tex = _tex(tmp_path, "Before\n!{[}{[}pictures/plan.md{]}{]}\nAfter\n")

    result = staging_mod.build_stage(
        tex,
        "my_note",
        source_root=vault,
        assets_dir=ASSETS_DIR,
        work_dir=tmp_path / "work",
    )

    try:
        assert "% [md2overleaf] missing tldraw export for pictures/plan.md\n" in result.tex
        assert result.tex.endswith("After\n")
        assert not (result.stage_dir / "pictures").exists()
    finally:
        staging_mod.discard_stage(result.stage_dir)
