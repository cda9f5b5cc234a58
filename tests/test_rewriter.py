from __future__ import annotations

from pathlib import Path

import pytest

from md2overleaf.core.rewriter import (
    AssetCopy,
    figure_label,
    normalise_reference,
    rewrite_references,
)


def test_bounded_image_becomes_figure(tmp_path: Path) -> None:
    tex = "Before\n\\pandocbounded{\\includegraphics[keepaspectratio]{pictures/foo.png}}\nAfter"

    result = rewrite_references(tex, tmp_path)

    assert "\\pandocbounded" not in result.text
    assert "\\includegraphics[width=\\linewidth]{pictures/foo.png}" in result.text
    assert "\\label{fig:foo}" in result.text
    assert "\\caption{}" in result.text
    assert result.text.startswith("Before\n\\begin{figure}[H]")
    assert result.text.endswith("\\end{figure}\nAfter")
    assert result.assets == [
        AssetCopy(source=tmp_path / "pictures/foo.png", relative="pictures/foo.png")
    ]


def test_wiki_embed_is_unescaped(tmp_path: Path) -> None:
    tex = "!{[}{[}pictures/my\\_plot\\%20v2.png{]}{]}"

    result = rewrite_references(tex, tmp_path)

    assert "{pictures/my_plot v2.png}" in result.text
    assert "\\label{fig:my-plot-v2}" in result.text
    assert [asset.relative for asset in result.assets] == ["pictures/my_plot v2.png"]


def test_wiki_embed_outside_pictures_is_supported(tmp_path: Path) -> None:
    result = rewrite_references("!{[}{[}scan.png{]}{]}", tmp_path)

    assert "\\label{fig:scan}" in result.text
    assert result.assets[0].source == tmp_path / "scan.png"


def test_non_png_embeds_are_untouched(tmp_path: Path) -> None:
    tex = "!{[}{[}notes/other.md{]}{]} and \\includegraphics{elsewhere/x.png}"

    result = rewrite_references(tex, tmp_path)

    assert result.text == tex
    assert result.assets == []


def test_diagram_without_drawing_leaves_comment(tmp_path: Path) -> None:
    calls: list[Path] = []

    def exporter(path: Path) -> str | None:
        calls.append(path)
        return None

    tex = "A\n!{[}{[}pictures/plan.md{]}{]}\nB"
    result = rewrite_references(tex, tmp_path, export_diagram=exporter)

    assert "% [md2overleaf] missing tldraw export for pictures/plan.md" in result.text
    assert "\\begin{figure}" not in result.text
    assert result.assets == []
    assert calls == [tmp_path / "pictures/plan.md"]


def test_diagram_export_is_embedded_once(tmp_path: Path) -> None:
    calls: list[Path] = []

    def exporter(path: Path) -> str | None:
        calls.append(path)
        return "pictures/plan.png"

    tex = "!{[}{[}pictures/plan.md{]}{]}\n\n!{[}{[}pictures/plan.md{]}{]}"
    result = rewrite_references(tex, tmp_path, export_diagram=exporter)

    expected = (
        "\\begin{figure}[H] \\centering "
        "\\includegraphics[width=\\linewidth]{pictures/plan.png} \\end{figure}"
    )
    assert result.text == f"{expected}\n\n{expected}"
    assert len(calls) == 1


def test_diagram_without_exporter_is_skipped(tmp_path: Path) -> None:
    result = rewrite_references("!{[}{[}pictures/plan.md{]}{]}", tmp_path)

    assert result.text.startswith("% [md2overleaf] missing tldraw export")


@pytest.mark.parametrize(
    ("relative", "label"),
    [
        ("pictures/foo.png", "fig:foo"),
        ("pictures/Screen Shot 2024.png", "fig:Screen-Shot-2024"),
        ("pictures/nested/a--b.png", "fig:nested-a-b"),
        ("pictures/_a.png", "fig:-a"),
        ("pictures/\u05ea\u05de\u05d5\u05e0\u05d4.png", "fig:-"),
        ("pictures/\U0001f600.png", "fig:-"),
        ("pictures/.png", "fig:figure"),
    ],
)
def test_figure_label(relative: str, label: str) -> None:
    assert figure_label(relative) == label


def test_normalise_reference_handles_windows_separators() -> None:
    assert normalise_reference(" pictures\\img\\_1.png ") == "pictures/img_1.png"
