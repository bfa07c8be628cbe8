from __future__ import annotations

from pathlib import Path

from docs2bbcode import cli

_DOCUMENT = """
<html><head><style>.c1{font-weight:700}</style></head><body>
<p>Prologue.</p>
<h1>Chapter 1</h1>
<p><span class="c1">Bold</span> start.</p>
<p></p>
<p>Second.</p>
<h2>Scene</h2>
<p>Inside.</p>
<h1>Chapter 2</h1>
<p>Later.</p>
</body></html>
"""


def _write_document(tmp_path: Path) -> Path:
    source = tmp_path / "story.html"
    source.write_text(_DOCUMENT, encoding="utf-8")
    return source


def test_main_prints_bbcode(tmp_path: Path, capsys) -> None:
    source = _write_document(tmp_path)

    exit_code = cli.main(["--quiet", str(source)])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.out.startswith("Prologue.\n\nChapter 1\n\n[b]Bold[/b] start.")
    assert captured.err == ""


def test_main_converts_selected_heading(tmp_path: Path, capsys) -> None:
    source = _write_document(tmp_path)
    destination = tmp_path / "chapter.txt"

    exit_code = cli.main(["--heading", "Chapter 1", "--output", str(destination), str(source)])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert destination.read_text(encoding="utf-8") == (
        "[b]Bold[/b] start.\n\nSecond.\n\nScene\n\nInside."
    )
    assert "for 'Chapter 1'" in captured.err


def test_main_warns_about_unknown_heading(tmp_path: Path, capsys) -> None:
    source = _write_document(tmp_path)

    exit_code = cli.main(["--heading", "Chapter 9", str(source)])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "Prologue." in captured.out
    assert "Later." in captured.out
    assert (
        "Warning: Heading 'Chapter 9' not found; converting the whole document." in captured.err
    )


def test_main_lists_headings(tmp_path: Path, capsys) -> None:
    source = _write_document(tmp_path)

    exit_code = cli.main(["--list-headings", "--quiet", str(source)])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.out.splitlines() == ["Chapter 1", "  Scene", "Chapter 2"]


def test_main_logs_details_when_verbose(tmp_path: Path, capsys) -> None:
    source = _write_document(tmp_path)

    cli.main(["--verbose", "--size-auto-scale", str(source)])

    err_lines = capsys.readouterr().err.splitlines()
    assert err_lines[0] == f"Load: reading {source}"
    assert "Load: found 3 heading(s)" in err_lines
    assert "Format: base font size 12pt" in err_lines


def test_log_warning_records_emits_messages() -> None:
    messages: list[str] = []

    class DummyWarning:
        def __init__(self, message: str) -> None:
            self.message = message

    cli._log_warning_records([DummyWarning("Skipped 1 image(s)")], messages.append)

    assert messages == ["Warning: Skipped 1 image(s)"]


def test_build_logger_respects_quiet(capsys) -> None:
    cli._build_logger(True)("hidden")
    cli._build_logger(False)("shown")

    assert capsys.readouterr().err == "shown\n"
