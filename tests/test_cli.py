from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from cardstudio.main import app

FIXTURE = str(Path(__file__).parent / "fixtures" / "birthday_card.json")

runner = CliRunner()


def _invoke(out_dir: Path, *args: str):
    return runner.invoke(app, [*args, "--template", FIXTURE, "--out", str(out_dir)])


def test_edit_then_show(out_dir: Path) -> None:
    result = _invoke(out_dir, "edit", "PC-001", "1", "Grandma")
    assert result.exit_code == 0, result.output
    assert "Saved 1 for PC-001" in result.output

    result = _invoke(out_dir, "show", "PC-001")
    assert result.exit_code == 0, result.output
    assert "Birthday Balloons [front]" in result.output
    assert "'Grandma'" in result.output


def test_show_inner_spread(out_dir: Path) -> None:
    result = _invoke(out_dir, "show", "PC-001", "--view", "inner", "--width", "630")
    assert result.exit_code == 0, result.output
    assert "[inner] k=0.500" in result.output
    assert "left_inner" in result.output and "right_inner" in result.output


def test_edit_warns_when_text_will_be_clipped(out_dir: Path) -> None:
    result = _invoke(out_dir, "edit", "PC-001", "1", "W" * 40)
    assert result.exit_code == 0, result.output
    assert "overflows at 10px" in result.output


def test_edit_refuses_long_text(out_dir: Path) -> None:
    result = _invoke(out_dir, "edit", "PC-001", "1", "x" * 41)
    assert result.exit_code == 2


def test_edit_unknown_zone(out_dir: Path) -> None:
    result = _invoke(out_dir, "edit", "PC-001", "s1", "Hi")
    assert result.exit_code == 1


def test_missing_template(out_dir: Path) -> None:
    result = runner.invoke(app, ["show", "PC-001", "--template", str(out_dir / "missing.json"), "--out", str(out_dir)])
    assert result.exit_code == 1


def test_style_then_reset(out_dir: Path) -> None:
    result = _invoke(out_dir, "style", "PC-001", "msg", "--color", "#1E88E5")
    assert result.exit_code == 0, result.output
    assert "#1E88E5" in result.output

    result = runner.invoke(app, ["reset", "PC-001", "--out", str(out_dir)])
    assert result.exit_code == 0
    assert "Draft for PC-001 cleared" in result.output


def test_render_writes_proof_and_previews(out_dir: Path) -> None:
    result = _invoke(out_dir, "render", "PC-001")
    assert result.exit_code == 0, result.output
    product = out_dir / "pc-001"
    assert (product / "proof.pdf").exists()
    for name in ("preview_front.png", "preview_inner.png", "preview_back.png"):
        assert (product / name).exists()
