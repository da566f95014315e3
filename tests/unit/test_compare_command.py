"""Tests for the CLI compare command."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner
from PIL import Image

from shotdiff.cli import main


def _solid(
    tmp_path: Path,
    name: str,
    color: tuple[int, ...],
    size: tuple[int, int] = (4, 4),
) -> Path:
    """Create a solid-color image and return its path."""
    p = tmp_path / name
    Image.new("RGBA", size, color).save(p)
    return p


def _one_pixel_pair(tmp_path: Path) -> tuple[Path, Path]:
    img = Image.new("RGBA", (4, 4), (0, 0, 0, 255))
    a = tmp_path / "a.png"
    img.save(a)
    img.putpixel((0, 0), (255, 0, 0, 255))
    b = tmp_path / "b.png"
    img.save(b)
    return a, b


class TestCompareExitCodes:
    def test_identical_exit_0(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255))
        b = _solid(tmp_path, "b.png", (0, 0, 0, 255))
        result = CliRunner().invoke(main, ["compare", str(a), str(b)])
        assert result.exit_code == 0
        assert "Image Comparison Results" in result.output
        assert "yes" in result.output

    def test_differs_exit_1(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255))
        b = _solid(tmp_path, "b.png", (255, 255, 255, 255))
        result = CliRunner().invoke(main, ["compare", str(a), str(b)])
        assert result.exit_code == 1
        assert "16/16 (100.00%)" in result.output

    def test_size_mismatch_exit_2(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255), size=(4, 4))
        b = _solid(tmp_path, "b.png", (0, 0, 0, 255), size=(8, 8))
        result = CliRunner().invoke(main, ["compare", str(a), str(b)])
        assert result.exit_code == 2
        assert "size mismatch" in result.output

    def test_missing_file_exit_2(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255))
        result = CliRunner().invoke(main, ["compare", str(a), str(tmp_path / "nope.png")])
        assert result.exit_code == 2
        assert "IoFailure" in result.output

    def test_diff_alias(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255))
        result = CliRunner().invoke(main, ["diff", str(a), str(a)])
        assert result.exit_code == 0


class TestCompareThreshold:
    def test_threshold_allows_diff(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        result = CliRunner().invoke(main, ["compare", "--threshold", "0.1", str(a), str(b)])
        assert result.exit_code == 0

    def test_threshold_rejects_diff(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        result = CliRunner().invoke(main, ["compare", "--threshold", "0.05", str(a), str(b)])
        assert result.exit_code == 1

    def test_psnr_threshold_in_db(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        args = ["compare", "-a", "psnr", "-t", "10", str(a), str(b)]
        assert CliRunner().invoke(main, args).exit_code == 0

    def test_out_of_range_threshold_exit_2(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        result = CliRunner().invoke(main, ["compare", "-t", "5", str(a), str(b)])
        assert result.exit_code == 2
        assert "error:" in result.output

    def test_nan_threshold_exit_2(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        result = CliRunner().invoke(main, ["compare", "-t", "nan", str(a), str(b)])
        assert result.exit_code == 2

    def test_unknown_algorithm_exit_2(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        result = CliRunner().invoke(main, ["compare", "-a", "fuzzy", str(a), str(b)])
        assert result.exit_code == 2
        assert "unknown algorithm" in result.output


class TestCompareDiffOutput:
    def test_diff_file_written(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255))
        b = _solid(tmp_path, "b.png", (255, 255, 255, 255))
        diff = tmp_path / "diff.png"
        result = CliRunner().invoke(main, ["compare", "--diff-output", str(diff), str(a), str(b)])
        assert result.exit_code == 1
        assert diff.exists()
        assert str(diff) in result.output

    def test_diff_color(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        diff = tmp_path / "diff.png"
        args = ["compare", "--diff-output", str(diff), "--diff-color", "0,255,0", str(a), str(b)]
        CliRunner().invoke(main, args)
        with Image.open(diff) as img:
            assert img.convert("RGB").getpixel((0, 0)) == (0, 255, 0)

    def test_diff_image_needs_path(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        result = CliRunner().invoke(main, ["compare", "--diff-image", str(a), str(b)])
        assert result.exit_code == 2
        assert "--diff-output" in result.output


class TestCompareJson:
    def test_json_identical(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255))
        b = _solid(tmp_path, "b.png", (0, 0, 0, 255))
        result = CliRunner().invoke(main, ["compare", "--json", str(a), str(b)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["passed"] is True
        assert data["differing_pixels"] == 0
        assert data["total_pixels"] == 16

    def test_json_psnr_identical(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (9, 9, 9, 255))
        result = CliRunner().invoke(main, ["compare", "--format", "json", "-a", "psnr", str(a), str(a)])
        data = json.loads(result.output)
        assert data["algorithm"] == "psnr"
        assert data["score"] == "Infinity"

    def test_json_error_exit_2(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255), size=(4, 4))
        b = _solid(tmp_path, "b.png", (0, 0, 0, 255), size=(8, 8))
        result = CliRunner().invoke(main, ["compare", "--json", str(a), str(b)])
        assert result.exit_code == 2
        data = json.loads(result.output)
        assert data["error"]["type"] == "DimensionMismatch"

    def test_report_to_file(self, tmp_path: Path) -> None:
        a, b = _one_pixel_pair(tmp_path)
        out = tmp_path / "report.json"
        result = CliRunner().invoke(main, ["compare", "--json", "-o", str(out), str(a), str(b)])
        assert result.exit_code == 1
        assert result.output == ""
        assert json.loads(out.read_text())["differing_pixels"] == 1


class TestAntialiasFlag:
    def test_ignore_antialiasing(self, tmp_path: Path) -> None:
        base = Image.new("RGB", (8, 8), (0, 0, 0))
        for y in range(8):
            for x in range(4, 8):
                base.putpixel((x, y), (255, 255, 255))
        a = tmp_path / "a.png"
        base.save(a)
        for y in range(8):
            base.putpixel((3, y), (2, 2, 2))
        b = tmp_path / "b.png"
        base.save(b)
        plain = CliRunner().invoke(main, ["compare", "--json", str(a), str(b)])
        filtered = CliRunner().invoke(
            main, ["compare", "--json", "--ignore-antialiasing", str(a), str(b)]
        )
        assert json.loads(plain.output)["differing_pixels"] == 8
        assert json.loads(filtered.output)["differing_pixels"] == 0
        assert filtered.exit_code == 0


class TestCompareHelp:
    def test_help_exits_0(self) -> None:
        result = CliRunner().invoke(main, ["compare", "--help"])
        assert result.exit_code == 0
        assert "IMAGE_A" in result.output

    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "shotdiff" in result.output


class TestCorruptInput:
    def test_truncated_png_exit_2(self, tmp_path: Path) -> None:
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255))
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\x04IHDR" + b"\x00" * 8)
        result = CliRunner().invoke(main, ["compare", str(a), str(bad)])
        assert result.exit_code == 2
        assert "DecodeFailure" in result.output


class TestVerbosity:
    @pytest.mark.parametrize(
        ("flags", "level"),
        [([], logging.WARNING), (["-v"], logging.INFO), (["-vv"], logging.DEBUG)],
    )
    def test_levels(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, flags: list[str], level: int
    ) -> None:
        logger = logging.getLogger("shotdiff")
        monkeypatch.setattr(logger, "handlers", [])
        saved = logger.level
        a = _solid(tmp_path, "a.png", (0, 0, 0, 255))
        try:
            result = CliRunner().invoke(main, [*flags, "compare", str(a), str(a)])
            assert result.exit_code == 0
            assert logger.level == level
        finally:
            logger.setLevel(saved)
