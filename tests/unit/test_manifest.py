"""Tests for batch manifest loading and option parsing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from shotdiff.algorithms import Algorithm
from shotdiff.errors import ConfigError, InvalidThreshold, IoFailure
from shotdiff.manifest import job_from_mapping, load_manifest, options_from_mapping
from shotdiff.options import OutputFormat, parse_rgb_color


class TestParseColor:
    def test_valid(self) -> None:
        assert parse_rgb_color("255, 0,128") == (255, 0, 128)

    @pytest.mark.parametrize("value", ["255,0", "a,b,c", "0,0,256", ""])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ConfigError):
            parse_rgb_color(value)


class TestOptions:
    def test_defaults(self) -> None:
        opts = options_from_mapping({})
        assert opts.algorithm == Algorithm.PIXEL_DIFF
        assert opts.threshold is None
        assert opts.style.highlight == (255, 0, 0)

    def test_all_settings(self) -> None:
        opts = options_from_mapping(
            {
                "algorithm": "ssim",
                "threshold": 0.9,
                "ignore_antialiasing": True,
                "aa_pixel_delta": 4,
                "aa_blend_tolerance": 20,
                "aa_min_contrast": 40,
                "ssim_window": 11,
                "ssim_stride": 2,
                "diff_color": [255, 0, 255],
                "fade": 0.25,
            }
        )
        assert opts.algorithm == Algorithm.SSIM
        assert opts.ignore_antialiasing is True
        assert opts.antialias.pixel_delta == 4
        assert opts.antialias.blend_tolerance == 20
        assert opts.antialias.min_contrast == 40
        assert opts.ssim.window == 11
        assert opts.ssim.stride == 2
        assert opts.style.highlight == (255, 0, 255)
        assert opts.style.fade == 0.25

    def test_bool_type_checked(self) -> None:
        with pytest.raises(ConfigError, match="ignore_antialiasing"):
            options_from_mapping({"ignore_antialiasing": "yes"})

    @pytest.mark.parametrize("value", ["abc", True, [0.1]])
    def test_threshold_must_be_number(self, value: object) -> None:
        with pytest.raises(InvalidThreshold, match="threshold must be a number"):
            options_from_mapping({"threshold": value})

    def test_integer_threshold_accepted(self) -> None:
        assert options_from_mapping({"threshold": 0}).threshold == 0.0

    def test_unknown_algorithm(self) -> None:
        with pytest.raises(ConfigError, match="unknown algorithm"):
            options_from_mapping({"algorithm": "histogram"})


class TestJobFromMapping:
    def test_defaults_merge_and_paths(self, tmp_path: Path) -> None:
        job = job_from_mapping(
            {"source_a": "a.png", "source_b": "/abs/b.png", "threshold": 0.2},
            {"algorithm": "mse", "threshold": 0.1, "output_format": "json"},
            base_dir=tmp_path,
        )
        assert job.source_a == tmp_path / "a.png"
        assert job.source_b == Path("/abs/b.png")
        assert job.options.algorithm == Algorithm.MSE
        assert job.options.threshold == 0.2
        assert job.output_format == OutputFormat.JSON

    def test_missing_source(self) -> None:
        with pytest.raises(ConfigError, match="source_b"):
            job_from_mapping({"source_a": "a.png"})

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="unknown keys: colour"):
            job_from_mapping({"source_a": "a", "source_b": "b", "colour": "red"})


class TestLoadManifest:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "jobs.json"
        path.write_text(
            json.dumps(
                {
                    "defaults": {"algorithm": "psnr"},
                    "jobs": [
                        {"name": "one", "source_a": "a.png", "source_b": "b.png"},
                        {
                            "source_a": "c.png",
                            "source_b": "d.png",
                            "diff_output_path": "diffs/cd.png",
                        },
                    ],
                }
            )
        )
        jobs = load_manifest(path)
        assert len(jobs) == 2
        assert jobs[0].name == "one"
        assert jobs[0].options.algorithm == Algorithm.PSNR
        assert jobs[1].diff_output_path == tmp_path / "diffs" / "cd.png"
        assert jobs[1].wants_diff

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "jobs.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="invalid JSON"):
            load_manifest(path)

    def test_missing_jobs_list(self, tmp_path: Path) -> None:
        path = tmp_path / "jobs.json"
        path.write_text("{}")
        with pytest.raises(ConfigError, match="'jobs' list"):
            load_manifest(path)

    def test_bad_entry_names_index(self, tmp_path: Path) -> None:
        path = tmp_path / "jobs.json"
        path.write_text(json.dumps({"jobs": [{"source_a": "a", "source_b": "b"}, 3]}))
        with pytest.raises(ConfigError, match="job 2"):
            load_manifest(path)

    def test_bad_threshold_names_job(self, tmp_path: Path) -> None:
        path = tmp_path / "jobs.json"
        entry = {"source_a": "a", "source_b": "b", "threshold": "0.1"}
        path.write_text(json.dumps({"jobs": [entry]}))
        with pytest.raises(InvalidThreshold, match="job 1"):
            load_manifest(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(IoFailure):
            load_manifest(tmp_path / "none.json")
