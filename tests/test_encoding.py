"""Tests for encoding jobs and the encoder coordinator."""

import dataclasses

import pytest

from bg_remove.constants import QUALITY_PRESETS
from bg_remove.encoding.coordinator import EncoderCoordinator
from bg_remove.encoding.jobs import build_jobs, output_filename, variant_label

from conftest import FakeOptimizer, FakePaletteEncoder


BALANCED = QUALITY_PRESETS["balanced"]


class TestBuildJobs:
    def test_five_variants_in_order(self):
        jobs = build_jobs(BALANCED, source_fps=12, alpha_threshold=128)
        assert [j.variant for j in jobs] == [28, 56, 112, 512, "raw"]
        assert [j.tag for j in jobs] == ["28x28", "56x56", "112x112", "512x512", "raw"]

    def test_sized_jobs_use_preset(self):
        for job in build_jobs(BALANCED, source_fps=12, alpha_threshold=100)[:4]:
            assert job.scale == job.variant
            assert job.fps == 12
            assert job.max_colors == 256
            assert job.lossy == 60
            assert job.dither == "sierra2_4a"
            assert job.alpha_threshold == 100

    def test_raw_job(self):
        raw = build_jobs(QUALITY_PRESETS["small"], source_fps=15, alpha_threshold=128)[-1]
        assert raw.scale is None
        assert raw.fps == 15
        assert raw.max_colors == 256
        assert raw.lossy == 0
        assert raw.label == "raw (original resolution)"

    def test_base_fps_overrides_preset(self):
        jobs = build_jobs(QUALITY_PRESETS["high"], source_fps=20, alpha_threshold=128, base_fps=20)
        assert all(j.fps == 20 for j in jobs)
        assert all(j.input_fps == 20 for j in jobs)

    def test_with_params_returns_new_job(self):
        job = build_jobs(BALANCED, 12, 128)[0]
        changed = job.with_params(fps=10)
        assert changed.fps == 10
        assert job.fps == 12
        with pytest.raises(dataclasses.FrozenInstanceError):
            job.fps = 5


def test_output_names():
    assert output_filename(28) == "emote_28x28.gif"
    assert output_filename(512) == "emote_512x512.gif"
    assert output_filename("raw") == "emote_raw.gif"
    assert variant_label(112) == "112x112"


class TestCoordinator:
    def test_lossy_job_goes_through_optimizer(self, tmp_path):
        encoder = FakePaletteEncoder(default_size=3000)
        optimizer = FakeOptimizer()
        coordinator = EncoderCoordinator(encoder, optimizer)
        job = build_jobs(BALANCED, 12, 128)[1]

        result = coordinator.encode(job, tmp_path, tmp_path)

        assert result.path == tmp_path / "emote_56x56.gif"
        assert result.size_bytes == 3000
        assert result.job is job
        assert optimizer.calls == [("raw_56x56.gif", 60)]

    def test_zero_lossy_skips_optimizer(self, tmp_path):
        optimizer = FakeOptimizer()
        coordinator = EncoderCoordinator(FakePaletteEncoder(), optimizer)
        raw_job = build_jobs(BALANCED, 12, 128)[-1]

        result = coordinator.encode(raw_job, tmp_path, tmp_path)

        assert optimizer.calls == []
        assert result.path == tmp_path / "emote_raw.gif"
        assert result.path.exists()
        assert not (tmp_path / "raw_raw.gif").exists()

    def test_encode_passes_palette_parameters(self, tmp_path):
        encoder = FakePaletteEncoder()
        coordinator = EncoderCoordinator(encoder, FakeOptimizer())
        job = build_jobs(BALANCED, 12, 90)[0].with_params(fps=10, max_colors=192)

        coordinator.encode(job, tmp_path, tmp_path)

        assert encoder.calls == [{
            "tag": "28x28",
            "scale": 28,
            "fps": 10,
            "max_colors": 192,
            "dither": "sierra2_4a",
            "alpha_threshold": 90,
            "input_fps": 12,
        }]

    def test_encode_all(self, tmp_path):
        encoder = FakePaletteEncoder()
        coordinator = EncoderCoordinator(encoder, FakeOptimizer())

        results = coordinator.encode_all(tmp_path, tmp_path, BALANCED, 12, 128)

        assert [r.variant for r in results] == [28, 56, 112, 512, "raw"]
        assert all(not r.degraded for r in results)
        assert [c["tag"] for c in encoder.calls] == ["28x28", "56x56", "112x112", "512x512", "raw"]
